from __future__ import annotations

import math

import pyray as rl

from .config import ViewerConfig
from .console import ConsoleLog
from .geom import Vec3
from .playback import Pose
from .session import PlaybackSession
from .world import camera_rotation, remap_z_up, view_direction, world_position

SEEK_STEP_SECONDS = 5.0
SPEED_STEPS = (0.25, 0.5, 1.0, 2.0, 4.0)
CHASE_DISTANCE = 160.0
CHASE_HEIGHT = 64.0

BG_COLOR = rl.Color(34, 34, 34, 255)
TRAIL_COLOR = rl.Color(255, 200, 80, 200)
MARKER_COLOR = rl.Color(80, 160, 255, 255)
UI_TEXT_COLOR = rl.Color(220, 220, 220, 255)
UI_HINT_COLOR = rl.Color(140, 140, 140, 255)
UI_TEXT_SIZE = 18
UI_LINE_HEIGHT = 22


def hud_lines(session: PlaybackSession) -> list[str]:
    replay = session.replay
    if replay is None:
        return ["No replay loaded."]
    cursor = session.cursor
    pose = cursor.pose
    state = "finished" if cursor.is_playing and cursor.finished else cursor.state.value
    pitch, yaw = (math.degrees(angle) for angle in camera_rotation(pose))
    return [
        f"Map: {replay.map_name or '-'}",
        f"Frames: {replay.frame_count}",
        f"Tickrate: {cursor.tick_rate:.2f}",
        f"Time: {cursor.elapsed_time:7.2f} / {cursor.duration:.2f}  [{state}] {session.speed:g}x",
        f"Frame: {pose.frame_index}  Camera: pitch {pitch:6.1f} yaw {yaw:6.1f}",
    ]


def trail_points(session: PlaybackSession, *, step: int, eye_height: float = 0.0) -> list[Vec3]:
    replay = session.replay
    if replay is None:
        return []
    offset = replay.zone_offset
    lift = float(eye_height)
    points = [
        remap_z_up(Vec3(frame.origin.x + offset.x, frame.origin.y + offset.y, frame.origin.z + lift))
        for frame in replay.frames[:: max(1, int(step))]
    ]
    last = replay.frames[-1] if replay.frames else None
    if last is not None and (len(replay.frames) - 1) % max(1, int(step)) != 0:
        points.append(remap_z_up(Vec3(last.origin.x + offset.x, last.origin.y + offset.y, last.origin.z + lift)))
    return points


class ReplayView:
    def __init__(self, session: PlaybackSession, *, config: ViewerConfig, console: ConsoleLog) -> None:
        self._session = session
        self._config = config
        self._console = console
        self._trail: list[Vec3] = []
        self._pose: Pose | None = None
        self._chase = False
        self._camera = rl.Camera3D(
            rl.Vector3(0.0, 0.0, 0.0),
            rl.Vector3(1.0, 0.0, 0.0),
            rl.Vector3(0.0, 1.0, 0.0),
            float(config.fov),
            rl.CameraProjection.CAMERA_PERSPECTIVE,
        )

    def open(self) -> None:
        session = self._session
        replay = session.replay
        if replay is None:
            self._console.log("no replay loaded")
            return
        self._trail = trail_points(session, step=self._config.trail_step, eye_height=self._config.eye_height)
        self._pose = session.cursor.pose
        self._console.log(
            f"replay loaded: map={replay.map_name!r} frames={replay.frame_count} tickrate={session.cursor.tick_rate:.2f}"
        )

    def close(self) -> None:
        self._console.flush()

    def _cycle_speed(self, direction: int) -> None:
        session = self._session
        speeds = SPEED_STEPS
        current = min(range(len(speeds)), key=lambda idx: abs(speeds[idx] - session.speed))
        idx = max(0, min(len(speeds) - 1, current + direction))
        session.speed = speeds[idx]
        self._console.log(f"speed {session.speed:g}x")

    def _handle_input(self) -> None:
        session = self._session
        if rl.is_key_pressed(rl.KeyboardKey.KEY_SPACE):
            session.toggle()
        if rl.is_key_pressed(rl.KeyboardKey.KEY_R):
            session.reset()
        if rl.is_key_pressed(rl.KeyboardKey.KEY_LEFT):
            session.seek_relative(-SEEK_STEP_SECONDS)
        if rl.is_key_pressed(rl.KeyboardKey.KEY_RIGHT):
            session.seek_relative(SEEK_STEP_SECONDS)
        if rl.is_key_pressed(rl.KeyboardKey.KEY_UP):
            self._cycle_speed(1)
        if rl.is_key_pressed(rl.KeyboardKey.KEY_DOWN):
            self._cycle_speed(-1)
        if rl.is_key_pressed(rl.KeyboardKey.KEY_C):
            self._chase = not self._chase

    def update(self, dt: float) -> None:
        if not self._session.loaded:
            return
        self._handle_input()
        pose = self._session.tick(dt)
        self._pose = pose
        eye = world_position(pose, eye_height=self._config.eye_height)
        forward = view_direction(pose)
        if self._chase:
            back = Vec3(forward.x, 0.0, forward.z).normalized() * CHASE_DISTANCE
            position = eye - back + Vec3(0.0, CHASE_HEIGHT, 0.0)
            target = eye
        else:
            position = eye
            target = eye + forward
        self._camera.position = position.to_rl()
        self._camera.target = target.to_rl()

    def _draw_trail(self) -> None:
        points = self._trail
        for start, end in zip(points, points[1:]):
            rl.draw_line_3d(start.to_rl(), end.to_rl(), TRAIL_COLOR)
        if self._chase and self._pose is not None:
            marker = world_position(self._pose, eye_height=self._config.eye_height)
            rl.draw_sphere(marker.to_rl(), 8.0, MARKER_COLOR)

    def _draw_hud(self) -> None:
        x = 12
        y = 12
        for line in hud_lines(self._session):
            rl.draw_text(line, x, y, UI_TEXT_SIZE, UI_TEXT_COLOR)
            y += UI_LINE_HEIGHT
        if not self._session.loaded:
            return
        hints = "Space: play/pause  R: reset  Left/Right: seek  Up/Down: speed  C: chase camera"
        rl.draw_text(hints, x, y, UI_TEXT_SIZE, UI_HINT_COLOR)
        y += UI_LINE_HEIGHT
        for line in self._console.tail(3):
            rl.draw_text(line, x, y, UI_TEXT_SIZE, UI_HINT_COLOR)
            y += UI_LINE_HEIGHT

    def draw(self) -> None:
        rl.clear_background(BG_COLOR)
        rl.begin_mode_3d(self._camera)
        rl.draw_grid(int(self._config.grid_slices), float(self._config.grid_spacing))
        self._draw_trail()
        rl.end_mode_3d()
        self._draw_hud()
