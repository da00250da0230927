from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math

from .geom import Vec2, Vec3
from .math import clamp01, lerp, lerp_angle_degrees
from .replay import DEFAULT_TICK_RATE, Replay, effective_tick_rate


class EmptyReplayError(ValueError):
    pass


class PlaybackState(Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"


@dataclass(frozen=True, slots=True)
class Pose:
    """Interpolated actor pose in recorded space.

    `zone_offset` is forwarded from the replay untouched; applying it is up to
    the consumer (see `shavitview.world`).
    """

    position: Vec3
    yaw: float
    pitch: float
    zone_offset: Vec2
    frame_index: int
    next_index: int
    fraction: float
    buttons: int = 0


class PlaybackCursor:
    """Maps elapsed playback time onto a replay's frames.

    End-of-replay policy: with two or more frames the lower index is clamped to
    `frame_count - 2`, so interpolation runs up to the true last sample and then
    holds it. A single frame is returned unchanged for any time.
    """

    def __init__(
        self,
        replay: Replay,
        *,
        default_tick_rate: float = DEFAULT_TICK_RATE,
        wrap_yaw: bool = False,
    ) -> None:
        self._default_tick_rate = float(default_tick_rate)
        self._wrap_yaw = bool(wrap_yaw)
        self._state = PlaybackState.STOPPED
        self._elapsed = 0.0
        self.load(replay)

    def load(self, replay: Replay) -> None:
        if not replay.frames:
            raise EmptyReplayError("replay has no frames to play")
        tick_rate = effective_tick_rate(replay, default=self._default_tick_rate)
        self._replay = replay
        self._tick_rate = tick_rate
        self._sample_interval = 1.0 / tick_rate
        self.reset()

    @property
    def replay(self) -> Replay:
        return self._replay

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state is PlaybackState.PLAYING

    @property
    def elapsed_time(self) -> float:
        return self._elapsed

    @property
    def tick_rate(self) -> float:
        return self._tick_rate

    @property
    def sample_interval(self) -> float:
        return self._sample_interval

    @property
    def duration(self) -> float:
        return float(max(0, len(self._replay.frames) - 1)) * self._sample_interval

    @property
    def finished(self) -> bool:
        return self._elapsed >= self.duration

    @property
    def pose(self) -> Pose:
        return self.pose_at(self._elapsed)

    def play(self) -> None:
        self._state = PlaybackState.PLAYING

    def pause(self) -> None:
        if self._state is PlaybackState.PLAYING:
            self._state = PlaybackState.PAUSED

    def toggle(self) -> None:
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def reset(self) -> None:
        self._state = PlaybackState.STOPPED
        self._elapsed = 0.0

    def seek(self, seconds: float) -> Pose:
        seconds = float(seconds)
        self._elapsed = seconds if seconds > 0.0 else 0.0
        # STOPPED always sits at time 0.
        if self._state is PlaybackState.STOPPED and self._elapsed > 0.0:
            self._state = PlaybackState.PAUSED
        return self.pose_at(self._elapsed)

    def advance(self, delta_seconds: float) -> Pose:
        if self._state is PlaybackState.PLAYING and float(delta_seconds) > 0.0:
            self._elapsed += float(delta_seconds)
        return self.pose_at(self._elapsed)

    def frame_position(self, seconds: float) -> tuple[int, int, float]:
        """Return `(index, next_index, fraction)` for a playback time."""
        count = len(self._replay.frames)
        if count == 1:
            return 0, 0, 0.0
        raw = float(seconds) / self._sample_interval
        if not raw > 0.0:
            return 0, 1, 0.0
        last = count - 2
        if raw >= count - 1:
            return last, last + 1, 1.0
        index = min(int(math.floor(raw)), last)
        return index, index + 1, clamp01(raw - index)

    def pose_at(self, seconds: float) -> Pose:
        index, next_index, t = self.frame_position(seconds)
        frames = self._replay.frames
        a = frames[index]
        b = frames[next_index]
        if self._wrap_yaw:
            yaw = lerp_angle_degrees(a.yaw, b.yaw, t)
        else:
            yaw = lerp(a.yaw, b.yaw, t)
        return Pose(
            position=Vec3.lerp(a.origin, b.origin, t),
            yaw=yaw,
            pitch=lerp(a.pitch, b.pitch, t),
            zone_offset=self._replay.zone_offset,
            frame_index=index,
            next_index=next_index,
            fraction=t,
            buttons=int(a.buttons),
        )
