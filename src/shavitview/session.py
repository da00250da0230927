from __future__ import annotations

from pathlib import Path

from .playback import Pose, PlaybackCursor
from .replay import DEFAULT_TICK_RATE, Replay, decode_replay


class NoReplayLoadedError(RuntimeError):
    pass


class PlaybackSession:
    """Host-owned playback context: the current replay plus its cursor.

    A replay only becomes current once it has been fully decoded and accepted
    by a fresh cursor; a failed load leaves the previous replay in place.
    """

    def __init__(
        self,
        *,
        default_tick_rate: float = DEFAULT_TICK_RATE,
        wrap_yaw: bool = False,
        speed: float = 1.0,
    ) -> None:
        self.default_tick_rate = float(default_tick_rate)
        self.wrap_yaw = bool(wrap_yaw)
        self.speed = float(speed)
        self.source: Path | None = None
        self._replay: Replay | None = None
        self._cursor: PlaybackCursor | None = None

    @property
    def replay(self) -> Replay | None:
        return self._replay

    @property
    def cursor(self) -> PlaybackCursor:
        if self._cursor is None:
            raise NoReplayLoadedError("no replay loaded")
        return self._cursor

    @property
    def loaded(self) -> bool:
        return self._cursor is not None

    def install(self, replay: Replay, *, source: Path | None = None) -> None:
        cursor = PlaybackCursor(replay, default_tick_rate=self.default_tick_rate, wrap_yaw=self.wrap_yaw)
        self._replay = replay
        self._cursor = cursor
        self.source = source

    def load_bytes(self, data: bytes, *, source: Path | None = None) -> Replay:
        replay = decode_replay(data)
        self.install(replay, source=source)
        return replay

    def load_file(self, path: Path) -> Replay:
        path = Path(path)
        return self.load_bytes(path.read_bytes(), source=path)

    def play(self) -> None:
        self.cursor.play()

    def pause(self) -> None:
        self.cursor.pause()

    def toggle(self) -> None:
        self.cursor.toggle()

    def reset(self) -> None:
        self.cursor.reset()

    def seek(self, seconds: float) -> Pose:
        return self.cursor.seek(seconds)

    def seek_relative(self, delta_seconds: float) -> Pose:
        cursor = self.cursor
        return cursor.seek(cursor.elapsed_time + float(delta_seconds))

    def tick(self, dt: float) -> Pose:
        return self.cursor.advance(float(dt) * self.speed)
