from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

from ..geom import Vec2, Vec3

FORMAT_TAG: Final[str] = "{SHAVITREPLAYFORMAT}{FINAL}"
LATEST_FORMAT_VERSION: Final[int] = 8
DEFAULT_TICK_RATE: Final[float] = 100.0

MAP_NAME_MAX_BYTES: Final[int] = 256
AUTHOR_TEXT_MAX_BYTES: Final[int] = 32

# Format revisions that change the layout.
VERSION_FRAME_FLAGS: Final[int] = 2
VERSION_MAP_INFO: Final[int] = 3
VERSION_AUTHOR_ACCOUNT: Final[int] = 4
VERSION_TICK_RATE: Final[int] = 5
VERSION_FRAME_MOUSE: Final[int] = 6
VERSION_STORED_PLAYABLE_COUNT: Final[int] = 7
VERSION_ZONE_OFFSET: Final[int] = 8


@dataclass(frozen=True, slots=True)
class Frame:
    origin: Vec3
    pitch: float
    yaw: float
    buttons: int = 0


@dataclass(frozen=True, slots=True)
class Replay:
    format_version: int
    frame_count: int
    finish_time: float
    author_id: int
    frames: tuple[Frame, ...]
    map_name: str = ""
    style: int = 0
    track: int = 0
    pre_frame_count: int = 0
    post_frame_count: int = 0
    tick_rate: float | None = None
    zone_offset: Vec2 = field(default_factory=Vec2)

    def __post_init__(self) -> None:
        if int(self.frame_count) != len(self.frames):
            raise ValueError(f"frame_count {self.frame_count} does not match {len(self.frames)} frames")

    @property
    def raw_frame_count(self) -> int:
        """Frame count as stored on disk, before legacy pre/post correction."""
        if self.format_version >= VERSION_STORED_PLAYABLE_COUNT:
            return self.frame_count
        count = self.frame_count + self.pre_frame_count
        if self.format_version >= VERSION_TICK_RATE:
            count += self.post_frame_count
        return count

    @property
    def author_steam3(self) -> str:
        return f"[U:1:{int(self.author_id) & 0xFFFF_FFFF}]"
