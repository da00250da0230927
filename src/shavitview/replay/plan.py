"""
Version-gated layout of the shavit replay format.

Header (little-endian), after the `<version>:{SHAVITREPLAYFORMAT}{FINAL}` line:
  - v>=3: map name (zero-terminated, <=256 bytes), style u8, track u8, pre frames i32
  - frame count i32, finish time f32
  - v>=4: author account id i32; older: author text (zero-terminated, <=32 bytes)
  - v>=5: post frames i32, tick rate f32
  - v>=8: zone offset x/y f32

Frame:
  - origin 3*f32, pitch f32, yaw f32, buttons i32      (24 bytes)
  - v>=2: flags i32, movetype i32                      (32 bytes)
  - v>=6: mouse xy i32, velocity i32                   (40 bytes)

Older revisions stored the total recorded frame count; v<7 subtracts pre frames
right after the count is read and post frames once they are known (v>=5).
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import TypeAlias

from construct import Adapter, Array, Construct, Float32l, Int8ul, Int32sl, Padding, SizeofError, Struct
from construct.core import stream_read

from .types import (
    AUTHOR_TEXT_MAX_BYTES,
    MAP_NAME_MAX_BYTES,
    VERSION_AUTHOR_ACCOUNT,
    VERSION_FRAME_FLAGS,
    VERSION_FRAME_MOUSE,
    VERSION_MAP_INFO,
    VERSION_STORED_PLAYABLE_COUNT,
    VERSION_TICK_RATE,
    VERSION_ZONE_OFFSET,
)

_NON_DIGIT_RE = re.compile(r"[^0-9]")


class BoundedCString(Construct):
    """Single-byte text that ends at a zero byte or after `max_len` bytes.

    The terminator is consumed. Surrounding whitespace is trimmed.
    """

    def __init__(self, max_len: int, encoding: str = "latin-1") -> None:
        super().__init__()
        self.max_len = int(max_len)
        self.encoding = encoding

    def _parse(self, stream, context, path):
        raw = bytearray()
        for _ in range(self.max_len):
            byte = stream_read(stream, 1, path)
            if byte == b"\x00":
                break
            raw += byte
        return raw.decode(self.encoding).strip()

    def _sizeof(self, context, path):
        raise SizeofError("bounded C string has no fixed size", path=path)


class AuthorDigits(Adapter):
    """Legacy author text (e.g. `STEAM_0:1:2345`) reduced to its decimal digits."""

    def _decode(self, obj, context, path):
        digits = _NON_DIGIT_RE.sub("", str(obj))
        return int(digits) if digits else 0


MAP_NAME = BoundedCString(MAP_NAME_MAX_BYTES)
AUTHOR_TEXT = AuthorDigits(BoundedCString(AUTHOR_TEXT_MAX_BYTES))

FRAME_V1 = Struct(
    "origin" / Array(3, Float32l),
    "pitch" / Float32l,
    "yaw" / Float32l,
    "buttons" / Int32sl,
)
FRAME_V2 = Struct(
    *FRAME_V1.subcons,
    Padding(8),  # flags, movetype
)
FRAME_V6 = Struct(
    *FRAME_V2.subcons,
    Padding(8),  # mouse xy, velocity
)

_FRAME_LAYOUTS: tuple[tuple[int, Struct], ...] = (
    (VERSION_FRAME_MOUSE, FRAME_V6),
    (VERSION_FRAME_FLAGS, FRAME_V2),
    (1, FRAME_V1),
)


def _in_range(version: int, since: int, until: int | None) -> bool:
    if version < since:
        return False
    return until is None or version < until


@dataclass(frozen=True, slots=True)
class FieldRead:
    name: str
    codec: Construct
    since: int = 1
    until: int | None = None

    def applies(self, version: int) -> bool:
        return _in_range(int(version), self.since, self.until)


@dataclass(frozen=True, slots=True)
class FrameCountAdjust:
    subtract: str
    since: int = 1
    until: int | None = None

    def applies(self, version: int) -> bool:
        return _in_range(int(version), self.since, self.until)


PlanStep: TypeAlias = FieldRead | FrameCountAdjust

HEADER_PLAN: tuple[PlanStep, ...] = (
    FieldRead("map_name", MAP_NAME, since=VERSION_MAP_INFO),
    FieldRead("style", Int8ul, since=VERSION_MAP_INFO),
    FieldRead("track", Int8ul, since=VERSION_MAP_INFO),
    FieldRead("pre_frame_count", Int32sl, since=VERSION_MAP_INFO),
    FieldRead("frame_count", Int32sl),
    FieldRead("finish_time", Float32l),
    FrameCountAdjust("pre_frame_count", since=VERSION_MAP_INFO, until=VERSION_STORED_PLAYABLE_COUNT),
    FieldRead("author_id", Int32sl, since=VERSION_AUTHOR_ACCOUNT),
    FieldRead("author_id", AUTHOR_TEXT, until=VERSION_AUTHOR_ACCOUNT),
    FieldRead("post_frame_count", Int32sl, since=VERSION_TICK_RATE),
    FieldRead("tick_rate", Float32l, since=VERSION_TICK_RATE),
    FrameCountAdjust("post_frame_count", since=VERSION_TICK_RATE, until=VERSION_STORED_PLAYABLE_COUNT),
    FieldRead("zone_offset_x", Float32l, since=VERSION_ZONE_OFFSET),
    FieldRead("zone_offset_y", Float32l, since=VERSION_ZONE_OFFSET),
)


def header_plan(version: int) -> tuple[PlanStep, ...]:
    return tuple(step for step in HEADER_PLAN if step.applies(version))


def frame_layout(version: int) -> Struct:
    for since, layout in _FRAME_LAYOUTS:
        if int(version) >= since:
            return layout
    raise ValueError(f"no frame layout for version {version}")


def frame_size(version: int) -> int:
    return int(frame_layout(version).sizeof())
