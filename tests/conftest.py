from __future__ import annotations

import struct
import sys
from pathlib import Path
from typing import Callable, Sequence

import pytest

FORMAT_TAG = "{SHAVITREPLAYFORMAT}{FINAL}"

FrameSpec = tuple[tuple[float, float, float], float, float, int]


def pytest_configure(config: pytest.Config) -> None:
    # Ensure the local `src/` tree wins over any other editable install that may exist
    # (e.g. a different git worktree pointing at the same project).
    src_dir = Path(__file__).resolve().parents[1] / "src"
    src_str = str(src_dir)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


def build_replay_bytes(
    version: int,
    frames: Sequence[FrameSpec] = (),
    *,
    map_name: bytes = b"bhop_test",
    style: int = 0,
    track: int = 0,
    pre_frames: int = 0,
    post_frames: int = 0,
    finish_time: float = 12.5,
    author_id: int = 4242,
    author_text: bytes = b"STEAM_0:1:4242",
    tick_rate: float = 100.0,
    zone_offset: tuple[float, float] = (0.0, 0.0),
    frame_count: int | None = None,
    tag: str = FORMAT_TAG,
) -> bytes:
    out = bytearray(f"{version}:{tag}\n".encode("latin-1"))
    if version >= 3:
        out += map_name + b"\x00"
        out += struct.pack("<BBi", style, track, pre_frames)
    if frame_count is None:
        frame_count = len(frames)
        if version < 7:
            frame_count += pre_frames if version >= 3 else 0
            frame_count += post_frames if version >= 5 else 0
    out += struct.pack("<if", frame_count, finish_time)
    if version >= 4:
        out += struct.pack("<i", author_id)
    else:
        out += author_text + b"\x00"
    if version >= 5:
        out += struct.pack("<if", post_frames, tick_rate)
    if version >= 8:
        out += struct.pack("<ff", *zone_offset)
    for origin, pitch, yaw, buttons in frames:
        out += struct.pack("<fffffi", *origin, pitch, yaw, buttons)
        if version >= 2:
            out += struct.pack("<ii", 0x40, 2)
        if version >= 6:
            out += struct.pack("<ii", 7, 350)
    return bytes(out)


@pytest.fixture
def replay_bytes() -> Callable[..., bytes]:
    return build_replay_bytes
