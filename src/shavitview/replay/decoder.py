from __future__ import annotations

import io
from pathlib import Path
import re
import warnings

from construct import ConstructError, StreamError

from ..geom import Vec2, Vec3
from .plan import FrameCountAdjust, frame_layout, header_plan
from .types import FORMAT_TAG, LATEST_FORMAT_VERSION, Frame, Replay

_HEADER_TERMINATORS = (0x0A, 0x0D)
_VERSION_RE = re.compile(r"[0-9]+")


class ReplayFormatError(ValueError):
    pass


class FormatError(ReplayFormatError):
    """The header line does not carry the shavit format tag, or the layout is inconsistent."""


class VersionError(ReplayFormatError):
    """The header line version token is not a usable format version."""


class TruncatedInputError(ReplayFormatError):
    """The input ended inside a header field or a frame.

    `offset` is where the failing field (or frame) starts, not the byte where
    the read ran out. A map name cut short reports the offset of its first byte.
    """

    def __init__(self, offset: int, *, field: str, frame_index: int | None = None) -> None:
        self.offset = int(offset)
        self.field = str(field)
        self.frame_index = None if frame_index is None else int(frame_index)
        if self.frame_index is not None:
            message = f"frame #{self.frame_index} incomplete at offset {self.offset}"
        else:
            message = f"unexpected EOF reading {self.field} at offset {self.offset}"
        super().__init__(message)


class ReplayFormatVersionWarning(UserWarning):
    """Replay uses a format revision newer than the ones this decoder knows about."""


def read_header_line(data: bytes) -> tuple[str, int]:
    """Return the header line text and the offset just past its terminator."""
    for idx, byte in enumerate(data):
        if byte in _HEADER_TERMINATORS:
            return data[:idx].decode("latin-1"), idx + 1
    return data.decode("latin-1"), len(data)


def parse_header_line(line: str) -> int:
    version_token, sep, tag = line.partition(":")
    if not sep:
        raise FormatError(f"unrecognized replay header: {line[:64]!r}")
    if tag != FORMAT_TAG:
        raise FormatError(f"unrecognized replay format tag: {tag[:64]!r}")
    token = version_token.strip()
    if _VERSION_RE.fullmatch(token) is None:
        raise VersionError(f"invalid replay format version: {version_token!r}")
    version = int(token)
    if version < 1:
        raise VersionError(f"invalid replay format version: {version}")
    return version


def _decode_header_fields(stream: io.BytesIO, version: int) -> dict[str, object]:
    fields: dict[str, object] = {}
    for step in header_plan(version):
        if isinstance(step, FrameCountAdjust):
            fields["frame_count"] = int(fields["frame_count"]) - int(fields[step.subtract])
            continue
        start = stream.tell()
        try:
            fields[step.name] = step.codec.parse_stream(stream)
        except StreamError as exc:
            raise TruncatedInputError(start, field=step.name) from exc
        except ConstructError as exc:
            raise FormatError(f"failed to parse {step.name} at offset {start}: {exc}") from exc
    return fields


def _decode_frames(stream: io.BytesIO, version: int, frame_count: int, total_size: int) -> tuple[Frame, ...]:
    layout = frame_layout(version)
    stride = int(layout.sizeof())
    frames: list[Frame] = []
    for index in range(frame_count):
        start = stream.tell()
        if start + stride > total_size:
            raise TruncatedInputError(start, field="frame", frame_index=index)
        raw = layout.parse_stream(stream)
        x, y, z = raw["origin"]
        frames.append(
            Frame(
                origin=Vec3(float(x), float(y), float(z)),
                pitch=float(raw["pitch"]),
                yaw=float(raw["yaw"]),
                buttons=int(raw["buttons"]),
            )
        )
    return tuple(frames)


def decode_replay(data: bytes) -> Replay:
    """Decode a shavit replay.

    Raises `FormatError`, `VersionError` or `TruncatedInputError`; no partial
    replay is ever returned. Frames are stored exactly as recorded.
    """

    data = bytes(data)
    line, offset = read_header_line(data)
    version = parse_header_line(line)
    if version > LATEST_FORMAT_VERSION:
        warnings.warn(
            f"Replay format version {version} is newer than {LATEST_FORMAT_VERSION}; decoding with the latest known layout.",
            category=ReplayFormatVersionWarning,
            stacklevel=2,
        )

    stream = io.BytesIO(data)
    stream.seek(offset)
    fields = _decode_header_fields(stream, version)

    frame_count = int(fields["frame_count"])
    if frame_count < 0:
        raise FormatError(f"negative playable frame count: {frame_count}")

    frames = _decode_frames(stream, version, frame_count, len(data))

    tick_rate = fields.get("tick_rate")
    return Replay(
        format_version=version,
        map_name=str(fields.get("map_name", "")),
        style=int(fields.get("style", 0)),
        track=int(fields.get("track", 0)),
        pre_frame_count=int(fields.get("pre_frame_count", 0)),
        post_frame_count=int(fields.get("post_frame_count", 0)),
        frame_count=frame_count,
        finish_time=float(fields["finish_time"]),
        author_id=int(fields["author_id"]),
        tick_rate=None if tick_rate is None else float(tick_rate),
        zone_offset=Vec2(float(fields.get("zone_offset_x", 0.0)), float(fields.get("zone_offset_y", 0.0))),
        frames=frames,
    )


def load_replay_file(path: Path) -> Replay:
    path = Path(path)
    return decode_replay(path.read_bytes())
