from __future__ import annotations

import math
import warnings

import pytest

from shavitview.geom import Vec2, Vec3
from shavitview.replay import (
    FORMAT_TAG,
    FormatError,
    Frame,
    Replay,
    ReplayFormatVersionWarning,
    TruncatedInputError,
    VersionError,
    decode_replay,
    load_replay_file,
)

FRAMES = (
    ((0.0, 0.0, 0.0), 0.0, 90.0, 0),
    ((10.0, -4.0, 64.0), 12.5, 95.0, 2),
    ((20.0, -8.0, 72.0), -30.0, 100.0, 0x202),
)


def _line_len(version: int) -> int:
    return len(f"{version}:{FORMAT_TAG}\n")


def test_decode_v8_header_and_frames(replay_bytes) -> None:
    data = replay_bytes(
        8,
        FRAMES,
        map_name=b"bhop_test",
        style=3,
        track=1,
        pre_frames=5,
        post_frames=7,
        finish_time=12.5,
        author_id=4242,
        tick_rate=128.0,
        zone_offset=(100.0, -50.0),
    )

    replay = decode_replay(data)

    assert replay.format_version == 8
    assert replay.map_name == "bhop_test"
    assert replay.style == 3
    assert replay.track == 1
    assert replay.pre_frame_count == 5
    assert replay.post_frame_count == 7
    assert replay.frame_count == 3
    assert replay.finish_time == 12.5
    assert replay.author_id == 4242
    assert replay.tick_rate == 128.0
    assert replay.zone_offset == Vec2(100.0, -50.0)
    assert replay.frames[1] == Frame(origin=Vec3(10.0, -4.0, 64.0), pitch=12.5, yaw=95.0, buttons=2)
    assert replay.frames[2].buttons == 0x202


def test_decode_is_deterministic(replay_bytes) -> None:
    data = replay_bytes(6, FRAMES, pre_frames=1, post_frames=1)

    assert decode_replay(data) == decode_replay(data)


def test_decode_keeps_frames_verbatim(replay_bytes) -> None:
    frames = (((512.0, 1024.0, -96.0), 0.0, 0.0, 0), ((520.0, 1030.0, -96.0), 0.0, 0.0, 0))

    replay = decode_replay(replay_bytes(8, frames, zone_offset=(16.0, 16.0)))

    assert replay.frames[0].origin == Vec3(512.0, 1024.0, -96.0)


def test_decode_v3_subtracts_pre_frames(replay_bytes) -> None:
    frames = [((float(i), 0.0, 0.0), 0.0, 0.0, 0) for i in range(8)]
    data = replay_bytes(3, frames, pre_frames=2, frame_count=10)

    replay = decode_replay(data)

    assert replay.frame_count == 8
    assert len(replay.frames) == 8
    assert replay.raw_frame_count == 10
    assert replay.frames[-1].origin.x == 7.0
    assert replay.tick_rate is None


def test_decode_v3_frames_use_32_byte_stride(replay_bytes) -> None:
    frames = [((float(i), 0.0, 0.0), 0.0, 0.0, 0) for i in range(8)]
    data = replay_bytes(3, frames, pre_frames=2, frame_count=10)
    header_end = _line_len(3) + len(b"bhop_test\x00") + 6 + 8 + len(b"STEAM_0:1:4242\x00")

    assert len(data) == header_end + 8 * 32
    with pytest.raises(TruncatedInputError) as excinfo:
        decode_replay(data[:-1])
    assert excinfo.value.frame_index == 7
    assert excinfo.value.offset == header_end + 7 * 32


def test_decode_v5_subtracts_pre_and_post_frames(replay_bytes) -> None:
    data = replay_bytes(5, FRAMES, pre_frames=4, post_frames=6)

    replay = decode_replay(data)

    assert replay.frame_count == 3
    assert replay.raw_frame_count == 13
    assert replay.frame_count == len(replay.frames)


def test_decode_v4_ignores_post_frames_field_absence(replay_bytes) -> None:
    data = replay_bytes(4, FRAMES, pre_frames=2)

    replay = decode_replay(data)

    assert replay.frame_count == 3
    assert replay.post_frame_count == 0
    assert replay.author_id == 4242


def test_decode_v7_does_not_subtract(replay_bytes) -> None:
    data = replay_bytes(7, FRAMES, pre_frames=100, post_frames=200)

    replay = decode_replay(data)

    assert replay.frame_count == 3
    assert replay.raw_frame_count == 3
    assert replay.zone_offset == Vec2()


def test_decode_v1_legacy_layout(replay_bytes) -> None:
    data = replay_bytes(1, FRAMES, author_text=b"STEAM_0:1:12345")

    replay = decode_replay(data)

    assert replay.map_name == ""
    assert replay.style == 0
    assert replay.track == 0
    assert replay.author_id == 112345
    assert replay.frame_count == 3
    assert len(data) == _line_len(1) + 8 + len(b"STEAM_0:1:12345\x00") + 3 * 24


def test_decode_author_text_without_digits_is_zero(replay_bytes) -> None:
    replay = decode_replay(replay_bytes(2, FRAMES, author_text=b"BOT"))

    assert replay.author_id == 0


def test_decode_map_name_is_trimmed(replay_bytes) -> None:
    replay = decode_replay(replay_bytes(8, FRAMES, map_name=b"  surf_mesa \t"))

    assert replay.map_name == "surf_mesa"


def test_decode_map_name_stops_at_max_length(replay_bytes) -> None:
    # No terminator: the next field starts right after 256 bytes.
    data = replay_bytes(8, FRAMES, map_name=b"a" * 256, style=9)
    data = data.replace(b"a" * 256 + b"\x00", b"a" * 256, 1)

    replay = decode_replay(data)

    assert replay.map_name == "a" * 256
    assert replay.style == 9
    assert replay.frame_count == 3


@pytest.mark.parametrize("version", range(1, 9))
def test_wrong_format_tag_is_rejected(replay_bytes, version: int) -> None:
    data = replay_bytes(version, FRAMES, tag="{SHAVITREPLAYFORMAT}{BETA}")

    with pytest.raises(FormatError):
        decode_replay(data)


def test_missing_separator_is_rejected() -> None:
    with pytest.raises(FormatError):
        decode_replay(b"not a replay\n\x00\x00\x00\x00")


def test_empty_input_is_rejected() -> None:
    with pytest.raises(FormatError):
        decode_replay(b"")


@pytest.mark.parametrize("token", ["x", "", "1.5", "-3", "0"])
def test_bad_version_token_is_rejected(token: str) -> None:
    with pytest.raises(VersionError):
        decode_replay(f"{token}:{FORMAT_TAG}\n".encode("latin-1") + b"\x00" * 64)


def test_truncated_header_field_reports_offset(replay_bytes) -> None:
    data = replay_bytes(8, FRAMES, map_name=b"bhop_test")
    frame_count_offset = _line_len(8) + len(b"bhop_test\x00") + 1 + 1 + 4

    with pytest.raises(TruncatedInputError) as excinfo:
        decode_replay(data[: frame_count_offset + 2])

    assert excinfo.value.offset == frame_count_offset
    assert excinfo.value.field == "frame_count"
    assert excinfo.value.frame_index is None
    assert str(frame_count_offset) in str(excinfo.value)


def test_truncated_map_name_reports_field_start(replay_bytes) -> None:
    data = replay_bytes(8, FRAMES, map_name=b"bhop_test")

    with pytest.raises(TruncatedInputError) as excinfo:
        decode_replay(data[: _line_len(8) + 4])

    assert excinfo.value.offset == _line_len(8)
    assert excinfo.value.field == "map_name"


def test_truncated_frame_reports_index_and_offset(replay_bytes) -> None:
    data = replay_bytes(8, FRAMES)
    frames_start = len(data) - 3 * 40

    with pytest.raises(TruncatedInputError) as excinfo:
        decode_replay(data[: frames_start + 2 * 40 + 17])

    assert excinfo.value.frame_index == 2
    assert excinfo.value.offset == frames_start + 80
    assert "frame #2" in str(excinfo.value)


@pytest.mark.parametrize("version", [1, 3, 5, 8])
def test_every_truncation_point_raises(replay_bytes, version: int) -> None:
    data = replay_bytes(version, FRAMES[:2], pre_frames=1, post_frames=1)

    for cut in range(_line_len(version), len(data)):
        with pytest.raises(TruncatedInputError):
            decode_replay(data[:cut])


def test_trailing_bytes_are_ignored(replay_bytes) -> None:
    data = replay_bytes(8, FRAMES)

    assert decode_replay(data + b"\xff" * 13) == decode_replay(data)


def test_negative_playable_frame_count_is_rejected(replay_bytes) -> None:
    data = replay_bytes(5, (), pre_frames=3, post_frames=0, frame_count=1)

    with pytest.raises(FormatError, match="negative"):
        decode_replay(data)


def test_newer_format_version_warns_and_uses_latest_layout(replay_bytes) -> None:
    data = replay_bytes(8, FRAMES, zone_offset=(1.0, 2.0)).replace(b"8:", b"9:", 1)

    with pytest.warns(ReplayFormatVersionWarning, match="newer"):
        replay = decode_replay(data)

    assert replay.format_version == 9
    assert replay.zone_offset == Vec2(1.0, 2.0)
    assert replay.frame_count == 3


def test_known_versions_do_not_warn(replay_bytes) -> None:
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        decode_replay(replay_bytes(8, FRAMES))


def test_nan_floats_are_preserved(replay_bytes) -> None:
    frames = (((math.nan, 0.0, 0.0), 0.0, 0.0, 0),)

    replay = decode_replay(replay_bytes(8, frames))

    assert math.isnan(replay.frames[0].origin.x)


def test_load_replay_file(tmp_path, replay_bytes) -> None:
    path = tmp_path / "run.replay"
    path.write_bytes(replay_bytes(8, FRAMES))

    replay = load_replay_file(path)

    assert replay.frame_count == 3


def test_replay_rejects_mismatched_frame_count() -> None:
    with pytest.raises(ValueError, match="does not match"):
        Replay(format_version=8, frame_count=2, finish_time=0.0, author_id=0, frames=())


def test_replay_author_steam3() -> None:
    replay = Replay(format_version=8, frame_count=0, finish_time=0.0, author_id=4242, frames=())

    assert replay.author_steam3 == "[U:1:4242]"
