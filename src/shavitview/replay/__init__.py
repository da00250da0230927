from __future__ import annotations

from .decoder import (
    FormatError,
    ReplayFormatError,
    ReplayFormatVersionWarning,
    TruncatedInputError,
    VersionError,
    decode_replay,
    load_replay_file,
)
from .plan import HEADER_PLAN, FieldRead, FrameCountAdjust, frame_layout, frame_size, header_plan
from .tickrate import InvalidTickRateWarning, effective_tick_rate, replay_duration, sample_interval
from .types import DEFAULT_TICK_RATE, FORMAT_TAG, LATEST_FORMAT_VERSION, Frame, Replay

__all__ = [
    "DEFAULT_TICK_RATE",
    "FORMAT_TAG",
    "HEADER_PLAN",
    "LATEST_FORMAT_VERSION",
    "FieldRead",
    "FormatError",
    "Frame",
    "FrameCountAdjust",
    "InvalidTickRateWarning",
    "Replay",
    "ReplayFormatError",
    "ReplayFormatVersionWarning",
    "TruncatedInputError",
    "VersionError",
    "decode_replay",
    "effective_tick_rate",
    "frame_layout",
    "frame_size",
    "header_plan",
    "load_replay_file",
    "replay_duration",
    "sample_interval",
]
