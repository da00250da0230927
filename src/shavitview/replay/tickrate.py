from __future__ import annotations

import warnings

from .types import DEFAULT_TICK_RATE, Replay


class InvalidTickRateWarning(UserWarning):
    """The replay's recorded tick rate is unusable and a default is substituted."""


def effective_tick_rate(replay: Replay, *, default: float = DEFAULT_TICK_RATE) -> float:
    """Return the tick rate playback should use for `replay`.

    Formats without a tick rate field fall back to `default` silently; a recorded
    value <= 1 (or NaN) falls back with an `InvalidTickRateWarning`.
    """

    tick_rate = replay.tick_rate
    if tick_rate is None:
        return float(default)
    # Written as a negated comparison so NaN is rejected too.
    if not float(tick_rate) > 1.0:
        warnings.warn(
            f"Replay tick rate {tick_rate!r} is invalid; using {float(default)!r}.",
            category=InvalidTickRateWarning,
            stacklevel=2,
        )
        return float(default)
    return float(tick_rate)


def sample_interval(replay: Replay, *, default: float = DEFAULT_TICK_RATE) -> float:
    return 1.0 / effective_tick_rate(replay, default=default)


def replay_duration(replay: Replay, *, default: float = DEFAULT_TICK_RATE) -> float:
    """Playback time at which the last frame is reached."""
    if replay.frame_count < 2:
        return 0.0
    return float(replay.frame_count - 1) * sample_interval(replay, default=default)
