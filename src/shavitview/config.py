from __future__ import annotations

from pathlib import Path

import msgspec

from .replay import DEFAULT_TICK_RATE

CONFIG_NAME = "shavitview.json"


class ConfigError(ValueError):
    pass


class ViewerConfig(msgspec.Struct, forbid_unknown_fields=True):
    default_tick_rate: float = DEFAULT_TICK_RATE
    playback_speed: float = 1.0
    wrap_yaw: bool = False
    window_width: int = 1280
    window_height: int = 720
    fps: int = 60
    fov: float = 75.0
    eye_height: float = 0.0
    grid_slices: int = 50
    grid_spacing: float = 40.0
    # Draw every Nth frame of the path trail.
    trail_step: int = 10


def _validate(config: ViewerConfig) -> None:
    if not config.default_tick_rate > 1.0:
        raise ConfigError(f"default_tick_rate must be > 1, got {config.default_tick_rate!r}")
    if config.playback_speed < 0.0:
        raise ConfigError(f"playback_speed must be non-negative, got {config.playback_speed!r}")
    if config.window_width <= 0 or config.window_height <= 0:
        raise ConfigError(f"invalid window size: {config.window_width}x{config.window_height}")
    if config.fps <= 0:
        raise ConfigError(f"fps must be positive, got {config.fps}")
    if config.trail_step <= 0:
        raise ConfigError(f"trail_step must be positive, got {config.trail_step}")


def decode_config(data: bytes) -> ViewerConfig:
    try:
        config = msgspec.json.decode(data, type=ViewerConfig)
    except msgspec.ValidationError as exc:
        raise ConfigError(f"invalid config: {exc}") from exc
    except msgspec.DecodeError as exc:
        raise ConfigError(f"malformed config: {exc}") from exc
    _validate(config)
    return config


def encode_config(config: ViewerConfig) -> bytes:
    return msgspec.json.format(msgspec.json.encode(config), indent=2) + b"\n"


def load_config(path: Path) -> ViewerConfig:
    path = Path(path)
    return decode_config(path.read_bytes())


def save_config(path: Path, config: ViewerConfig) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(encode_config(config))


def ensure_config(base_dir: Path) -> ViewerConfig:
    """Load `shavitview.json` from `base_dir`, writing defaults when it is missing."""
    path = Path(base_dir) / CONFIG_NAME
    if path.exists():
        return load_config(path)
    config = ViewerConfig()
    save_config(path, config)
    return config
