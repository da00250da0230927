from __future__ import annotations

from pathlib import Path

import msgspec
import typer

from .config import CONFIG_NAME, ConfigError, ViewerConfig, ensure_config, load_config
from .paths import default_runtime_dir
from .playback import EmptyReplayError, PlaybackCursor
from .replay import Replay, ReplayFormatError, load_replay_file, replay_duration
from .world import world_position

app = typer.Typer(add_completion=False)


def _fail(message: str) -> typer.Exit:
    typer.echo(f"error: {message}", err=True)
    return typer.Exit(code=1)


def _load_replay(path: Path) -> Replay:
    try:
        return load_replay_file(path)
    except OSError as exc:
        raise _fail(f"cannot read {path}: {exc.strerror or exc}") from exc
    except ReplayFormatError as exc:
        raise _fail(str(exc)) from exc


def _load_config(path: Path | None, base_dir: Path) -> ViewerConfig:
    try:
        if path is not None:
            return load_config(path)
        return ensure_config(base_dir)
    except (OSError, ConfigError) as exc:
        raise _fail(str(exc)) from exc


def _make_cursor(replay: Replay, config: ViewerConfig) -> PlaybackCursor:
    try:
        return PlaybackCursor(replay, default_tick_rate=config.default_tick_rate, wrap_yaw=config.wrap_yaw)
    except EmptyReplayError as exc:
        raise _fail(str(exc)) from exc


def _format_vec(x: float, y: float, z: float | None = None) -> str:
    if z is None:
        return f"({x:.3f}, {y:.3f})"
    return f"({x:.3f}, {y:.3f}, {z:.3f})"


@app.command("info")
def cmd_info(
    replay_file: Path = typer.Argument(..., help="replay file path (.replay)"),
) -> None:
    """Print the decoded replay header."""
    replay = _load_replay(replay_file)
    typer.echo(f"format_version: {replay.format_version}")
    typer.echo(f"map: {replay.map_name or '-'}")
    typer.echo(f"style: {replay.style}  track: {replay.track}")
    typer.echo(
        f"frames: {replay.frame_count} (raw={replay.raw_frame_count} pre={replay.pre_frame_count} post={replay.post_frame_count})"
    )
    typer.echo(f"finish_time: {replay.finish_time:.3f}")
    typer.echo(f"author: {replay.author_id} {replay.author_steam3}")
    if replay.tick_rate is None:
        typer.echo("tick_rate: - (not recorded)")
    else:
        typer.echo(f"tick_rate: {replay.tick_rate:.2f}")
    typer.echo(f"zone_offset: {_format_vec(replay.zone_offset.x, replay.zone_offset.y)}")
    typer.echo(f"duration: {replay_duration(replay):.3f}s")


@app.command("frames")
def cmd_frames(
    replay_file: Path = typer.Argument(..., help="replay file path (.replay)"),
    start: int = typer.Option(0, help="first frame index"),
    count: int | None = typer.Option(None, help="number of frames (default: all)"),
    as_json: bool = typer.Option(False, "--json", help="emit one JSON object per line"),
) -> None:
    """Dump decoded frames."""
    replay = _load_replay(replay_file)
    if start < 0:
        raise _fail(f"start must be non-negative, got {start}")
    end = replay.frame_count if count is None else min(replay.frame_count, start + max(0, count))
    for idx in range(start, end):
        frame = replay.frames[idx]
        if as_json:
            row = {"index": idx, **msgspec.to_builtins(frame)}
            typer.echo(msgspec.json.encode(row).decode("utf-8"))
            continue
        origin = frame.origin
        typer.echo(
            f"{idx:6d} origin={_format_vec(origin.x, origin.y, origin.z)} "
            f"pitch={frame.pitch:8.3f} yaw={frame.yaw:8.3f} buttons=0x{frame.buttons & 0xFFFF_FFFF:08x}"
        )


@app.command("trace")
def cmd_trace(
    replay_file: Path = typer.Argument(..., help="replay file path (.replay)"),
    fps: float = typer.Option(60.0, help="sampling rate of the trace"),
    seconds: float | None = typer.Option(None, help="stop after N seconds (default: end of replay)"),
    world: bool = typer.Option(False, "--world", help="print renderer-space positions (zone offset applied)"),
    config_path: Path | None = typer.Option(None, "--config", help="viewer config (default: base-dir/shavitview.json)"),
    base_dir: Path = typer.Option(
        default_runtime_dir(),
        "--base-dir",
        help="base path for runtime files (default: ~/.shavitview; override with SHAVITVIEW_RUNTIME_DIR)",
    ),
) -> None:
    """Play a replay headlessly and print the interpolated pose at a fixed step."""
    if not fps > 0.0:
        raise _fail(f"fps must be positive, got {fps}")
    config = _load_config(config_path, base_dir)
    replay = _load_replay(replay_file)
    cursor = _make_cursor(replay, config)
    limit = cursor.duration if seconds is None else max(0.0, float(seconds))
    dt = 1.0 / float(fps)

    cursor.play()
    pose = cursor.pose
    step = 0
    while True:
        if world:
            pos = world_position(pose, eye_height=config.eye_height)
        else:
            pos = pose.position
        typer.echo(
            f"t={cursor.elapsed_time:9.4f} frame={pose.frame_index:6d} "
            f"pos={_format_vec(pos.x, pos.y, pos.z)} yaw={pose.yaw:8.3f} pitch={pose.pitch:8.3f}"
        )
        step += 1
        if step * dt > limit + 1e-9:
            break
        pose = cursor.advance(dt)


@app.command("play")
def cmd_play(
    replay_file: Path = typer.Argument(..., help="replay file path (.replay)"),
    width: int | None = typer.Option(None, help="window width (default: use shavitview.json)"),
    height: int | None = typer.Option(None, help="window height (default: use shavitview.json)"),
    fps: int | None = typer.Option(None, help="target fps (default: use shavitview.json)"),
    base_dir: Path = typer.Option(
        default_runtime_dir(),
        "--base-dir",
        help="base path for runtime files (default: ~/.shavitview; override with SHAVITVIEW_RUNTIME_DIR)",
    ),
) -> None:
    """Open a Raylib window and play back a replay."""
    from .console import ConsoleLog
    from .raylib_app import run_view
    from .session import PlaybackSession
    from .view import ReplayView

    config = _load_config(None, base_dir)
    console = ConsoleLog(base_dir=base_dir)
    session = PlaybackSession(
        default_tick_rate=config.default_tick_rate,
        wrap_yaw=config.wrap_yaw,
        speed=config.playback_speed,
    )
    try:
        session.load_file(replay_file)
    except OSError as exc:
        raise _fail(f"cannot read {replay_file}: {exc.strerror or exc}") from exc
    except (ReplayFormatError, EmptyReplayError) as exc:
        console.log(f"replay parse error: {exc}")
        console.flush()
        raise _fail(str(exc)) from exc

    view = ReplayView(session, config=config, console=console)
    run_view(
        view,
        width=int(width or config.window_width),
        height=int(height or config.window_height),
        title=f"{replay_file.name} - shavitview",
        fps=int(fps or config.fps),
    )


@app.command("config")
def cmd_config(
    path: Path | None = typer.Option(None, help=f"path to {CONFIG_NAME} (default: base-dir/{CONFIG_NAME})"),
    base_dir: Path = typer.Option(
        default_runtime_dir(),
        "--base-dir",
        help="base path for runtime files (default: ~/.shavitview; override with SHAVITVIEW_RUNTIME_DIR)",
    ),
) -> None:
    """Inspect viewer configuration values."""
    cfg_path = path if path is not None else base_dir / CONFIG_NAME
    config = _load_config(path, base_dir)
    typer.echo(f"path: {cfg_path}")
    for name, value in msgspec.structs.asdict(config).items():
        typer.echo(f"  {name}: {value}")


def main() -> None:
    app()
