from __future__ import annotations

from typing import Protocol

import pyray as rl


class View(Protocol):
    def update(self, dt: float) -> None: ...

    def draw(self) -> None: ...


def run_view(
    view: View,
    *,
    width: int = 1280,
    height: int = 720,
    title: str = "shavitview",
    fps: int = 60,
) -> None:
    """Run a Raylib window around a pluggable view."""
    rl.init_window(width, height, title)
    rl.set_target_fps(fps)
    open_fn = getattr(view, "open", None)
    if callable(open_fn):
        open_fn()
    while not rl.window_should_close():
        dt = rl.get_frame_time()
        view.update(dt)
        rl.begin_drawing()
        view.draw()
        rl.end_drawing()
    close_fn = getattr(view, "close", None)
    if callable(close_fn):
        close_fn()
    rl.close_window()
