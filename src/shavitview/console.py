from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from pathlib import Path

CONSOLE_LOG_NAME = "console.log"
MAX_CONSOLE_LINES = 0x1000


@dataclass(slots=True)
class ConsoleLog:
    """Viewer messages: the newest are drawn on the HUD, all of them go to `console.log`."""

    base_dir: Path
    max_lines: int = MAX_CONSOLE_LINES
    lines: deque[str] = field(init=False, repr=False)
    pending: deque[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        limit = max(1, int(self.max_lines))
        self.lines = deque(maxlen=limit)
        self.pending = deque(maxlen=limit)

    @property
    def path(self) -> Path:
        return self.base_dir / CONSOLE_LOG_NAME

    def log(self, message: str) -> None:
        line = str(message).rstrip()
        self.lines.append(line)
        self.pending.append(line)

    def tail(self, count: int) -> list[str]:
        if count <= 0:
            return []
        return list(self.lines)[-count:]

    def flush(self) -> None:
        if not self.pending:
            return
        path = self.path
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.writelines(f"{line}\n" for line in self.pending)
        self.pending.clear()
