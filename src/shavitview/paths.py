from __future__ import annotations

import os
from pathlib import Path

RUNTIME_DIR_ENV = "SHAVITVIEW_RUNTIME_DIR"


def default_runtime_dir() -> Path:
    override = os.environ.get(RUNTIME_DIR_ENV, "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / ".shavitview"
