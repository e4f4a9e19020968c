from __future__ import annotations

import os
from pathlib import Path

DEFAULT_MAX_IMAGES = 6


def is_on(name: str, default: str = "off") -> bool:
    return os.getenv(name, default).strip().casefold() == "on"


def get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def state_dir() -> Path:
    configured = os.getenv("RECONSTRUCT_STATE_DIR")
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".reconstruct"


def max_images() -> int:
    return max(1, get_int_env("RECONSTRUCT_MAX_IMAGES", DEFAULT_MAX_IMAGES))


def state_dir_writable(path: Path) -> bool:
    try:
        path.mkdir(parents=True, exist_ok=True)
        probe = path / ".write-check"
        probe.write_text("ok", encoding="utf-8")
        probe.unlink(missing_ok=True)
        return True
    except OSError:
        return False
