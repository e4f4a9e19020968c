#!/usr/bin/env python3
from __future__ import annotations

import importlib
import os
import sys
from pathlib import Path


REQUIRED_PYTHON = (3, 11)


def _state_dir() -> Path:
    configured = os.getenv("RECONSTRUCT_STATE_DIR")
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".reconstruct"


def main() -> int:
    errors: list[str] = []

    if sys.version_info >= REQUIRED_PYTHON:
        print(f"OK: Python {sys.version.split()[0]} (>= 3.11)")
    else:
        errors.append(
            "Python 3.11+ is required. Fix: install Python 3.11+ and recreate your virtual environment."
        )

    try:
        importlib.import_module("reconstruct.apps.api.main")
        print("OK: import reconstruct")
    except Exception as exc:
        errors.append(
            f"Could not import reconstruct ({exc}). Fix: run `python -m pip install -e .[dev]` from repo root."
        )

    state_dir = _state_dir()
    try:
        state_dir.mkdir(parents=True, exist_ok=True)
        probe = state_dir / ".write-check"
        probe.write_text("ok", encoding="utf-8")
        probe.unlink(missing_ok=True)
        print(f"OK: RECONSTRUCT_STATE_DIR writable at {state_dir}")
    except Exception as exc:
        errors.append(
            f"RECONSTRUCT_STATE_DIR is not writable ({state_dir}): {exc}. "
            "Fix: set RECONSTRUCT_STATE_DIR to a writable directory."
        )

    if os.getenv("GEMINI_API_KEY", "").strip():
        print("OK: GEMINI_API_KEY is set")
    else:
        errors.append(
            "GEMINI_API_KEY is missing; /api/reconstruct and /api/chat will answer 500. "
            "Fix: export GEMINI_API_KEY=<your-key>."
        )

    schema_mode = os.getenv("RECONSTRUCT_LLM_SCHEMA_MODE", "on").strip().casefold()
    print(f"OK: schema mode is {schema_mode}")

    if errors:
        for message in errors:
            print(f"ERROR: {message}")
        return 1

    print("OK: environment check passed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
