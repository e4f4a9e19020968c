from __future__ import annotations

import io
import logging
import sys
import threading
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from PIL import Image, ImageGrab

from reconstruct.core.reconstruction.schemas import CapturedImage

from .session import CaptureSession

logger = logging.getLogger(__name__)

CaptureCallback = Callable[[CapturedImage], None]


class ScreenCaptureBridge(Protocol):
    """Capability handed to the presentation layer for OS-level screen capture."""

    def capture_now(self) -> CapturedImage | None: ...

    def subscribe(self, callback: CaptureCallback) -> None: ...

    def unsubscribe(self) -> None: ...

    def platform(self) -> str: ...


class PillowScreenCapture:
    def __init__(
        self,
        state_dir: Path,
        debug_copy: bool = True,
        max_width: int = 1920,
        grab: Callable[[], Image.Image] | None = None,
    ) -> None:
        self.screenshots_dir = state_dir / "screenshots"
        self.debug_copy = debug_copy
        self.max_width = max(1, max_width)
        self._grab = grab or ImageGrab.grab
        self._callbacks: list[CaptureCallback] = []
        self._lock = threading.Lock()

    def capture_now(self) -> CapturedImage | None:
        try:
            image = self._grab()
        except OSError as exc:
            logger.error("screen_capture_failed", extra={"extra_fields": {"error": str(exc)}})
            return None

        if image.width > self.max_width:
            height = max(1, round(image.height * self.max_width / image.width))
            image = image.resize((self.max_width, height))

        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        raw = buffer.getvalue()

        if self.debug_copy:
            self._write_debug_copy(raw)
        return CapturedImage.from_bytes(raw, "image/png")

    def trigger(self) -> CapturedImage | None:
        """Capture and deliver to every subscriber, as a global hotkey would."""
        captured = self.capture_now()
        if captured is None:
            return None
        with self._lock:
            callbacks = list(self._callbacks)
        for callback in callbacks:
            callback(captured)
        return captured

    def subscribe(self, callback: CaptureCallback) -> None:
        with self._lock:
            self._callbacks.append(callback)

    def unsubscribe(self) -> None:
        with self._lock:
            self._callbacks.clear()

    def platform(self) -> str:
        return sys.platform

    def _write_debug_copy(self, raw: bytes) -> None:
        timestamp = datetime.now(timezone.utc).isoformat().replace(":", "-").replace(".", "-").replace("+00-00", "Z")
        path = self.screenshots_dir / f"screenshot_{timestamp}.png"
        try:
            self.screenshots_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(raw)
        except OSError as exc:
            logger.warning("screenshot_debug_copy_failed", extra={"extra_fields": {"error": str(exc)}})
            return
        logger.info("screenshot_saved", extra={"extra_fields": {"path": str(path)}})


def attach_session(bridge: ScreenCaptureBridge, session: CaptureSession) -> None:
    def _on_capture(image: CapturedImage) -> None:
        session.add(image)

    bridge.subscribe(_on_capture)
