from __future__ import annotations

import logging
import threading

from reconstruct.core.reconstruction.schemas import CapturedImage
from reconstruct.core.settings import max_images

logger = logging.getLogger(__name__)


class CaptureSession:
    """Ordered, bounded, in-memory list of captured images.

    Images are never persisted by the session. Once the ceiling is reached,
    further captures are dropped and the session is left unchanged.
    """

    def __init__(self, limit: int | None = None) -> None:
        self.limit = max(1, limit) if limit is not None else max_images()
        self._images: list[CapturedImage] = []
        self._lock = threading.Lock()

    def add(self, image: CapturedImage) -> bool:
        with self._lock:
            if len(self._images) >= self.limit:
                logger.info("capture_dropped", extra={"extra_fields": {"limit": self.limit}})
                return False
            self._images.append(image)
            return True

    def remove(self, index: int) -> CapturedImage:
        with self._lock:
            if index < 0 or index >= len(self._images):
                raise IndexError(f"no captured image at position {index}")
            return self._images.pop(index)

    def clear(self) -> None:
        with self._lock:
            self._images.clear()

    def images(self) -> list[CapturedImage]:
        with self._lock:
            return list(self._images)

    @property
    def is_full(self) -> bool:
        with self._lock:
            return len(self._images) >= self.limit

    def __len__(self) -> int:
        with self._lock:
            return len(self._images)
