from __future__ import annotations

import logging

from pydantic import TypeAdapter, ValidationError
from starlette.datastructures import FormData, UploadFile

from reconstruct.core.reconstruction.schemas import DEFAULT_MIME_TYPE, CapturedImage, ChatMessage
from reconstruct.core.settings import max_images

logger = logging.getLogger(__name__)

_HISTORY_ADAPTER = TypeAdapter(list[ChatMessage])


def parse_count(raw: object, default: int) -> int:
    try:
        value = int(str(raw))
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def form_text(form: FormData, name: str) -> str | None:
    value = form.get(name)
    if isinstance(value, str):
        return value
    return None


async def _to_image(value: object) -> CapturedImage | None:
    if isinstance(value, UploadFile):
        raw = await value.read()
        if not raw:
            return None
        return CapturedImage.from_bytes(raw, value.content_type or DEFAULT_MIME_TYPE)
    if isinstance(value, str) and value.strip():
        return CapturedImage.from_data_url(value.strip())
    return None


async def collect_images(form: FormData, default_count: int, legacy_field: str | None = None) -> list[CapturedImage]:
    """Read ``file0..file{imageCount-1}`` in order, falling back to a lone legacy field."""
    count = parse_count(form.get("imageCount"), default_count)
    images: list[CapturedImage] = []
    for index in range(count):
        image = await _to_image(form.get(f"file{index}"))
        if image is not None:
            images.append(image)

    if not images and legacy_field:
        image = await _to_image(form.get(legacy_field))
        if image is not None:
            images.append(image)

    limit = max_images()
    if len(images) > limit:
        logger.warning("images_truncated", extra={"extra_fields": {"received": len(images), "limit": limit}})
        images = images[:limit]
    return images


async def collect_all_uploads(form: FormData) -> list[CapturedImage]:
    images: list[CapturedImage] = []
    for _, value in form.multi_items():
        if not isinstance(value, UploadFile):
            continue
        image = await _to_image(value)
        if image is not None:
            images.append(image)
    return images


def parse_history(raw: str | None) -> list[ChatMessage]:
    if not raw:
        return []
    try:
        return _HISTORY_ADAPTER.validate_json(raw)
    except ValidationError:
        logger.warning("chat_history_unparseable", extra={"extra_fields": {"length": len(raw)}})
        return []
