from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from reconstruct.core.errors import NoImagesError

from .prompts import reconstruction_prompt, single_screenshot_prompt
from .schemas import RECONSTRUCTION_RESPONSE_SCHEMA, CapturedImage


@dataclass(frozen=True)
class ModelRequest:
    prompt: str
    images: tuple[CapturedImage, ...] = ()
    response_schema: dict[str, Any] | None = None

    def parts(self) -> list[dict[str, Any]]:
        """Prompt text first, then images in capture order."""
        return [{"text": self.prompt}, *(image.to_part() for image in self.images)]


def build_reconstruction_request(images: Sequence[CapturedImage], context: str | None = None) -> ModelRequest:
    # The image ceiling is enforced upstream by whoever collects the images.
    if not images:
        raise NoImagesError()
    return ModelRequest(
        prompt=reconstruction_prompt(len(images), context),
        images=tuple(images),
        response_schema=RECONSTRUCTION_RESPONSE_SCHEMA,
    )


def build_single_screenshot_request(image: CapturedImage | None) -> ModelRequest:
    if image is None:
        raise NoImagesError()
    return ModelRequest(
        prompt=single_screenshot_prompt(),
        images=(image,),
        response_schema=RECONSTRUCTION_RESPONSE_SCHEMA,
    )


def build_chat_request(message: str, images: Sequence[CapturedImage]) -> ModelRequest:
    return ModelRequest(prompt=message, images=tuple(images))
