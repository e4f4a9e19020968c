from __future__ import annotations

import logging
from collections.abc import Sequence

from reconstruct.core.errors import BackendCallError, MalformedResponseError
from reconstruct.core.logging.context import log_context
from reconstruct.core.logging.redact import redact_string
from reconstruct.core.models.llm_provider import ReconstructLLM, require_api_key

from .builder import build_reconstruction_request, build_single_screenshot_request
from .fallback import fallback_result
from .parser import parse_reconstruction
from .schemas import CapturedImage, ReconstructionOutcome, ReconstructionResult

logger = logging.getLogger(__name__)


class ReconstructionPipeline:
    def __init__(self, llm: ReconstructLLM | None = None) -> None:
        self.llm = llm or ReconstructLLM()

    def reconstruct(self, images: Sequence[CapturedImage], context: str | None = None) -> ReconstructionOutcome:
        """Run request -> backend -> parse, substituting the fallback on backend or parse failure.

        ConfigurationError and NoImagesError propagate; they are the only failures
        callers ever see from this path.
        """
        with log_context(operation="reconstruct"):
            require_api_key()
            request = build_reconstruction_request(images, context)
            try:
                raw = self.llm.complete_json(request)
                result = parse_reconstruction(raw)
            except (BackendCallError, MalformedResponseError) as exc:
                logger.warning(
                    "reconstruct_fallback",
                    extra={
                        "extra_fields": {
                            "error_type": exc.__class__.__name__,
                            "error": redact_string(str(exc)),
                            "image_count": len(images),
                        }
                    },
                )
                return ReconstructionOutcome(result=fallback_result(), source="fallback", error=str(exc))

            logger.info(
                "reconstruct_succeeded",
                extra={"extra_fields": {"image_count": len(images), "step_count": len(result.steps)}},
            )
            return ReconstructionOutcome(result=result, source="live")

    def analyze_screenshot(self, image: CapturedImage | None) -> ReconstructionResult:
        """Single-screenshot analysis. Unlike reconstruct(), failures propagate."""
        with log_context(operation="analyze"):
            require_api_key()
            request = build_single_screenshot_request(image)
            return parse_reconstruction(self.llm.complete_json(request))
