from __future__ import annotations

import logging
from collections.abc import Sequence

from reconstruct.core.errors import BackendCallError
from reconstruct.core.logging.context import log_context
from reconstruct.core.logging.redact import redact_string
from reconstruct.core.models.llm_provider import ReconstructLLM, require_api_key
from reconstruct.core.reconstruction.builder import build_chat_request
from reconstruct.core.reconstruction.schemas import CapturedImage, ChatMessage

logger = logging.getLogger(__name__)

CHAT_ERROR_REPLY = "Sorry, I encountered an error. Please try again."


class ChatAssistant:
    def __init__(self, llm: ReconstructLLM | None = None) -> None:
        self.llm = llm or ReconstructLLM()

    @property
    def threads_history(self) -> bool:
        return self.llm.config.thread_chat_history

    def reply(
        self,
        message: str,
        images: Sequence[CapturedImage],
        history: Sequence[ChatMessage] | None = None,
    ) -> str:
        # history only reaches the backend when RECONSTRUCT_CHAT_THREAD_HISTORY=on.
        with log_context(operation="chat"):
            require_api_key()
            if not message.strip():
                logger.warning("chat_empty_message", extra={"extra_fields": {"image_count": len(images)}})
                return CHAT_ERROR_REPLY
            request = build_chat_request(message, images)
            try:
                return self.llm.complete_text(request, history=list(history or []))
            except BackendCallError as exc:
                logger.warning(
                    "chat_backend_failed",
                    extra={"extra_fields": {"error": redact_string(str(exc)), "image_count": len(images)}},
                )
                return CHAT_ERROR_REPLY
