from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass

from reconstruct.core.errors import BackendCallError, ConfigurationError
from reconstruct.core.http.errors import ReconstructHTTPError
from reconstruct.core.logging.redact import redact_string
from reconstruct.core.reconstruction.builder import ModelRequest
from reconstruct.core.reconstruction.schemas import ChatMessage
from reconstruct.core.settings import get_float_env, is_on

from .gemini_client import GeminiClient

API_KEY_ENV = "GEMINI_API_KEY"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

CHAT_SAFETY_SETTINGS: list[dict[str, str]] = [
    {"category": category, "threshold": "BLOCK_NONE"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )
]


@dataclass
class LLMConfig:
    base_url: str
    model: str
    chat_model: str
    timeout_s: float
    temperature: float
    schema_mode: bool
    thread_chat_history: bool


def load_llm_config() -> LLMConfig:
    return LLMConfig(
        base_url=os.getenv("RECONSTRUCT_GEMINI_URL", DEFAULT_BASE_URL),
        model=os.getenv("RECONSTRUCT_LLM_MODEL", "gemini-2.5-flash"),
        chat_model=os.getenv("RECONSTRUCT_CHAT_MODEL", "gemini-2.5-pro"),
        timeout_s=max(1.0, get_float_env("RECONSTRUCT_LLM_TIMEOUT_S", 60.0)),
        temperature=get_float_env("RECONSTRUCT_LLM_TEMPERATURE", 0.2),
        schema_mode=is_on("RECONSTRUCT_LLM_SCHEMA_MODE", "on"),
        thread_chat_history=is_on("RECONSTRUCT_CHAT_THREAD_HISTORY", "off"),
    )


def require_api_key() -> str:
    """Read the backend credential at call time; never defaulted."""
    api_key = os.getenv(API_KEY_ENV, "").strip()
    if not api_key:
        raise ConfigurationError(f"{API_KEY_ENV} is not defined")
    return api_key


class ReconstructLLM:
    def __init__(self, config: LLMConfig | None = None, client: GeminiClient | None = None) -> None:
        self.config = config or load_llm_config()
        self._client = client or GeminiClient(base_url=self.config.base_url, timeout_s=self.config.timeout_s)
        self.logger = logging.getLogger("reconstruct.llm")

    def complete_json(self, request: ModelRequest, model: str | None = None) -> str:
        """Schema-constrained call; returns the backend's raw text."""
        generation_config: dict[str, object] = {"temperature": self.config.temperature}
        if self.config.schema_mode and request.response_schema is not None:
            generation_config["responseMimeType"] = "application/json"
            generation_config["responseSchema"] = request.response_schema
            mode = "schema"
        else:
            mode = "json_in_prose"
        return self._call(
            request,
            model=model or self.config.model,
            generation_config=generation_config,
            mode=mode,
        )

    def complete_text(
        self,
        request: ModelRequest,
        history: list[ChatMessage] | None = None,
        model: str | None = None,
    ) -> str:
        return self._call(
            request,
            model=model or self.config.chat_model,
            generation_config={"temperature": self.config.temperature},
            safety_settings=CHAT_SAFETY_SETTINGS,
            history=history if self.config.thread_chat_history else None,
            mode="text",
        )

    def _call(
        self,
        request: ModelRequest,
        *,
        model: str,
        generation_config: dict[str, object],
        mode: str,
        safety_settings: list[dict[str, str]] | None = None,
        history: list[ChatMessage] | None = None,
    ) -> str:
        api_key = require_api_key()
        contents = [{"role": turn.role, "parts": [{"text": turn.content}]} for turn in history or []]
        contents.append({"role": "user", "parts": request.parts()})

        start = time.perf_counter()
        try:
            output = self._client.generate_content(
                api_key=api_key,
                model=model,
                contents=contents,
                generation_config=generation_config,
                safety_settings=safety_settings,
            )
        except (ReconstructHTTPError, ValueError) as exc:
            self._log_call(model, mode, request, start, ok=False, error=exc)
            raise BackendCallError(f"Backend call failed: {redact_string(str(exc))}", cause=exc) from exc

        if not output.strip():
            self._log_call(model, mode, request, start, ok=False)
            raise BackendCallError("No response from AI")

        self._log_call(model, mode, request, start, ok=True)
        return output

    def _log_call(
        self,
        model: str,
        mode: str,
        request: ModelRequest,
        start: float,
        ok: bool,
        error: BaseException | None = None,
    ) -> None:
        fields: dict[str, object] = {
            "model": model,
            "mode": mode,
            "image_count": len(request.images),
            "prompt_len": len(request.prompt),
            "duration_ms": int((time.perf_counter() - start) * 1000),
            "ok": ok,
        }
        if error is not None:
            fields["error_type"] = error.__class__.__name__
            fields["error"] = redact_string(str(error))
        self.logger.info("llm_call", extra={"extra_fields": fields})
