from __future__ import annotations

from functools import lru_cache

from reconstruct.core.capture.bridge import PillowScreenCapture
from reconstruct.core.capture.session import CaptureSession
from reconstruct.core.chat.assistant import ChatAssistant
from reconstruct.core.chat.transcript import ChatTranscript
from reconstruct.core.models.llm_provider import ReconstructLLM
from reconstruct.core.reconstruction.pipeline import ReconstructionPipeline
from reconstruct.core.settings import get_int_env, is_on, state_dir


@lru_cache(maxsize=1)
def get_llm() -> ReconstructLLM:
    return ReconstructLLM()


@lru_cache(maxsize=1)
def get_reconstruction_pipeline() -> ReconstructionPipeline:
    return ReconstructionPipeline(llm=get_llm())


@lru_cache(maxsize=1)
def get_chat_assistant() -> ChatAssistant:
    return ChatAssistant(llm=get_llm())


@lru_cache(maxsize=1)
def get_capture_session() -> CaptureSession:
    return CaptureSession()


@lru_cache(maxsize=1)
def get_chat_transcript() -> ChatTranscript:
    return ChatTranscript()


@lru_cache(maxsize=1)
def get_capture_bridge() -> PillowScreenCapture:
    return PillowScreenCapture(
        state_dir=state_dir(),
        debug_copy=is_on("RECONSTRUCT_CAPTURE_DEBUG_COPY", "on"),
        max_width=get_int_env("RECONSTRUCT_CAPTURE_MAX_WIDTH", 1920),
    )


def clear_caches() -> None:
    for getter in (
        get_llm,
        get_reconstruction_pipeline,
        get_chat_assistant,
        get_capture_session,
        get_chat_transcript,
        get_capture_bridge,
    ):
        getter.cache_clear()
