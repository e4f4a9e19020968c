from __future__ import annotations

import os
import sys
from uuid import uuid4

import uvicorn
from fastapi import FastAPI

from reconstruct.core.capture.bridge import attach_session
from reconstruct.core.logging import configure_logging
from reconstruct.core.logging.context import log_context
from reconstruct.core.models.llm_provider import API_KEY_ENV
from reconstruct.core.reconstruction.schemas import validate_response_schema
from reconstruct.core.settings import state_dir, state_dir_writable

from .deps import get_capture_bridge, get_capture_session, get_llm
from .routes_chat import router as chat_router
from .routes_reconstruct import router as reconstruct_router
from .routes_session import router as session_router

app = FastAPI(title="Industrial Reconstruct API")
configure_logging(state_dir())

app.include_router(reconstruct_router, prefix="/api", tags=["reconstruct"])
app.include_router(chat_router, prefix="/api", tags=["chat"])
app.include_router(session_router, prefix="/session", tags=["session"])


@app.middleware("http")
async def request_context_middleware(request, call_next):
    correlation_id = request.headers.get("X-Correlation-ID") or str(uuid4())
    with log_context(correlation_id=correlation_id):
        response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


@app.on_event("startup")
def startup() -> None:
    validate_response_schema()
    app.state.last_result = None
    attach_session(get_capture_bridge(), get_capture_session())


@app.on_event("shutdown")
def shutdown() -> None:
    get_capture_bridge().unsubscribe()


@app.get("/healthz")
def healthz() -> dict[str, bool]:
    return {"ok": True}


@app.get("/healthz/full")
def healthz_full() -> dict[str, object]:
    config = get_llm().config
    current_state_dir = state_dir()
    state_writable = state_dir_writable(current_state_dir)
    credential_present = bool(os.getenv(API_KEY_ENV, "").strip())
    session = get_capture_session()

    return {
        "ok": state_writable and credential_present,
        "python": {"version": sys.version.split()[0]},
        "state_dir": {"path": str(current_state_dir), "writable": state_writable},
        "llm": {
            "credential_present": credential_present,
            "model": config.model,
            "chat_model": config.chat_model,
            "schema_mode": config.schema_mode,
            "thread_chat_history": config.thread_chat_history,
        },
        "session": {"count": len(session), "limit": session.limit},
    }


def run() -> None:
    uvicorn.run("reconstruct.apps.api.main:app", reload=True, host="127.0.0.1", port=8000)
