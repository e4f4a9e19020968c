from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from reconstruct.core.capture.bridge import PillowScreenCapture
from reconstruct.core.capture.session import CaptureSession
from reconstruct.core.chat.assistant import ChatAssistant
from reconstruct.core.chat.transcript import ChatTranscript
from reconstruct.core.errors import ConfigurationError, NoImagesError
from reconstruct.core.reconstruction.pipeline import ReconstructionPipeline

from .deps import (
    get_capture_bridge,
    get_capture_session,
    get_chat_assistant,
    get_chat_transcript,
    get_reconstruction_pipeline,
)
from .routes_reconstruct import SOURCE_HEADER, error_response
from .uploads import collect_all_uploads

router = APIRouter()


class SessionReconstructRequest(BaseModel):
    context: str | None = None


class SessionChatRequest(BaseModel):
    message: str


def _session_payload(session: CaptureSession) -> dict[str, object]:
    images = session.images()
    return {
        "count": len(images),
        "limit": session.limit,
        "is_full": len(images) >= session.limit,
        "images": [
            {"position": index, "mime_type": image.mime_type, "base64_length": len(image.data)}
            for index, image in enumerate(images)
        ],
    }


@router.get("")
def get_session(session: CaptureSession = Depends(get_capture_session)) -> dict[str, object]:
    return _session_payload(session)


@router.post("/images")
async def upload_images(request: Request, session: CaptureSession = Depends(get_capture_session)) -> dict[str, object]:
    form = await request.form()
    uploaded = await collect_all_uploads(form)
    added = sum(1 for image in uploaded if session.add(image))
    return {"added": added, "dropped": len(uploaded) - added, **_session_payload(session)}


@router.post("/capture")
async def capture(
    session: CaptureSession = Depends(get_capture_session),
    bridge: PillowScreenCapture = Depends(get_capture_bridge),
):
    before = len(session)
    captured = await run_in_threadpool(bridge.trigger)
    if captured is None:
        return error_response(503, "screen capture unavailable")
    return {"added": len(session) > before, **_session_payload(session)}


@router.get("/platform")
def platform(bridge: PillowScreenCapture = Depends(get_capture_bridge)) -> dict[str, str]:
    return {"platform": bridge.platform()}


@router.delete("/images/{index}")
def remove_image(index: int, session: CaptureSession = Depends(get_capture_session)):
    try:
        session.remove(index)
    except IndexError as exc:
        return error_response(404, str(exc))
    return _session_payload(session)


@router.delete("")
def clear_session(
    request: Request,
    session: CaptureSession = Depends(get_capture_session),
    transcript: ChatTranscript = Depends(get_chat_transcript),
) -> dict[str, object]:
    session.clear()
    transcript.clear()
    request.app.state.last_result = None
    return _session_payload(session)


@router.post("/reconstruct")
async def reconstruct_session(
    request: Request,
    payload: SessionReconstructRequest | None = None,
    session: CaptureSession = Depends(get_capture_session),
    pipeline: ReconstructionPipeline = Depends(get_reconstruction_pipeline),
) -> JSONResponse:
    context = payload.context if payload is not None else None
    try:
        outcome = await run_in_threadpool(pipeline.reconstruct, session.images(), context)
    except ConfigurationError as exc:
        return error_response(500, str(exc))
    except NoImagesError as exc:
        return error_response(400, str(exc))

    request.app.state.last_result = outcome.result
    return JSONResponse(content=outcome.result.model_dump(mode="json"), headers={SOURCE_HEADER: outcome.source})


@router.get("/result")
def last_result(request: Request):
    result = getattr(request.app.state, "last_result", None)
    if result is None:
        return error_response(404, "no reconstruction result yet")
    return result.model_dump(mode="json")


@router.post("/chat")
async def chat_session(
    payload: SessionChatRequest,
    session: CaptureSession = Depends(get_capture_session),
    transcript: ChatTranscript = Depends(get_chat_transcript),
    assistant: ChatAssistant = Depends(get_chat_assistant),
):
    message = payload.message.strip()
    history = transcript.messages()
    try:
        reply = await run_in_threadpool(assistant.reply, message, session.images(), history)
    except ConfigurationError as exc:
        return error_response(500, str(exc))
    transcript.append("user", message)
    transcript.append("model", reply)
    return {"response": reply, "history": [item.model_dump() for item in transcript.messages()]}
