from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from reconstruct.core.chat.assistant import ChatAssistant
from reconstruct.core.errors import ConfigurationError

from .deps import get_chat_assistant
from .routes_reconstruct import error_response
from .uploads import collect_images, form_text, parse_history

router = APIRouter()


@router.post("/chat")
async def chat(request: Request, assistant: ChatAssistant = Depends(get_chat_assistant)) -> JSONResponse:
    form = await request.form()
    message = (form_text(form, "message") or "").strip()
    history = parse_history(form_text(form, "history"))
    images = await collect_images(form, default_count=0)
    try:
        reply = await run_in_threadpool(assistant.reply, message, images, history)
    except ConfigurationError as exc:
        return error_response(500, str(exc))
    return JSONResponse(content={"response": reply})
