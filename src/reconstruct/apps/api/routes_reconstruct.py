from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from reconstruct.core.errors import BackendCallError, ConfigurationError, MalformedResponseError, NoImagesError
from reconstruct.core.reconstruction.pipeline import ReconstructionPipeline

from .deps import get_reconstruction_pipeline
from .uploads import collect_images, form_text

logger = logging.getLogger(__name__)

router = APIRouter()

SOURCE_HEADER = "X-Reconstruct-Source"


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/reconstruct")
async def reconstruct(
    request: Request,
    pipeline: ReconstructionPipeline = Depends(get_reconstruction_pipeline),
) -> JSONResponse:
    form = await request.form()
    images = await collect_images(form, default_count=1, legacy_field="file")
    try:
        outcome = await run_in_threadpool(pipeline.reconstruct, images, form_text(form, "context"))
    except ConfigurationError as exc:
        return error_response(500, str(exc))
    except NoImagesError as exc:
        return error_response(400, str(exc))

    request.app.state.last_result = outcome.result
    return JSONResponse(content=outcome.result.model_dump(mode="json"), headers={SOURCE_HEADER: outcome.source})


@router.post("/analyze")
async def analyze(
    request: Request,
    pipeline: ReconstructionPipeline = Depends(get_reconstruction_pipeline),
) -> JSONResponse:
    form = await request.form()
    images = await collect_images(form, default_count=1, legacy_field="file")
    try:
        result = await run_in_threadpool(pipeline.analyze_screenshot, images[0] if images else None)
    except ConfigurationError as exc:
        return error_response(500, str(exc))
    except NoImagesError as exc:
        return error_response(400, str(exc))
    except (BackendCallError, MalformedResponseError):
        logger.exception("analyze_failed")
        return error_response(502, "processing fault")
    return JSONResponse(content=result.model_dump(mode="json"), headers={SOURCE_HEADER: "live"})
