from __future__ import annotations

import json
import re

from pydantic import ValidationError

from reconstruct.core.errors import MalformedResponseError

from .schemas import ReconstructionResult

_FENCE_RE = re.compile(r"```json\n?|\n?```")


def strip_markdown_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def parse_reconstruction(raw: str) -> ReconstructionResult:
    cleaned = strip_markdown_fences(raw)
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"Failed to parse AI response: {exc.msg}", raw_text=cleaned) from exc
    if not isinstance(payload, dict):
        raise MalformedResponseError("AI response is not a JSON object", raw_text=cleaned)
    try:
        return ReconstructionResult.model_validate(payload)
    except ValidationError as exc:
        raise MalformedResponseError(
            f"AI response does not match the result shape ({exc.error_count()} errors)",
            raw_text=cleaned,
        ) from exc
