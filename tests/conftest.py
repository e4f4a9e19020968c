from __future__ import annotations

import io
import json

import httpx
import pytest
from PIL import Image

from reconstruct.apps.api import deps


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("RECONSTRUCT_STATE_DIR", str(tmp_path / "state"))
    monkeypatch.setenv("RECONSTRUCT_LOG_TO_FILE", "off")
    monkeypatch.setenv("RECONSTRUCT_CAPTURE_DEBUG_COPY", "off")
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.delenv("RECONSTRUCT_LLM_SCHEMA_MODE", raising=False)
    monkeypatch.delenv("RECONSTRUCT_CHAT_THREAD_HISTORY", raising=False)
    monkeypatch.delenv("RECONSTRUCT_MAX_IMAGES", raising=False)
    deps.clear_caches()


@pytest.fixture
def result_payload() -> dict:
    return {
        "process_overview": {
            "process_name": "Batch Release Review",
            "role": "QA Supervisor",
            "system_type": "MES",
            "goal": "Release batch 7781 after reviewing inspection records",
            "assumptions": ["Operator is logged in"],
        },
        "steps": [
            {"step": 1, "title": "Open batch", "instruction": "Open batch 7781 from the queue (screenshot 1)."},
            {"step": 2, "title": "Review QC", "instruction": "Review QC results on the inspection tab (screenshot 2)."},
            {"step": 3, "title": "Sign", "instruction": "Apply electronic signature."},
            {"step": 4, "title": "Release", "instruction": "Click Release and confirm (screenshot 3)."},
        ],
        "checks_and_risks": {
            "checks": ["Signature matches operator"],
            "risks": ["Releasing with open deviations"],
        },
        "execution_checklist": ["Open batch", "Review QC", "Sign", "Release"],
        "loom_script": [
            {"step": 1, "narration": "We start in the batch queue.", "focus": "Queue table"},
            {"step": 4, "narration": "Finally we release the batch.", "focus": "Release button"},
        ],
    }


@pytest.fixture
def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 6), color=(200, 10, 10)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def gemini_reply():
    def build(text: str) -> httpx.Response:
        return httpx.Response(200, json={"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]})

    return build


@pytest.fixture
def mock_gemini(monkeypatch: pytest.MonkeyPatch):
    """Route the shared HTTP client through a handler; returns the list of captured requests."""

    def install(handler):
        seen: list[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        client = httpx.Client(transport=httpx.MockTransport(recording_handler))
        monkeypatch.setattr("reconstruct.core.http.client.get_http_client", lambda: client)
        return seen

    return install


@pytest.fixture
def sent_json():
    def decode(request: httpx.Request) -> dict:
        return json.loads(request.content.decode("utf-8"))

    return decode
