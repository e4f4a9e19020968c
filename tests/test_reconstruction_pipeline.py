from __future__ import annotations

import json

import httpx
import pytest

from reconstruct.core.errors import BackendCallError, ConfigurationError, MalformedResponseError, NoImagesError
from reconstruct.core.reconstruction.fallback import FALLBACK_PAYLOAD
from reconstruct.core.reconstruction.pipeline import ReconstructionPipeline
from reconstruct.core.reconstruction.schemas import CapturedImage


def _images(count: int) -> list[CapturedImage]:
    return [CapturedImage(data="aW1n", mime_type="image/png") for _ in range(count)]


def _timeout(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("timed out", request=request)


def test_scenario_three_images_with_context(mock_gemini, gemini_reply, sent_json, result_payload) -> None:
    seen = mock_gemini(lambda request: gemini_reply(json.dumps(result_payload)))

    outcome = ReconstructionPipeline().reconstruct(_images(3), context="Batch QC workflow")

    assert outcome.source == "live"
    assert outcome.error is None
    assert [step.step for step in outcome.result.steps] == [1, 2, 3, 4]
    assert outcome.result.process_overview.goal.strip()
    assert len(seen) == 1
    assert 'Additional user context: "Batch QC workflow"' in sent_json(seen[0])["contents"][0]["parts"][0]["text"]


@pytest.mark.parametrize(
    "handler",
    [
        _timeout,
        lambda request: httpx.Response(500, json={"error": {"message": "internal"}}),
        lambda request: httpx.Response(429, json={"error": {"message": "quota"}}),
        lambda request: httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "Sure, here's the JSON: {not valid}"}]}}]}),
        lambda request: httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": '{"steps": []}'}]}}]}),
        lambda request: httpx.Response(200, json={"candidates": []}),
        lambda request: httpx.Response(200, json={"candidates": [None]}),
        lambda request: httpx.Response(200, json={"candidates": [{"content": "oops"}]}),
        lambda request: httpx.Response(200, json={"candidates": "x"}),
        lambda request: httpx.Response(200, json={"candidates": [{"content": {"parts": "text"}}]}),
    ],
    ids=[
        "timeout",
        "server-error",
        "rate-limited",
        "prose-json",
        "wrong-shape",
        "empty",
        "null-candidate",
        "string-content",
        "string-candidates",
        "string-parts",
    ],
)
def test_fallback_is_deterministic_for_backend_failures(mock_gemini, handler) -> None:
    seen = mock_gemini(handler)
    pipeline = ReconstructionPipeline()

    first = pipeline.reconstruct(_images(2))
    second = pipeline.reconstruct(_images(2))

    assert first.source == second.source == "fallback"
    assert first.error
    assert first.result.model_dump(mode="json") == FALLBACK_PAYLOAD
    assert second.result.model_dump(mode="json") == FALLBACK_PAYLOAD
    assert len(seen) == 2


def test_prose_response_falls_back_to_quality_control_example(monkeypatch) -> None:
    def fake_complete_json(self, request, model=None) -> str:
        return "Sure, here's the JSON: {not valid}"

    monkeypatch.setattr("reconstruct.core.models.llm_provider.ReconstructLLM.complete_json", fake_complete_json)

    outcome = ReconstructionPipeline().reconstruct(_images(1))

    assert outcome.source == "fallback"
    assert outcome.result.process_overview.process_name == "Quality Control Inspection Log"


def test_fallback_result_is_a_fresh_copy(mock_gemini) -> None:
    mock_gemini(_timeout)
    pipeline = ReconstructionPipeline()

    first = pipeline.reconstruct(_images(1))
    first.result.steps[0].title = "mutated"
    second = pipeline.reconstruct(_images(1))

    assert second.result.steps[0].title == "Access Inspection Module"


def test_zero_images_never_calls_backend_or_falls_back(mock_gemini, gemini_reply) -> None:
    seen = mock_gemini(lambda request: gemini_reply("{}"))

    with pytest.raises(NoImagesError, match="No files uploaded"):
        ReconstructionPipeline().reconstruct([])

    assert seen == []


def test_missing_credential_propagates_before_any_call(monkeypatch, mock_gemini, gemini_reply) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    seen = mock_gemini(lambda request: gemini_reply("{}"))

    with pytest.raises(ConfigurationError):
        ReconstructionPipeline().reconstruct(_images(2))

    assert seen == []


def test_analyze_screenshot_propagates_failures(mock_gemini) -> None:
    mock_gemini(lambda request: httpx.Response(503, json={}))
    with pytest.raises(BackendCallError):
        ReconstructionPipeline().analyze_screenshot(_images(1)[0])


def test_analyze_screenshot_malformed_propagates(mock_gemini, gemini_reply) -> None:
    mock_gemini(lambda request: gemini_reply("not json"))
    with pytest.raises(MalformedResponseError):
        ReconstructionPipeline().analyze_screenshot(_images(1)[0])


def test_analyze_screenshot_success(mock_gemini, gemini_reply, result_payload) -> None:
    mock_gemini(lambda request: gemini_reply(json.dumps(result_payload)))

    result = ReconstructionPipeline().analyze_screenshot(_images(1)[0])

    assert result.process_overview.process_name == "Batch Release Review"
