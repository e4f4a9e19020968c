from __future__ import annotations

import httpx
import pytest

from reconstruct.core.errors import BackendCallError, ConfigurationError
from reconstruct.core.http.errors import ReconstructHTTPStatusError
from reconstruct.core.models.llm_provider import ReconstructLLM, load_llm_config
from reconstruct.core.reconstruction.builder import build_chat_request, build_reconstruction_request
from reconstruct.core.reconstruction.schemas import CapturedImage, ChatMessage

IMAGE = CapturedImage(data="aW1n", mime_type="image/png")


def test_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("RECONSTRUCT_LLM_MODEL", "gemini-custom")
    monkeypatch.setenv("RECONSTRUCT_LLM_TIMEOUT_S", "not-a-number")
    monkeypatch.setenv("RECONSTRUCT_LLM_SCHEMA_MODE", "off")

    config = load_llm_config()

    assert config.model == "gemini-custom"
    assert config.timeout_s == 60.0
    assert config.schema_mode is False
    assert config.thread_chat_history is False


def test_missing_api_key_is_configuration_error(monkeypatch, mock_gemini, gemini_reply) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    seen = mock_gemini(lambda request: gemini_reply("{}"))

    with pytest.raises(ConfigurationError, match="GEMINI_API_KEY is not defined"):
        ReconstructLLM().complete_json(build_reconstruction_request([IMAGE]))

    assert seen == []


def test_schema_mode_sends_response_schema(mock_gemini, gemini_reply, sent_json) -> None:
    seen = mock_gemini(lambda request: gemini_reply('{"steps": []}'))

    raw = ReconstructLLM().complete_json(build_reconstruction_request([IMAGE, IMAGE]))

    assert raw == '{"steps": []}'
    body = sent_json(seen[0])
    assert body["generationConfig"]["responseMimeType"] == "application/json"
    assert body["generationConfig"]["responseSchema"]["type"] == "OBJECT"
    parts = body["contents"][0]["parts"]
    assert len(parts) == 3
    assert parts[1] == {"inlineData": {"mimeType": "image/png", "data": "aW1n"}}


def test_schema_mode_off_sends_prompt_only(monkeypatch, mock_gemini, gemini_reply, sent_json) -> None:
    monkeypatch.setenv("RECONSTRUCT_LLM_SCHEMA_MODE", "off")
    seen = mock_gemini(lambda request: gemini_reply("```json\n{}\n```"))

    ReconstructLLM().complete_json(build_reconstruction_request([IMAGE]))

    config = sent_json(seen[0])["generationConfig"]
    assert "responseSchema" not in config
    assert "responseMimeType" not in config


def test_backend_failure_wraps_cause(mock_gemini) -> None:
    mock_gemini(lambda request: httpx.Response(403, json={"error": {"message": "API key not valid"}}))

    with pytest.raises(BackendCallError) as excinfo:
        ReconstructLLM().complete_json(build_reconstruction_request([IMAGE]))

    assert isinstance(excinfo.value.cause, ReconstructHTTPStatusError)
    assert excinfo.value.cause.status_code == 403


def test_empty_output_is_backend_error(mock_gemini) -> None:
    mock_gemini(lambda request: httpx.Response(200, json={"candidates": []}))

    with pytest.raises(BackendCallError, match="No response from AI"):
        ReconstructLLM().complete_text(build_chat_request("hi", []))


def test_chat_uses_chat_model_and_safety_settings(mock_gemini, gemini_reply, sent_json) -> None:
    seen = mock_gemini(lambda request: gemini_reply("It is a QC screen."))

    reply = ReconstructLLM().complete_text(build_chat_request("What is this?", [IMAGE]))

    assert reply == "It is a QC screen."
    assert seen[0].url.path.endswith("/models/gemini-2.5-pro:generateContent")
    body = sent_json(seen[0])
    assert {item["threshold"] for item in body["safetySettings"]} == {"BLOCK_NONE"}
    assert len(body["safetySettings"]) == 4


def test_history_dropped_unless_threading_enabled(monkeypatch, mock_gemini, gemini_reply, sent_json) -> None:
    seen = mock_gemini(lambda request: gemini_reply("ok"))
    history = [ChatMessage(role="user", content="first"), ChatMessage(role="model", content="answer")]

    ReconstructLLM().complete_text(build_chat_request("second", []), history=history)
    assert len(sent_json(seen[-1])["contents"]) == 1

    monkeypatch.setenv("RECONSTRUCT_CHAT_THREAD_HISTORY", "on")
    ReconstructLLM().complete_text(build_chat_request("second", []), history=history)
    contents = sent_json(seen[-1])["contents"]
    assert [turn["role"] for turn in contents] == ["user", "model", "user"]
    assert contents[0]["parts"] == [{"text": "first"}]
