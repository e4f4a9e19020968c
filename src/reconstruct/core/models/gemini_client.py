from __future__ import annotations

from typing import Any

from reconstruct.core.http.client import request


class GeminiClient:
    def __init__(self, base_url: str, timeout_s: float = 60.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s

    def generate_content(
        self,
        *,
        api_key: str,
        model: str,
        contents: list[dict[str, Any]],
        generation_config: dict[str, Any] | None = None,
        safety_settings: list[dict[str, str]] | None = None,
    ) -> str:
        payload: dict[str, object] = {"contents": contents}
        if generation_config:
            payload["generationConfig"] = generation_config
        if safety_settings:
            payload["safetySettings"] = safety_settings

        response = request(
            "POST",
            f"{self.base_url}/models/{model}:generateContent",
            headers={"x-goog-api-key": api_key, "Content-Type": "application/json"},
            json=payload,
            timeout_override=self.timeout_s,
        )
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("unexpected response payload")

        candidates = data.get("candidates") or []
        if not isinstance(candidates, list):
            raise ValueError("unexpected response payload")
        if not candidates:
            feedback = data.get("promptFeedback") or {}
            block_reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
            if block_reason:
                raise ValueError(f"prompt blocked: {block_reason}")
            return ""

        candidate = candidates[0]
        content = candidate.get("content") if isinstance(candidate, dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            raise ValueError("unexpected response payload")
        return "".join(str(part.get("text") or "") for part in parts if isinstance(part, dict))
