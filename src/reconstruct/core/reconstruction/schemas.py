from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

DEFAULT_MIME_TYPE = "image/png"


class ProcessOverview(BaseModel):
    process_name: str
    role: str
    system_type: str
    goal: str
    assumptions: list[str] = Field(default_factory=list)


class Step(BaseModel):
    step: int = Field(ge=1)
    title: str
    instruction: str


class ChecksAndRisks(BaseModel):
    checks: list[str] = Field(default_factory=list)
    risks: list[str] = Field(default_factory=list)


class LoomScriptItem(BaseModel):
    step: int
    narration: str
    focus: str


class ReconstructionResult(BaseModel):
    process_overview: ProcessOverview
    steps: list[Step] = Field(min_length=1)
    checks_and_risks: ChecksAndRisks
    execution_checklist: list[str] = Field(default_factory=list)
    loom_script: list[LoomScriptItem] = Field(default_factory=list)

    @model_validator(mode="after")
    def _steps_strictly_increasing(self) -> "ReconstructionResult":
        numbers = [item.step for item in self.steps]
        if any(later <= earlier for earlier, later in zip(numbers, numbers[1:])):
            raise ValueError(f"step numbers must be unique and strictly increasing, got {numbers}")
        return self

    def steps_without_narration(self) -> list[int]:
        # steps and loom_script are produced independently; nothing reconciles them.
        narrated = {item.step for item in self.loom_script}
        return [item.step for item in self.steps if item.step not in narrated]


ResultSource = Literal["live", "fallback"]


@dataclass
class ReconstructionOutcome:
    result: ReconstructionResult
    source: ResultSource
    error: str | None = None


class ChatMessage(BaseModel):
    role: Literal["user", "model"]
    content: str


@dataclass(frozen=True)
class CapturedImage:
    """A base64-encoded screenshot held in memory for the current session."""

    data: str
    mime_type: str = DEFAULT_MIME_TYPE

    @classmethod
    def from_bytes(cls, raw: bytes, mime_type: str | None = None) -> "CapturedImage":
        return cls(data=base64.b64encode(raw).decode("ascii"), mime_type=mime_type or DEFAULT_MIME_TYPE)

    @classmethod
    def from_data_url(cls, value: str, mime_type: str | None = None) -> "CapturedImage":
        """Accept either bare base64 or a ``data:<mime>;base64,<payload>`` URL."""
        if value.startswith("data:") and "," in value:
            header, payload = value.split(",", 1)
            declared = header[len("data:") :].split(";", 1)[0]
            return cls(data=payload, mime_type=declared or mime_type or DEFAULT_MIME_TYPE)
        return cls(data=value, mime_type=mime_type or DEFAULT_MIME_TYPE)

    def to_bytes(self) -> bytes:
        try:
            return base64.b64decode(self.data, validate=True)
        except binascii.Error as exc:
            raise ValueError("image data is not valid base64") from exc

    def to_part(self) -> dict[str, Any]:
        return {"inlineData": {"mimeType": self.mime_type, "data": self.data}}


# Declared once in the backend's schema dialect; checked against the models
# above by validate_response_schema() at application startup.
RECONSTRUCTION_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "process_overview": {
            "type": "OBJECT",
            "properties": {
                "process_name": {"type": "STRING"},
                "role": {"type": "STRING"},
                "system_type": {"type": "STRING"},
                "goal": {"type": "STRING"},
                "assumptions": {"type": "ARRAY", "items": {"type": "STRING"}},
            },
            "required": ["process_name", "role", "system_type", "goal", "assumptions"],
        },
        "steps": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "step": {"type": "INTEGER"},
                    "title": {"type": "STRING"},
                    "instruction": {"type": "STRING"},
                },
                "required": ["step", "title", "instruction"],
            },
        },
        "checks_and_risks": {
            "type": "OBJECT",
            "properties": {
                "checks": {"type": "ARRAY", "items": {"type": "STRING"}},
                "risks": {"type": "ARRAY", "items": {"type": "STRING"}},
            },
            "required": ["checks", "risks"],
        },
        "execution_checklist": {"type": "ARRAY", "items": {"type": "STRING"}},
        "loom_script": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "step": {"type": "INTEGER"},
                    "narration": {"type": "STRING"},
                    "focus": {"type": "STRING"},
                },
                "required": ["step", "narration", "focus"],
            },
        },
    },
    "required": ["process_overview", "steps", "checks_and_risks", "execution_checklist", "loom_script"],
}


def _schema_mismatches(schema: dict[str, Any], model: type[BaseModel], path: str) -> list[str]:
    problems: list[str] = []
    if schema.get("type") != "OBJECT":
        return [f"{path}: expected OBJECT, got {schema.get('type')!r}"]

    declared = set((schema.get("properties") or {}).keys())
    fields = set(model.model_fields.keys())
    for name in sorted(fields - declared):
        problems.append(f"{path}.{name}: missing from schema")
    for name in sorted(declared - fields):
        problems.append(f"{path}.{name}: not a field of {model.__name__}")
    for name in sorted(set(schema.get("required") or []) - declared):
        problems.append(f"{path}.{name}: required but not declared")

    for name in sorted(declared & fields):
        prop = schema["properties"][name]
        annotation = model.model_fields[name].annotation
        nested = _nested_model(annotation)
        if nested is None:
            continue
        if prop.get("type") == "ARRAY":
            problems.extend(_schema_mismatches(prop.get("items") or {}, nested, f"{path}.{name}[]"))
        else:
            problems.extend(_schema_mismatches(prop, nested, f"{path}.{name}"))
    return problems


def _nested_model(annotation: Any) -> type[BaseModel] | None:
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    for arg in getattr(annotation, "__args__", ()) or ():
        if isinstance(arg, type) and issubclass(arg, BaseModel):
            return arg
    return None


def validate_response_schema(
    schema: dict[str, Any] | None = None,
    model: type[BaseModel] = ReconstructionResult,
) -> None:
    problems = _schema_mismatches(schema if schema is not None else RECONSTRUCTION_RESPONSE_SCHEMA, model, "$")
    if problems:
        raise ValueError("response schema does not match data model: " + "; ".join(problems))
