from __future__ import annotations

import re

_SECRET_VALUE_RE = re.compile(r"(?i)(api[_-]?key|token|key|secret)(\s*[=:]\s*)([^\s,;&\"']+)")
_BEARER_RE = re.compile(r"(?i)(bearer\s+)([^\s]+)")
# Google API keys are 39 chars starting with "AIza".
_GOOGLE_KEY_RE = re.compile(r"AIza[0-9A-Za-z_\-]{35}")


def redact_string(s: str) -> str:
    redacted = _SECRET_VALUE_RE.sub(lambda m: f"{m.group(1)}{m.group(2)}***", s)
    redacted = _BEARER_RE.sub(lambda m: f"{m.group(1)}***", redacted)
    return _GOOGLE_KEY_RE.sub("***", redacted)
