"""Keep bearer tokens and raw response bodies out of structured logs."""

from __future__ import annotations

import re
from typing import Any

_REDACTED_VALUE = "***REDACTED***"
_BODY_KEYS = ("body",)
_BEARER_PATTERN = re.compile(r"(?i)(bearer\s+)[^\s,;\"']+")


def sanitize_log_extra(**kwargs: Any) -> dict[str, Any]:
    """Helper for `extra=` payloads in structured logging.

    String values have bearer tokens masked; response bodies are replaced by
    their length.
    """

    sanitized: dict[str, Any] = {}
    for key, value in kwargs.items():
        if isinstance(value, str):
            value = _BEARER_PATTERN.sub(rf"\1{_REDACTED_VALUE}", value)
            if key in _BODY_KEYS and value.strip():
                value = f"<redacted payload ({len(value)} chars)>"
        sanitized[key] = value
    return sanitized
