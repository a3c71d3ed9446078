"""
Redaction of vendor/model identifiers and secrets.

Everything that leaves the process as a log or telemetry line passes through
redact() first. Output is structurally identical to the input except for
replaced substrings and masked values.
"""

import re
from collections.abc import Mapping
from typing import Any

SENTINEL = "[redacted]"
MAX_RECURSION_DEPTH = 5

BLOCKLIST: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"\bopenai\b",
        r"\banthropic\b",
        r"\bgoogle\b",
        r"\bmeta\b",
        r"\bmistral\b",
        r"\bxai\b",
        r"\bgemini\b",
        r"\bclaude\b",
        r"\bllama\b",
        r"\bmixtral\b",
        r"\bwhisper\b",
        r"\bgpt(?:-[a-z0-9.-]+)?\b",
        r"\bo\d(?:-[a-z0-9.-]+)?\b",
    )
)

SECRET_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"https?://[^\s\"']+",
        r"\b(?:api[_-]?key|authorization|bearer)\b[:=]?\s*[a-z0-9._-]+",
        r"\bgithub_pat_[a-z0-9_]+\b",
        r"\bsk-[a-z0-9]{12,}\b",
    )
)

SENSITIVE_KEY = re.compile(
    r"provider|model|endpoint|key|secret|token|region|deployment", re.IGNORECASE
)


def redact_string(text: str) -> str:
    for pattern in BLOCKLIST:
        text = pattern.sub(SENTINEL, text)
    for pattern in SECRET_PATTERNS:
        text = pattern.sub(SENTINEL, text)
    return text


def is_sensitive_key(key: str) -> bool:
    return SENSITIVE_KEY.search(key) is not None


def redact(value: Any, depth: int = 0) -> Any:
    """
    Recursively redact a JSON-compatible value.

    Strings are scrubbed, lists and tuples are redacted element by element,
    mapping values under sensitive keys are replaced by SENTINEL without
    recursing into them. Subtrees nested deeper than MAX_RECURSION_DEPTH
    collapse to SENTINEL.
    """
    if depth > MAX_RECURSION_DEPTH:
        return SENTINEL
    if isinstance(value, str):
        return redact_string(value)
    if isinstance(value, list | tuple):
        return [redact(item, depth + 1) for item in value]
    if isinstance(value, Mapping):
        return {
            str(key): SENTINEL if is_sensitive_key(str(key)) else redact(inner, depth + 1)
            for key, inner in value.items()
        }
    return value

