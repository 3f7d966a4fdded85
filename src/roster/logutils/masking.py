"""Masking of sensitive values in log output.

Credentials never reach the logs; student codes (CUI) and e-mail addresses are
partially masked so records stay useful for debugging without exposing PII.
"""

from __future__ import annotations

import re
from typing import Any

MASK = "***MASKED***"

# Patterns whose first group is the key and whose remainder is the secret value.
_KEY_VALUE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r'(["\']?password["\']?\s*[:=]\s*)["\']?[^"\'\s,}\]]+["\']?', re.IGNORECASE),
    re.compile(
        r'(["\']?api[_-]?key["\']?\s*[:=]\s*)["\']?[A-Za-z0-9_\-]+["\']?', re.IGNORECASE
    ),
    re.compile(
        r'(["\']?(?:(?:auth|bearer|access)[_-]?)?token["\']?\s*[:=]\s*)["\']?[A-Za-z0-9_\-\.]+["\']?',
        re.IGNORECASE,
    ),
    re.compile(
        r'(["\']?(?:client[_-]?)?secret["\']?\s*[:=]\s*)["\']?[A-Za-z0-9_\-]+["\']?', re.IGNORECASE
    ),
)

_URL_CREDENTIALS = re.compile(r"(https?://)[^:/\s]+:[^@\s]+(@)", re.IGNORECASE)
_EMAIL = re.compile(r"\b([A-Za-z0-9._%+-]+)@([A-Za-z0-9.-]+\.[A-Za-z]{2,})\b")

# cui=20231234, "cui": "20231234"
_CUI_VALUE = re.compile(r'(["\']?cui["\']?\s*[:=]\s*["\']?)([A-Za-z0-9\-]{2})([A-Za-z0-9\-]*)', re.IGNORECASE)

SENSITIVE_KEYWORDS: frozenset[str] = frozenset(
    {
        "password",
        "passwd",
        "secret",
        "token",
        "api_key",
        "apikey",
        "credential",
        "private_key",
        "authorization",
    }
)


def mask_sensitive_string(text: str) -> str:
    """Mask credentials, e-mail local parts and CUI values in ``text``."""
    if not text:
        return text

    result = text
    for pattern in _KEY_VALUE_PATTERNS:
        result = pattern.sub(r"\g<1>" + MASK, result)

    result = _URL_CREDENTIALS.sub(r"\1" + MASK + r"\2", result)
    result = _EMAIL.sub(lambda m: f"{m.group(1)[:2]}***@{m.group(2)}", result)
    result = _CUI_VALUE.sub(lambda m: f"{m.group(1)}{m.group(2)}***" if m.group(3) else m.group(0), result)
    return result


def is_sensitive_key(key: str) -> bool:
    """True if a field name looks like it holds a credential."""
    lower_key = key.lower()
    return any(keyword in lower_key for keyword in SENSITIVE_KEYWORDS)


def mask_cui(cui: str) -> str:
    """Keep the first two characters of a student code."""
    if len(cui) <= 2:
        return cui
    return f"{cui[:2]}***"


def mask_dict(data: dict[str, Any], depth: int = 0, max_depth: int = 8) -> dict[str, Any]:
    """Return a copy of ``data`` with sensitive values masked, recursively."""
    if depth >= max_depth:
        return data

    result: dict[str, Any] = {}
    for key, value in data.items():
        if is_sensitive_key(key):
            result[key] = MASK
        elif key.lower() == "cui" and isinstance(value, str):
            result[key] = mask_cui(value)
        elif isinstance(value, dict):
            result[key] = mask_dict(value, depth + 1, max_depth)
        elif isinstance(value, list):
            result[key] = [
                mask_dict(item, depth + 1, max_depth) if isinstance(item, dict) else item
                for item in value
            ]
        elif isinstance(value, str):
            result[key] = mask_sensitive_string(value)
        else:
            result[key] = value
    return result
