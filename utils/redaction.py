"""Helpers that keep credentials out of log output"""

import json
import re
from typing import Any, Dict

SENSITIVE_FIELDS = ("client_secret", "access_token", "refresh_token", "code")

_FIELD_PATTERN = re.compile(
    r'("?(?:' + "|".join(SENSITIVE_FIELDS) + r')"?\s*[:=]\s*"?)([^"&,\s}]+)'
)


def redact_mapping(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return a shallow copy with sensitive values replaced by [REDACTED]"""
    return {
        key: "[REDACTED]" if key in SENSITIVE_FIELDS and value else value
        for key, value in data.items()
    }


def redact_text(text: str, limit: int = 500) -> str:
    """Redact sensitive key/value pairs in a JSON or form encoded body"""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        data = None
    if isinstance(data, dict):
        text = json.dumps(redact_mapping(data))
    else:
        text = _FIELD_PATTERN.sub(r"\1[REDACTED]", text or "")
    return text[:limit]
