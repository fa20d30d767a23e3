"""Shared utilities package for the login gateway"""

from .redaction import redact_mapping, redact_text

__all__ = [
    "redact_mapping",
    "redact_text",
]
