"""
Credential Masking
==================

Keeps cloud credentials out of log output.

Capabilities travel through the providers as opaque mappings and may carry
vendor secrets (``bstack:options.accessKey``, ``sauce:options.accessKey``),
so anything logged from a capability object or connection parameters goes
through :func:`sanitize_for_logging` first.

Usage:
    from harness.utils.security import mask_sensitive, sanitize_for_logging

    mask_sensitive("abcd1234efgh")        # 'abc********'
    sanitize_for_logging({"accessKey": "abcd1234efgh", "deviceName": "Pixel 8"})
"""

import re
from collections.abc import Mapping
from typing import Any

_SENSITIVE_KEY = re.compile(
    r"password|secret|token|api[_-]?key|access[_-]?key|auth|credential|private",
    re.IGNORECASE,
)


def mask_sensitive(value: str, visible_chars: int = 3) -> str:
    """
    Mask a sensitive string, showing only the first few characters.

    Args:
        value: The string to mask.
        visible_chars: Number of characters to show at start.

    Returns:
        Masked string with asterisks.

    Examples:
        >>> mask_sensitive("password123")
        'pas********'
        >>> mask_sensitive("ab")
        '**'
    """
    if not value:
        return ""
    if len(value) <= visible_chars:
        return "*" * len(value)
    return f"{value[:visible_chars]}{'*' * 8}"


def sanitize_for_logging(data: Mapping[str, Any]) -> dict[str, Any]:
    """
    Return a copy of ``data`` with credential-like values masked.

    Nested mappings (vendor namespaces) are sanitized recursively.
    """
    result: dict[str, Any] = {}
    for key, value in data.items():
        if _SENSITIVE_KEY.search(str(key)):
            result[key] = mask_sensitive(value) if isinstance(value, str) else "********"
        elif isinstance(value, Mapping):
            result[key] = sanitize_for_logging(value)
        else:
            result[key] = value
    return result
