"""
Log sanitization for values that come from descriptors or Marathon responses.
"""

import re
from typing import Any, Iterable, List


def sanitize_for_log(value: Any, max_length: int = 100) -> str:
    """
    Sanitize a value for safe logging.

    Removes control characters and newlines so a crafted app id or version
    cannot forge extra log lines.

    Args:
        value: The value to sanitize
        max_length: Maximum length of the output (default 100)

    Returns:
        Sanitized string safe for logging
    """
    str_value = str(value)

    sanitized = re.sub(r"[\x00-\x1f\x7f-\x9f\r\n\t]", "", str_value)

    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length] + "..."

    return sanitized


def sanitize_app_id(app_id: str) -> str:
    """
    Sanitize a Marathon app id for logging.

    App ids are slash-separated paths of lowercase letters, digits, dots and hyphens.

    Args:
        app_id: The app id to sanitize

    Returns:
        Sanitized app id
    """
    sanitized = re.sub(r"[^a-zA-Z0-9_./-]", "", app_id)

    return sanitized[:200]


def sanitize_versions(versions: Iterable[Any], max_items: int = 20) -> List[str]:
    """Sanitize a list of version strings, truncating long lists."""
    items = [sanitize_for_log(version, max_length=40) for version in versions]
    if len(items) > max_items:
        return items[:max_items] + [f"... (+{len(items) - max_items} more)"]
    return items
