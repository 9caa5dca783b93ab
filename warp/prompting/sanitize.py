"""
Input Sanitization - Cleans player text before it reaches a prompt.

Player text (voice transcripts, NPC chat) is untrusted. Before it is
embedded in a prompt it passes through an ordered list of removals that
strip prompt-injection phrasing and markup. The order matters: a later
pattern may only become visible once an earlier one has been removed.
"""

from __future__ import annotations
import re
from typing import Any


DEFAULT_MAX_LENGTH = 200

INJECTION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"ignore\s+(all\s+)?previous\s+instructions", re.IGNORECASE),
    re.compile(r"you\s+are\s+now", re.IGNORECASE),
    re.compile(r"system\s*:\s*", re.IGNORECASE),
    re.compile(r"\bpretend\b.*\byou\b", re.IGNORECASE),
    re.compile(r"```.*```", re.DOTALL),
    re.compile(r"<script.*?</script>", re.IGNORECASE | re.DOTALL),
    re.compile(r"<[^>]+>"),
)

_WHITESPACE = re.compile(r"\s+")
_CLEAN_INPUT = re.compile(r"[a-zA-Z0-9\s.,!?'-]+")


def sanitize_input(value: Any, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """
    Sanitize player text for safe inclusion in a prompt.

    Non-string input yields an empty string. Never raises.

    Args:
        value: Raw player input
        max_length: Maximum number of characters kept

    Returns:
        Cleaned text, at most max_length characters long
    """
    if not isinstance(value, str):
        return ""

    cleaned = value
    while True:
        previous = cleaned
        for pattern in INJECTION_PATTERNS:
            cleaned = pattern.sub("", cleaned)
        # A later removal can splice an earlier pattern back together
        if cleaned == previous:
            break

    cleaned = _WHITESPACE.sub(" ", cleaned).strip()

    return cleaned[:max(0, max_length)]


def is_clean_input(value: Any) -> bool:
    """
    True if text holds only letters, digits, spaces and . , ! ? ' -
    """
    if not isinstance(value, str) or not value:
        return False
    return _CLEAN_INPUT.fullmatch(value) is not None
