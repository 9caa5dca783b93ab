"""
Response Extraction - Recovers a JSON document from a raw completion.

Generative backends often wrap JSON in a markdown fence even when told not
to. If a fenced block is present its interior is parsed, otherwise the whole
completion is. No semantic checks happen here; see validation.py.
"""

from __future__ import annotations
import json
import re
from typing import Any

from ..errors import ParseError


FENCED_BLOCK = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


def extract_candidate(raw_text: str) -> str:
    """Return the text that should be parsed: fenced interior or all of it."""
    match = FENCED_BLOCK.search(raw_text)
    candidate = match.group(1) if match else raw_text
    return candidate.strip()


def extract_document(raw_text: Any) -> Any:
    """
    Parse the structured document embedded in a completion.

    Raises:
        ParseError: if the candidate text is not valid JSON or cannot be decoded
    """
    if not isinstance(raw_text, str):
        raise ParseError(f"Expected completion text, got {type(raw_text).__name__}")

    candidate = extract_candidate(raw_text)
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as e:
        raise ParseError(f"Completion is not valid JSON: {e.msg}") from e
    except (ValueError, RecursionError) as e:
        # Oversized integer literals and pathological nesting
        raise ParseError(f"Completion could not be decoded: {type(e).__name__}") from e
