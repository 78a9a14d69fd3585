"""
Tolerant JSON extraction for free-form LLM replies.

Models sometimes wrap the JSON they were asked for in prose or markdown
code fences. ``extract_json_object`` returns the first balanced ``{...}``
span in the reply that parses as a JSON object, or raises
``MalformedAIResponseError``. It never guesses a partial structure.
"""

import json
from typing import Any, Iterator, Optional

from .errors import MalformedAIResponseError


def _balanced_end(text: str, start: int) -> Optional[int]:
    """Index just past the brace closing the object opened at ``start``."""
    depth = 0
    in_string = False
    escaped = False

    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index + 1

    return None


def iter_balanced_objects(text: str) -> Iterator[str]:
    """
    Yield top-level balanced brace-delimited candidates, left to right.

    Objects nested inside a candidate are never yielded on their own, so a
    broken outer object cannot be replaced by one of its inner values.
    """
    start = text.find("{")
    while start != -1:
        end = _balanced_end(text, start)
        if end is None:
            start = text.find("{", start + 1)
            continue
        yield text[start:end]
        start = text.find("{", end)


def extract_json_object(text: Optional[str]) -> dict[str, Any]:
    """
    Locate and parse the first JSON object embedded in ``text``.

    Top-level candidates are tried in order of their opening brace; the first
    one that decodes to a dict wins.

    Raises:
        MalformedAIResponseError: no candidate decodes to a JSON object
    """
    if not text or not text.strip():
        raise MalformedAIResponseError("Empty response from LLM")

    for candidate in iter_balanced_objects(text):
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed

    raise MalformedAIResponseError("Invalid AI response format: no JSON object found")
