"""Extraction of JSON objects embedded in free-form model output.

Models asked for "JSON only" still wrap their answer in prose or markdown
fences, and sometimes emit several objects. The scanner below walks the
text with a brace counter that ignores braces inside string literals, so
it returns the first balanced top-level object rather than greedily
spanning from the first ``{`` to the last ``}``.
"""

import json
from typing import Any, Iterator


def iter_json_object_spans(text: str) -> Iterator[str]:
    """Yield every balanced top-level ``{...}`` block in order of appearance."""
    depth = 0
    start = -1
    in_string = False
    escaped = False

    for index, char in enumerate(text):
        if depth == 0:
            if char == "{":
                depth = 1
                start = index
            continue

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
                yield text[start:index + 1]


def extract_first_json_object(text: str) -> dict[str, Any] | None:
    """Return the first top-level block of ``text`` that decodes to a JSON object.

    Args:
        text: Raw model output.

    Returns:
        The decoded object, or None if no block decodes cleanly.
    """
    for span in iter_json_object_spans(text):
        try:
            value = json.loads(span)
        except json.JSONDecodeError:
            continue
        if isinstance(value, dict):
            return value
    return None
