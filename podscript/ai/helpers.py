import json
from typing import Any

from podscript.core.errors import ParseError


def find_json_object(text: str) -> str | None:
    """
    Returns the first balanced `{...}` span in text, skipping braces inside JSON strings.
    Markdown fences and any prose around the object are ignored.
    """
    start = text.find("{")
    while start != -1:
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
            elif char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : index + 1]
        # Unbalanced from here, try the next opening brace
        start = text.find("{", start + 1)
    return None


def extract_json_object(text: str) -> dict[str, Any]:
    """Parses the first JSON object embedded in free text, raising ParseError otherwise."""
    candidate = find_json_object(text or "")
    if candidate is None:
        raise ParseError("No JSON object found in generated text", raw_text=text)

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON object: {e}", raw_text=text) from e

    if not isinstance(data, dict):
        raise ParseError("Generated JSON is not an object", raw_text=text)
    return data
