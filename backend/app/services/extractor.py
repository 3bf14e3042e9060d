"""JSON extraction from model output.

Model replies are supposed to be a bare JSON object but regularly arrive
wrapped in markdown fences or with a sentence of preamble. This module
is the one place that tolerates that: it cleans the text, parses it and
optionally checks for required top-level keys. It never inspects values.
"""

import json
import re
from collections.abc import Iterable
from typing import Any

from app.core.errors import ExtractionValidationError, ParseError
from app.core.logging import get_logger, truncate_text

logger = get_logger(__name__)

_OPENING_FENCE = re.compile(r"^```[a-zA-Z]*\s*")
_CLOSING_FENCE = re.compile(r"\s*```$")


def fix_json_control_chars(json_text: str) -> str:
    """Escape raw control characters that appear inside JSON string values.

    Models sometimes emit literal newlines inside strings instead of \\n,
    which json.loads rejects.
    """
    result = []
    in_string = False
    escape_next = False

    for char in json_text:
        if escape_next:
            result.append(char)
            escape_next = False
            continue

        if char == "\\" and in_string:
            result.append(char)
            escape_next = True
            continue

        if char == '"':
            in_string = not in_string
            result.append(char)
            continue

        if in_string and ord(char) < 32:
            result.append(
                {"\n": "\\n", "\r": "\\r", "\t": "\\t"}.get(char, f"\\u{ord(char):04x}")
            )
        else:
            result.append(char)

    return "".join(result)


def clean_response_text(raw_text: str) -> str:
    """Strip code fences, surrounding whitespace and any text around the payload.

    Everything before the first `{` and after the last `}` is dropped. A
    reply that opens with `[` is cut to its last `]` instead.
    """
    text = raw_text.strip()
    text = _OPENING_FENCE.sub("", text)
    text = _CLOSING_FENCE.sub("", text).strip()

    if text.startswith("["):
        last_bracket = text.rfind("]")
        if last_bracket != -1:
            return text[: last_bracket + 1]
        return text

    first_brace = text.find("{")
    last_brace = text.rfind("}")
    if first_brace != -1 and last_brace > first_brace:
        text = text[first_brace : last_brace + 1]

    return text


def extract_json(
    raw_text: str,
    required_keys: Iterable[str] | None = None,
) -> Any:
    """Parse the JSON payload out of a model reply.

    Args:
        raw_text: Text exactly as returned by the completion API
        required_keys: Top-level keys that must be present in the parsed object

    Returns:
        The parsed JSON value

    Raises:
        ParseError: If the cleaned text is not valid JSON
        ExtractionValidationError: If required keys are missing
    """
    cleaned = fix_json_control_chars(clean_response_text(raw_text))

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(
            "Failed to parse model response as JSON",
            extra={
                "error": str(e),
                "raw_response": truncate_text(raw_text, 1000),
                "raw_length": len(raw_text),
            },
        )
        raise ParseError(f"Invalid JSON in model response: {e.msg}", raw_text=raw_text) from e

    if required_keys is not None:
        keys = list(required_keys)
        if not isinstance(parsed, dict):
            raise ExtractionValidationError(keys)
        missing = [key for key in keys if key not in parsed]
        if missing:
            logger.warning(
                "Model response is missing required keys",
                extra={"missing_keys": missing, "present_keys": sorted(parsed)},
            )
            raise ExtractionValidationError(missing)

    return parsed
