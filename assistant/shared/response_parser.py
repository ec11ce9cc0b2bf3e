"""
Response parser shared by all LLM-backed agents.

Handles extraction of JSON objects from LLM responses in various formats
(raw JSON, markdown code blocks, JSON surrounded by prose).
"""

import json
import logging
import re
from typing import Any, Dict


logger = logging.getLogger(__name__)


class ParseError(Exception):
    """Raised when response parsing fails."""

    pass


def extract_json_from_response(raw_response: str) -> str:
    """
    Extract JSON content from LLM response.

    Handles multiple formats:
    - Raw JSON
    - JSON in markdown code blocks (```json ... ```)
    - JSON object embedded in surrounding prose

    Args:
        raw_response: Raw LLM response string

    Returns:
        Cleaned JSON string ready for parsing
    """
    content = (raw_response or "").strip()

    # Try to extract from markdown code block
    code_block_pattern = r"```(?:json)?\s*([\s\S]*?)```"
    match = re.search(code_block_pattern, content)
    if match:
        content = match.group(1).strip()

    # Skip leading prose up to the first object
    start = content.find("{")
    if start > 0:
        content = content[start:]

    if content.startswith("{"):
        # Find matching closing brace, ignoring braces inside strings
        depth = 0
        in_string = False
        escaped = False
        for i, char in enumerate(content):
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
                    return content[: i + 1]

    # If we can't find clear boundaries, return as-is and let JSON parser handle it
    return content


def parse_json_object(raw_response: str) -> Dict[str, Any]:
    """
    Parse a JSON object out of an LLM response.

    Args:
        raw_response: Raw LLM response string

    Returns:
        Parsed dictionary

    Raises:
        ParseError: If no JSON object can be decoded
    """
    json_str = extract_json_from_response(raw_response)

    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise ParseError(f"Failed to parse response JSON: {e}")

    if not isinstance(data, dict):
        raise ParseError(f"Expected a JSON object, got {type(data).__name__}")

    return data


def as_string_list(value: Any) -> list:
    """Coerce a loosely-typed LLM field into a list of non-empty strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None and str(v).strip()]
    return [str(value)]
