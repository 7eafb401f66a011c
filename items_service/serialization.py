"""
JSON helpers for item bodies.

DynamoDB's resource API rejects floats and returns every number as Decimal, so
bodies are parsed with Decimal numbers and Decimals are turned back into plain
JSON numbers on the way out.
"""

import json
from decimal import Decimal
from typing import Any

from items_service.errors import ValidationError


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, set):
        return sorted(value, key=str)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a valid number")


def dumps(value: Any) -> str:
    return json.dumps(value, default=_json_default)


def parse_item_body(body: str | None) -> dict[str, Any]:
    """
    Parse a raw request body into an item mapping.

    Args:
        body: Raw JSON text from the request

    Returns:
        The decoded JSON object

    Raises:
        ValidationError: If the body is missing, malformed, or not a JSON object
    """
    if body is None or not body.strip():
        raise ValidationError("Request body is required")

    try:
        parsed = json.loads(body, parse_float=Decimal, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON body: {e.msg}") from e
    except ValueError as e:
        raise ValidationError(f"Invalid JSON body: {e}") from e

    if not isinstance(parsed, dict):
        raise ValidationError("Request body must be a JSON object")
    return parsed
