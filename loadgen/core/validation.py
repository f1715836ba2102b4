"""
Input checks shared by the JSON (POST) and query-string (GET) transports.
"""
from __future__ import annotations

import math
from typing import Any, Optional


class ValidationError(Exception):
    """Rejected client input. Rendered as HTTP 400 by the app's exception handler."""

    def __init__(self, message: str, example: Any = None):
        super().__init__(message)
        self.message = message
        self.example = example

    def to_dict(self):
        body = {"error": self.message}
        if self.example is not None:
            body["example"] = self.example
        return body


def _is_number(value: Any) -> bool:
    # bool is an int subclass; JSON true/false are not numbers here
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def positive_number(value: Any, message: str) -> float:
    """JSON body value: must already be a finite number > 0."""
    if not _is_number(value) or not math.isfinite(value) or value <= 0:
        raise ValidationError(message)
    return value


def positive_query_number(raw: Optional[str], message: str):
    """Query-string value: must parse as a finite number > 0. Integral values come back as int."""
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValidationError(message)
    if not math.isfinite(value) or value <= 0:
        raise ValidationError(message)
    return int(value) if value.is_integer() else value


def require(payload: dict, fields, message: str, example: Any = None):
    missing = [f for f in fields if payload.get(f) is None or payload.get(f) == ""]
    if missing:
        raise ValidationError(message, example)


def check_memory_bounds(min_memory, max_memory):
    if min_memory >= max_memory:
        raise ValidationError("minMemory must be less than maxMemory")
