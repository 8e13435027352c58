#!/usr/bin/env python3
"""
hookkit - Errors

The codec layers and the harness raise. Classifying hook output and parsing a
transcript always produce a result, so neither has an exception here.
"""

from typing import Any, Optional


class HookError(Exception):
    """Base class for hookkit errors."""


class MalformedInput(HookError, ValueError):
    """Hook input is not a JSON object, or a required field is missing or mistyped."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        expected: Optional[str] = None
    ):
        super().__init__(message)
        self.field = field
        self.expected = expected


class InvalidDecisionForEventKind(HookError, ValueError):
    """A decision cannot be expressed for the event kind it is being sent for."""

    def __init__(self, message: str, kind: Any = None, control: Any = None):
        super().__init__(message)
        self.kind = kind
        self.control = control


class HookTimeout(HookError):
    """A hook process run by the harness did not exit within its timeout."""

    def __init__(self, message: str, timeout: Optional[float] = None):
        super().__init__(message)
        self.timeout = timeout


def json_type_name(value: Any) -> str:
    """Name of the JSON type a decoded value came from."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__
