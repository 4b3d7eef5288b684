"""Error codes and exception types for the ISON core.

WHY: Callers of the converter (CLI, HTTP API, library users) need to
tell a malformed document apart from an unreadable file or a bad
argument. The ISON grammar itself is forgiving, so errors only surface
at the whole-document level; this module names those few failure modes.

HOW: ErrorCode enumerates the failure categories with stable numeric
values. Each exception class carries the matching code so the HTTP
layer can report it without inspecting message strings.

RULES:
- Parsing never raises for bad rows or fields, only for structural problems
- IsonParseError and InvalidArgumentError are also ValueErrors
- IsonIOError wraps the underlying OSError as __cause__
- error_string() never raises, unknown codes map to "Unknown error"
"""

from __future__ import annotations

import enum

__all__ = [
    "ErrorCode",
    "IsonError",
    "IsonParseError",
    "IsonIOError",
    "InvalidArgumentError",
    "error_string",
    "code_for_exception",
]


class ErrorCode(int, enum.Enum):
    """Failure categories shared by every public operation."""

    OK = 0
    MEMORY = -1
    PARSE = -2
    IO = -3
    INVALID = -4


_MESSAGES = {
    ErrorCode.OK: "OK",
    ErrorCode.MEMORY: "Memory allocation failed",
    ErrorCode.PARSE: "Parse error",
    ErrorCode.IO: "I/O error",
    ErrorCode.INVALID: "Invalid argument",
}


def error_string(code: ErrorCode | int) -> str:
    """Return the human-readable message for an error code."""
    try:
        return _MESSAGES[ErrorCode(code)]
    except ValueError:
        return "Unknown error"


class IsonError(Exception):
    """Base class for all converter errors."""

    code: ErrorCode = ErrorCode.INVALID

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or error_string(self.code))


class IsonParseError(IsonError, ValueError):
    """Malformed top-level structure (e.g. JSON input that is not an object)."""

    code = ErrorCode.PARSE


class IsonIOError(IsonError):
    """A file could not be opened, read, decoded or written."""

    code = ErrorCode.IO


class InvalidArgumentError(IsonError, ValueError):
    """A required argument was missing, empty or of the wrong type."""

    code = ErrorCode.INVALID


def code_for_exception(exc: BaseException) -> ErrorCode:
    """Map any exception to the closest ErrorCode.

    RULES:
    - IsonError subclasses report their own code
    - MemoryError maps to MEMORY, OSError to IO
    - Anything else is treated as INVALID
    """
    if isinstance(exc, IsonError):
        return exc.code
    if isinstance(exc, MemoryError):
        return ErrorCode.MEMORY
    if isinstance(exc, OSError):
        return ErrorCode.IO
    return ErrorCode.INVALID
