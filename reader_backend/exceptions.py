"""
Error types raised by the entry engine, plus helpers for common patterns.

The engine raises these and never catches them; the HTTP layer maps them to
status codes (see register_exception_handlers).
"""

from typing import TypeVar

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

T = TypeVar("T")


class ReaderError(Exception):
    """Base class for errors surfaced to API callers."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ReaderError):
    """Input was well-formed for the transport but rejected by the engine."""

    code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(ReaderError):
    """Resource does not exist or is not owned by the caller."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, message: str = "Resource not found", code: str | None = None):
        super().__init__(message)
        if code:
            self.code = code


def entry_not_found() -> NotFoundError:
    return NotFoundError("Entry not found", code="ENTRY_NOT_FOUND")


def require_entry(entry: T | None) -> T:
    """Raise ENTRY_NOT_FOUND if entry is None."""
    if entry is None:
        raise entry_not_found()
    return entry


async def _reader_error_handler(request: Request, exc: ReaderError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


def register_exception_handlers(app: FastAPI):
    """Map engine errors to HTTP responses."""
    app.add_exception_handler(ReaderError, _reader_error_handler)
