"""JSON response helpers and the journal error-to-status mapping."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from fastapi.responses import JSONResponse

from journal.exceptions import (
    InputIncomplete,
    JournalError,
    StorageError,
    TradeNotFound,
    TradeValidationError,
    UnknownInstrument,
)


def _decimal_to_str(obj: Any) -> Any:
    """Recursively convert Decimal values to strings for JSON serialization."""
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, dict):
        return {k: _decimal_to_str(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_decimal_to_str(item) for item in obj]
    return obj


def json_response(content: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=_decimal_to_str(content), status_code=status_code)


def error_response(exc: JournalError, payload: dict | None = None) -> JSONResponse:
    """Map a journal exception to its HTTP response.

    - TradeValidationError, UnknownInstrument, InputIncomplete: 422 with
      per-field messages
    - TradeNotFound: 404
    - StorageError: 503 (retryable), echoing payload so no input is lost
    """
    if isinstance(exc, TradeValidationError):
        return json_response({"error": "validation_failed", "fields": exc.errors}, 422)
    if isinstance(exc, UnknownInstrument):
        return json_response(
            {"error": "unknown_instrument", "fields": {"symbol": str(exc)}}, 422
        )
    if isinstance(exc, InputIncomplete):
        return json_response(
            {"error": exc.reason, "fields": {exc.field: str(exc)}}, 422
        )
    if isinstance(exc, TradeNotFound):
        return json_response({"error": str(exc)}, 404)
    if isinstance(exc, StorageError):
        content: dict[str, Any] = {"error": "storage_unavailable", "detail": str(exc)}
        if payload is not None:
            content["payload"] = payload
        return json_response(content, 503)
    return json_response({"error": str(exc)}, 400)
