# showtracker/core/exceptions.py
from __future__ import annotations

"""
ShowTracker — Application Exceptions
====================================
A small, consistent layer on top of FastAPI/Starlette's `HTTPException` so
errors raised by the watch-status engine surface through the profile-facing
API with a stable JSON shape (see `showtracker.core.exception_handlers`).

Taxonomy
--------
- `NotFoundError`  — the triggering entity does not exist (404). Fatal to the
  operation; the transaction is rolled back and the error reaches the caller
  unchanged.
- `DatabaseError`  — any underlying store failure (500), wrapped with the
  operation context and the original exception kept as `__cause__`.

Usage
-----
    try:
        ...
    except Exception as exc:
        handle_database_error(exc, "updating episode watch status")
"""

from typing import Any, Dict, NoReturn, Optional

from fastapi import HTTPException, status

__all__ = [
    "AppException",
    "NotFoundError",
    "DatabaseError",
    "handle_database_error",
]


# ──────────────────────────────────────────────────────────────
# 📦 Core: AppException
# ──────────────────────────────────────────────────────────────
class AppException(HTTPException):
    """Base application-level exception with optional metadata.

    Attributes
    -----------
    status_code : int
        HTTP status code (e.g., 404/500).
    message : str
        Human-readable error message (serialized as `detail` as well).
    code : int
        Optional internal/typed error code. Defaults to `status_code`.
    details : dict | list | str | None
        Machine-readable details (ids, operation context).
    extra : dict | None
        Additional non-sensitive metadata to surface to clients.
    """

    def __init__(
        self,
        *,
        status_code: int,
        message: str,
        code: Optional[int] = None,
        details: Optional[Any] = None,
        extra: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code: int = int(code or status_code)
        self.message: str = message
        self.details: Optional[Any] = details
        self.extra: Dict[str, Any] = extra or {}

    def __str__(self) -> str:
        return self.message

    # ── [Helper] Canonical body used by handlers ───────────────────────────
    def to_problem(self, *, fallback_request_id: Optional[str] = None) -> Dict[str, Any]:
        """Return a dict matching our problem-like JSON shape."""
        body: Dict[str, Any] = {
            "error": True,
            "message": self.message,
            "code": self.code,
            "request_id": fallback_request_id or "N/A",
        }
        if self.details is not None:
            body["details"] = self.details
        body.update(self.extra)
        return body


# ──────────────────────────────────────────────────────────────
# 🔎 Lookup failures
# ──────────────────────────────────────────────────────────────
class NotFoundError(AppException):
    """Raised when the entity that triggered a propagation run does not exist."""

    def __init__(
        self,
        message: str,
        *,
        entity_type: Optional[str] = None,
        entity_id: Optional[int] = None,
    ) -> None:
        details = None
        if entity_type is not None:
            details = {"entity_type": entity_type, "entity_id": entity_id}
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            message=message,
            details=details,
        )


# ──────────────────────────────────────────────────────────────
# 🗄️ Store failures
# ──────────────────────────────────────────────────────────────
class DatabaseError(AppException):
    """Wraps an underlying store failure with operation context (500)."""

    def __init__(self, message: str, original: Optional[BaseException] = None) -> None:
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message=message,
        )
        self.original = original


def handle_database_error(error: BaseException, context: str) -> NoReturn:
    """Re-raise application errors unchanged; wrap anything else.

    Always raises. `AppException`s (e.g. `NotFoundError`) pass through so the
    caller sees the real cause; other errors become a `DatabaseError` whose
    message names the operation.
    """
    if isinstance(error, AppException):
        raise error

    message = f"Database error {context}: {error}" if str(error) else f"Unknown database error {context}"
    raise DatabaseError(message, error) from error
