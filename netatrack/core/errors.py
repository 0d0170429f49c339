"""
Application error taxonomy

Services raise (or, for the fetcher, return) an AppError; the exception
handler in main.py turns it into the uniform error body:

    {"error": {"message": ..., "code": ..., "details": ...}}
"""
from typing import Any, Optional

from fastapi import status
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError


class AppError(Exception):
    """An error that maps onto an HTTP status and the uniform error body."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        code: Optional[str] = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details

    def to_body(self, request_id: Optional[str] = None) -> dict:
        error = {"message": self.message}
        if self.code:
            error["code"] = self.code
        if self.details is not None:
            error["details"] = self.details
        if request_id:
            error["requestId"] = request_id
        return {"error": error}

    def __repr__(self):
        return f"<AppError(status={self.status_code}, code={self.code}, message={self.message!r})>"

    # --------------- constructors ---------------

    @classmethod
    def bad_request(cls, message: str, code: str = "BAD_REQUEST", details: Any = None) -> "AppError":
        return cls(message, status.HTTP_400_BAD_REQUEST, code, details)

    @classmethod
    def unauthorized(cls, message: str = "Authentication required") -> "AppError":
        return cls(message, status.HTTP_401_UNAUTHORIZED, "UNAUTHORIZED")

    @classmethod
    def forbidden(cls, message: str = "Admin privileges required") -> "AppError":
        return cls(message, status.HTTP_403_FORBIDDEN, "FORBIDDEN")

    @classmethod
    def not_found(cls, entity: str, entity_id: Any = None) -> "AppError":
        message = f"{entity.capitalize()} not found"
        details = {"id": str(entity_id)} if entity_id is not None else None
        return cls(message, status.HTTP_404_NOT_FOUND, "NOT_FOUND", details)

    @classmethod
    def conflict(cls, message: str, code: str = "CONFLICT") -> "AppError":
        return cls(message, status.HTTP_409_CONFLICT, code)

    @classmethod
    def internal(cls, message: str = "An internal error occurred", code: str = "INTERNAL", details: Any = None) -> "AppError":
        return cls(message, status.HTTP_500_INTERNAL_SERVER_ERROR, code, details)

    @classmethod
    def from_db_error(cls, exc: SQLAlchemyError, message: str = "Database operation failed") -> "AppError":
        """Wrap a store-level failure, keeping the driver's error code."""
        if isinstance(exc, IntegrityError):
            return cls.conflict(message, code=_driver_code(exc) or "INTEGRITY_ERROR")
        code = _driver_code(exc) or "DATABASE_ERROR"
        return cls.internal(message, code=code, details={"type": type(exc).__name__})


def _driver_code(exc: SQLAlchemyError) -> Optional[str]:
    # asyncpg exposes sqlstate, psycopg exposes pgcode; sqlalchemy keeps its own short code
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        for attr in ("sqlstate", "pgcode"):
            value = getattr(exc.orig, attr, None)
            if value:
                return str(value)
    return getattr(exc, "code", None)
