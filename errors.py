"""Error taxonomy shared by the ledger services and the HTTP adapter."""

from __future__ import annotations


class AppError(Exception):
    """Base application error with a stable machine-readable code."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class ValidationError(AppError):
    """Malformed, missing or out-of-range input."""

    def __init__(self, reason: str) -> None:
        super().__init__(message=reason, code="VALIDATION_ERROR", status_code=400)


class NotFoundError(AppError):
    """Entity absent, owned by another user, or already soft-deleted."""

    def __init__(self, resource: str) -> None:
        super().__init__(
            message=f"{resource} not found", code="NOT_FOUND", status_code=404
        )


class ConflictError(AppError):
    """A concurrent write to the same row won the race."""

    def __init__(self, reason: str) -> None:
        super().__init__(message=reason, code="CONFLICT", status_code=409)


class StoreUnavailable(AppError):
    """The database could not be reached or timed out."""

    def __init__(self, reason: str = "Storage is temporarily unavailable") -> None:
        super().__init__(message=reason, code="STORE_UNAVAILABLE", status_code=503)


class InternalError(AppError):
    def __init__(self) -> None:
        super().__init__(
            message="Something went wrong", code="INTERNAL_ERROR", status_code=500
        )


class AuthenticationError(AppError):
    """The request did not identify its owner."""

    def __init__(self, reason: str = "Not authenticated") -> None:
        super().__init__(message=reason, code="UNAUTHORIZED", status_code=401)
