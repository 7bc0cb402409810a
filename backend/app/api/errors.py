"""
Application exceptions

Every business failure is raised as an AppError subclass. The handlers in
app/main.py turn them into a JSON body of the form
{"success": false, "code": ..., "error": ...} with the matching HTTP status.
"""
from __future__ import annotations

from typing import Any


class AppError(Exception):
    """
    Base application error.

    Attributes:
        code: business error code, stable across message wording changes
        message: human readable message shown to the user
        status_code: HTTP status returned to the caller
        extra: additional fields merged into the error body

    Example:
        raise AppError(code=404001, message="No purchase found", status_code=404)
    """

    status_code: int = 400

    def __init__(
        self,
        *,
        code: int,
        message: str,
        status_code: int | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra or {}


class ValidationError(AppError):
    status_code = 400


class AuthenticationError(AppError):
    status_code = 401


class ForbiddenError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409


class InternalError(AppError):
    status_code = 500


def missing_fields(*names: str) -> ValidationError:
    joined = " and ".join(names)
    verb = "is" if len(names) == 1 else "are"
    return ValidationError(code=400001, message=f"{joined.capitalize()} {verb} required")


def purchase_not_found() -> NotFoundError:
    return NotFoundError(code=404001, message="No purchase found for this email")


def user_not_found() -> NotFoundError:
    return NotFoundError(code=404002, message="User not found")


def purchase_not_active() -> ForbiddenError:
    return ForbiddenError(code=403001, message="Purchase is not active")


def already_registered() -> ConflictError:
    return ConflictError(code=409001, message="A password is already registered for this email")


def invalid_credentials() -> AuthenticationError:
    return AuthenticationError(code=401001, message="Incorrect password")


def invalid_token() -> AuthenticationError:
    return AuthenticationError(code=401002, message="Could not validate credentials")
