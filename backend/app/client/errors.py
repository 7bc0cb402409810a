"""
Client-side errors

Every failed call to the members-area API raises an ApiError subclass whose
`message` is the server's human-readable error, ready to show inline.
"""
from __future__ import annotations

from typing import Any

import httpx


class ApiError(Exception):
    """A non-2xx response from the API."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: int | None = None,
        body: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.body = body or {}


class ValidationError(ApiError):
    """400"""


class AuthenticationError(ApiError):
    """401"""


class ForbiddenError(ApiError):
    """403"""


class NotFoundError(ApiError):
    """404"""


class ConflictError(ApiError):
    """409"""


class ServerError(ApiError):
    """5xx"""


class TransportError(ApiError):
    """The request never got a response (connection refused, timeout...)."""


_ERRORS_BY_STATUS: dict[int, type[ApiError]] = {
    400: ValidationError,
    401: AuthenticationError,
    403: ForbiddenError,
    404: NotFoundError,
    409: ConflictError,
}


def error_from_response(response: httpx.Response) -> ApiError:
    try:
        body = response.json() if response.content else {}
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    message = body.get("error") or f"HTTP {response.status_code}"
    if response.status_code >= 500:
        error_cls: type[ApiError] = ServerError
    else:
        error_cls = _ERRORS_BY_STATUS.get(response.status_code, ApiError)
    return error_cls(
        str(message),
        status_code=response.status_code,
        code=body.get("code"),
        body=body,
    )
