"""
Members-area API client

SessionClient wraps the HTTP API used by the login page and the app shell.
It holds the current session token, attaches it to authenticated calls and
persists it through a TokenStorage so a restarted client is still logged in.

Calls are plain request/response: nothing is retried, a failure raises an
ApiError subclass carrying the server's message.

Example:
    with SessionClient("http://localhost:8000", storage=FileTokenStorage("~/.members.json")) as client:
        client.check_purchase("ana@example.com")
        session = client.login("ana@example.com", "secret1")
"""
from __future__ import annotations

import logging
from typing import Any

import httpx

from app.api.schemas import (
    AuthSessionData,
    CredentialCheckData,
    ProfileData,
    PurchaseCheckData,
    UserProfile,
)
from app.client.errors import (
    AuthenticationError,
    ServerError,
    TransportError,
    error_from_response,
)
from app.client.storage import TOKEN_STORAGE_KEY, MemoryTokenStorage, TokenStorage

logger = logging.getLogger(__name__)


class SessionClient:
    """
    HTTP client for the members-area API

    Every call returns the parsed response model or raises an ApiError
    subclass. create_password() and login() keep the returned token, which
    complete_onboarding() and me() then send as a bearer token.
    """

    def __init__(
        self,
        base_url: str = "",
        *,
        http: httpx.Client | None = None,
        storage: TokenStorage | None = None,
        api_prefix: str = "/api",
        timeout: float = 30.0,
    ) -> None:
        """
        Args:
            base_url: API origin, ignored when `http` is given
            http: preconfigured httpx client (tests pass a TestClient)
            storage: where the token is persisted; in-memory by default
            api_prefix: path prefix of the JSON API
            timeout: request timeout in seconds
        """
        self._owns_http = http is None
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.storage = storage or MemoryTokenStorage()
        self.api_prefix = api_prefix.rstrip("/")
        self._token = self.storage.get(TOKEN_STORAGE_KEY)

    @property
    def token(self) -> str | None:
        """Current session token, None when logged out."""
        return self._token

    @property
    def is_authenticated(self) -> bool:
        """
        Whether a token is held.

        The token is not checked against the API; use me() for that.
        """
        return self._token is not None

    def _store_token(self, token: str) -> None:
        self._token = token
        self.storage.set(TOKEN_STORAGE_KEY, token)

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        authenticated: bool = False,
    ) -> dict[str, Any]:
        headers: dict[str, str] = {}
        if authenticated:
            if not self._token:
                raise AuthenticationError("You are not logged in", status_code=401)
            headers["Authorization"] = f"Bearer {self._token}"

        try:
            response = self.http.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise TransportError("Could not reach the server, please try again") from e

        if response.is_success:
            try:
                return response.json()
            except ValueError as e:
                # e.g. an HTML page served by a proxy in front of the API
                logger.error(f"{method} {path} returned a non-JSON body: {e}")
                raise ServerError(
                    "Unexpected response from the server, please try again",
                    status_code=response.status_code,
                ) from e
        error = error_from_response(response)
        logger.info(f"{method} {path} -> {response.status_code}: {error.message}")
        raise error

    def check_purchase(self, email: str) -> PurchaseCheckData:
        """
        Check that `email` has an active purchase.

        POST /api/auth/check-purchase

        Raises:
            ValidationError: email missing
            NotFoundError: no purchase for the email
            ForbiddenError: the purchase is no longer active
        """
        data = self._request("POST", f"{self.api_prefix}/auth/check-purchase", json={"email": email})
        return PurchaseCheckData.model_validate(data)

    def has_credential(self, email: str) -> bool:
        """Whether a password was already created for `email`."""
        data = self._request("POST", f"{self.api_prefix}/auth/has-credential", json={"email": email})
        return CredentialCheckData.model_validate(data).has_credential

    def create_password(self, email: str, password: str, name: str | None = None) -> AuthSessionData:
        """
        Create the first password and keep the returned session token.

        POST /api/auth/create-password

        Raises:
            NotFoundError: nothing was purchased with this email
            ConflictError: a password already exists
        """
        data = self._request(
            "POST",
            f"{self.api_prefix}/auth/create-password",
            json={"email": email, "password": password, "name": name},
        )
        session = AuthSessionData.model_validate(data)
        self._store_token(session.token)
        return session

    def login(self, email: str, password: str) -> AuthSessionData:
        """
        Log in and keep the returned session token.

        POST /api/auth/login

        Raises:
            NotFoundError: no password was created for the email
            AuthenticationError: wrong password
            ForbiddenError: the purchase is no longer active
        """
        data = self._request(
            "POST",
            f"{self.api_prefix}/auth/login",
            json={"email": email, "password": password},
        )
        session = AuthSessionData.model_validate(data)
        self._store_token(session.token)
        return session

    def complete_onboarding(self, email: str) -> None:
        """Record the logged-in user's onboarding as done. Safe to repeat."""
        self._request(
            "POST",
            f"{self.api_prefix}/auth/complete-onboarding",
            json={"email": email},
            authenticated=True,
        )

    def me(self) -> UserProfile:
        """Profile for the stored token."""
        data = self._request("GET", f"{self.api_prefix}/auth/me", authenticated=True)
        return ProfileData.model_validate(data).user

    def simulate_purchase(self, email: str, name: str | None = None) -> None:
        """Register a fake purchase; only served by local deployments."""
        self._request("POST", "/test/simulate-purchase", json={"email": email, "name": name})

    def logout(self) -> None:
        """Forget the token, in memory and in storage."""
        self._token = None
        self.storage.remove(TOKEN_STORAGE_KEY)

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> SessionClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
