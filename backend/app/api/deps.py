"""
FastAPI dependencies

Reusable dependencies injected into route handlers:
- StoresDep: the credential store (tests override get_stores)
- AuthServiceDep / HotmartServiceDep: services bound to the stores/settings
- CurrentSession: verified claims of the caller's bearer token
"""
from typing import Annotated

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError

from app.api.errors import invalid_token
from app.api.schemas import TokenPayload
from app.core import security
from app.core import store as core_store
from app.core.config import settings
from app.core.store import Stores
from app.services.auth_service import AuthService
from app.services.hotmart_service import HotmartService

# auto_error=False so a missing header is reported through AppError (401)
# instead of FastAPI's default 403.
reusable_bearer = HTTPBearer(auto_error=False)


def get_stores() -> Stores:
    return core_store.get_stores()


StoresDep = Annotated[Stores, Depends(get_stores)]
TokenDep = Annotated[HTTPAuthorizationCredentials | None, Depends(reusable_bearer)]


def get_auth_service(stores: StoresDep) -> AuthService:
    return AuthService(stores)


def get_hotmart_service() -> HotmartService:
    return HotmartService(
        webhook_secret=settings.HOTMART_WEBHOOK_SECRET,
        environment=settings.ENVIRONMENT,
    )


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
HotmartServiceDep = Annotated[HotmartService, Depends(get_hotmart_service)]


def get_current_session(token: TokenDep) -> TokenPayload:
    """
    Decode the caller's session token.

    Tokens are not stored server-side: a token is valid when its signature
    checks out and it has not expired.

    Raises:
        AuthenticationError: header missing, token invalid/expired, or no subject
    """
    if token is None:
        raise invalid_token()
    try:
        payload = security.decode_access_token(token.credentials)
        token_data = TokenPayload(**payload)
    except (jwt.InvalidTokenError, ValidationError):
        raise invalid_token()
    if not token_data.sub:
        raise invalid_token()
    return token_data


CurrentSession = Annotated[TokenPayload, Depends(get_current_session)]
