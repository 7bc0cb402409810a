"""
Authentication routes

Endpoints used by the members-area login page:
- check-purchase: is there an active purchase for this email?
- has-credential: was a password already created for it?
- create-password / login: open a session (JWT bearer token)
- complete-onboarding / me: calls made with the session token
"""
from __future__ import annotations

from fastapi import APIRouter

from app.api.deps import AuthServiceDep, CurrentSession
from app.api.errors import AppError
from app.api.schemas import (
    AuthSessionData,
    CreatePasswordRequest,
    CredentialCheckData,
    EmailRequest,
    LoginRequest,
    ProfileData,
    PurchaseCheckData,
    SuccessResponse,
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/check-purchase", response_model=PurchaseCheckData)
def check_purchase(service: AuthServiceDep, body: EmailRequest) -> PurchaseCheckData:
    """
    Check whether an email has an active Hotmart purchase.

    Request path: POST /api/auth/check-purchase

    Response example:
        {"hasPurchase": true, "customerName": "Ana", "purchaseDate": "2025-06-02T10:53:02Z"}
    """
    try:
        return service.check_purchase(body.email)
    except AppError as exc:
        # The login page reads hasPurchase on failures too.
        exc.extra.setdefault("hasPurchase", False)
        raise


@router.post("/has-credential", response_model=CredentialCheckData)
def has_credential(service: AuthServiceDep, body: EmailRequest) -> CredentialCheckData:
    """Tell the login page whether to ask for a password or create one."""
    return CredentialCheckData(has_credential=service.has_credential(body.email))


@router.post("/create-password", response_model=AuthSessionData)
def create_password(service: AuthServiceDep, body: CreatePasswordRequest) -> AuthSessionData:
    """
    Create the first password for a purchaser and log them in.

    Request path: POST /api/auth/create-password
    """
    return service.create_password(body.email, body.password, body.name)


@router.post("/login", response_model=AuthSessionData)
def login(service: AuthServiceDep, body: LoginRequest) -> AuthSessionData:
    """
    Log in with email and password.

    Request path: POST /api/auth/login

    Response example:
        {
            "success": true,
            "token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
            "user": {"email": "a@x.com", "name": "Ana", "hasCompletedOnboarding": false}
        }
    """
    return service.login(body.email, body.password)


@router.post("/complete-onboarding", response_model=SuccessResponse)
def complete_onboarding(
    service: AuthServiceDep,
    session: CurrentSession,
    body: EmailRequest | None = None,
) -> SuccessResponse:
    """
    Record that the caller finished onboarding.

    Requires the caller's bearer token; the body email, when given, must be
    the token's own email. Without a body the token's email is used.
    """
    service.complete_onboarding(body.email if body else None, actor=session.sub)
    return SuccessResponse()


@router.get("/me", response_model=ProfileData)
def me(service: AuthServiceDep, session: CurrentSession) -> ProfileData:
    """Profile behind a persisted session token, used to restore a session."""
    return ProfileData(user=service.get_profile(session.sub))
