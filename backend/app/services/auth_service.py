"""
Authentication service

Purchase check, first-password creation, login and onboarding completion
for the members area. The service only depends on the credential store
interface (app.core.store.Stores), so routes inject the process-wide stores
and tests pass fresh in-memory ones.
"""
from __future__ import annotations

import logging

from app import crud
from app.api.errors import (
    ForbiddenError,
    already_registered,
    invalid_credentials,
    missing_fields,
    purchase_not_active,
    purchase_not_found,
    user_not_found,
)
from app.api.schemas import (
    AuthSessionData,
    PurchaseCheckData,
    UserProfile,
)
from app.core import security
from app.core.store import Stores
from app.models import Purchase, UserCredential, normalize_email

logger = logging.getLogger(__name__)


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def to_profile(user: UserCredential) -> UserProfile:
    return UserProfile(
        email=user.email,
        name=user.name,
        has_completed_onboarding=user.has_completed_onboarding,
    )


class AuthService:
    """Purchase-gated authentication over the credential store."""

    def __init__(self, stores: Stores) -> None:
        self.purchases = stores.purchases
        self.users = stores.users

    def _active_purchase(self, email: str) -> Purchase:
        purchase = crud.get_purchase_by_email(store=self.purchases, email=email)
        if not purchase:
            raise purchase_not_found()
        if not purchase.is_active:
            raise purchase_not_active()
        return purchase

    def _issue_session(self, user: UserCredential) -> AuthSessionData:
        token = security.create_access_token(user.email, email=user.email, name=user.name)
        return AuthSessionData(token=token, user=to_profile(user))

    def check_purchase(self, email: str | None) -> PurchaseCheckData:
        """
        Confirm that an email has an active purchase.

        Raises:
            ValidationError: email missing
            NotFoundError: no purchase for the email
            ForbiddenError: purchase exists but is not active
        """
        if _blank(email):
            raise missing_fields("email")
        purchase = self._active_purchase(email)
        return PurchaseCheckData(
            customer_name=purchase.name,
            purchase_date=purchase.purchase_date,
        )

    def has_credential(self, email: str | None) -> bool:
        """Whether a password was already created for the email."""
        if _blank(email):
            raise missing_fields("email")
        return crud.user_exists(store=self.users, email=email)

    def create_password(
        self,
        email: str | None,
        password: str | None,
        name: str | None = None,
    ) -> AuthSessionData:
        """
        Create the one-time credential for a purchaser and open a session.

        The display name falls back to the buyer name on the purchase.

        Raises:
            ValidationError: email or password missing
            NotFoundError: nothing was purchased with this email
            ConflictError: a password already exists for the email
        """
        if _blank(email) or not password:
            raise missing_fields("email", "password")
        purchase = crud.get_purchase_by_email(store=self.purchases, email=email)
        if not purchase:
            raise purchase_not_found()
        if crud.user_exists(store=self.users, email=email):
            raise already_registered()

        # put_if_absent still guards a concurrent registration past this point.
        user = crud.create_user(
            store=self.users,
            email=email,
            name=name or purchase.name,
            password_hash=security.get_password_hash(password),
        )
        logger.info(f"Password created for: {user.email}")
        return self._issue_session(user)

    def login(self, email: str | None, password: str | None) -> AuthSessionData:
        """
        Authenticate with email and password.

        The purchase is re-checked after the password, so a user whose
        purchase is no longer active is refused even with valid credentials.

        Raises:
            ValidationError: email or password missing
            NotFoundError: no credential for the email
            AuthenticationError: wrong password
            ForbiddenError: purchase missing or not active
        """
        if _blank(email) or not password:
            raise missing_fields("email", "password")
        user = crud.get_user_by_email(store=self.users, email=email)
        if not user:
            raise user_not_found()
        if not security.verify_password(password, user.password_hash):
            logger.info(f"Rejected login for {user.email}: wrong password")
            raise invalid_credentials()
        purchase = crud.get_purchase_by_email(store=self.purchases, email=email)
        if not purchase or not purchase.is_active:
            logger.warning(f"Rejected login for {user.email}: purchase not active")
            raise purchase_not_active()

        logger.info(f"User logged in: {user.email}")
        return self._issue_session(user)

    def complete_onboarding(self, email: str | None, *, actor: str) -> UserProfile:
        """
        Mark the user's onboarding as completed. Idempotent.

        Args:
            email: target user; defaults to `actor` when omitted
            actor: email taken from the caller's verified session token

        Raises:
            ForbiddenError: the caller tries to update another user
            NotFoundError: no credential for the email
        """
        target = actor if _blank(email) else email
        if normalize_email(target) != normalize_email(actor):
            raise ForbiddenError(
                code=403002, message="You can only complete your own onboarding"
            )
        user = crud.mark_onboarding_complete(store=self.users, email=target)
        return to_profile(user)

    def get_profile(self, email: str) -> UserProfile:
        """Current profile for a session, refused once the purchase lapses."""
        user = crud.get_user_by_email(store=self.users, email=email)
        if not user:
            raise user_not_found()
        purchase = crud.get_purchase_by_email(store=self.purchases, email=email)
        if not purchase or not purchase.is_active:
            raise purchase_not_active()
        return to_profile(user)
