"""
Login flow

State machine behind the members-area login page:

    EMAIL ──> PASSWORD ────────> AUTHENTICATED
      │                              ^
      └─────> CREATE_PASSWORD ───────┘

The email step checks the purchase, then asks the API whether a password
already exists to pick the next step. `back()` returns to EMAIL from either
password step. Errors never change the step; they are exposed as `error`
text for the page to display. Only one request is in flight at a time: a
submit while another is pending is ignored.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import Enum

from app.api.schemas import UserProfile
from app.client.errors import ApiError
from app.client.session import SessionClient

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class LoginStep(str, Enum):
    email = "email"
    password = "password"
    create_password = "create-password"
    authenticated = "authenticated"


class LoginFlow:
    """
    Login page state

    Attributes:
        step: current LoginStep
        email: email accepted by the email step
        customer_name: buyer name from the purchase, used as default display name
        error: message to show under the form, empty when there is none
        user: profile once authenticated

    Args:
        client: SessionClient used for every request
        on_login: called with the profile once the flow is authenticated
    """

    def __init__(
        self,
        client: SessionClient,
        on_login: Callable[[UserProfile], None] | None = None,
    ) -> None:
        self.client = client
        self.on_login = on_login
        self.step = LoginStep.email
        self.email = ""
        self.customer_name = ""
        self.error = ""
        self.user: UserProfile | None = None
        self._pending = threading.Lock()

    @property
    def is_loading(self) -> bool:
        return self._pending.locked()

    def _fail(self, message: str) -> bool:
        self.error = message
        return False

    def _authenticated(self, user: UserProfile) -> None:
        self.user = user
        self.step = LoginStep.authenticated
        logger.info(f"Authenticated as {user.email}")
        if self.on_login:
            self.on_login(user)

    def submit_email(self, email: str) -> bool:
        """
        Check the purchase for `email` and route to the next step.

        Returns True when the flow moved on to a password step.
        """
        if self.step != LoginStep.email:
            return False
        email = email.strip()
        if not email:
            return self._fail("Please enter your email")
        if not self._pending.acquire(blocking=False):
            return False
        try:
            self.error = ""
            purchase = self.client.check_purchase(email)
            has_credential = self.client.has_credential(email)
        except ApiError as e:
            return self._fail(e.message)
        finally:
            self._pending.release()

        self.email = email
        self.customer_name = purchase.customer_name
        self.step = LoginStep.password if has_credential else LoginStep.create_password
        return True

    def submit_password(self, password: str) -> bool:
        """Log in an existing user. Returns True once authenticated."""
        if self.step != LoginStep.password:
            return False
        if not password:
            return self._fail("Please enter your password")
        if not self._pending.acquire(blocking=False):
            return False
        try:
            self.error = ""
            session = self.client.login(self.email, password)
        except ApiError as e:
            return self._fail(e.message)
        finally:
            self._pending.release()

        self._authenticated(session.user)
        return True

    def submit_new_password(self, password: str, confirmation: str) -> bool:
        """
        Create the first password. Checked locally before any request:
        both fields filled, at least MIN_PASSWORD_LENGTH characters, equal.
        """
        if self.step != LoginStep.create_password:
            return False
        if not password or not confirmation:
            return self._fail("Please fill in all fields")
        if len(password) < MIN_PASSWORD_LENGTH:
            return self._fail(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if password != confirmation:
            return self._fail("Passwords do not match")
        if not self._pending.acquire(blocking=False):
            return False
        try:
            self.error = ""
            session = self.client.create_password(self.email, password, self.customer_name or None)
        except ApiError as e:
            return self._fail(e.message)
        finally:
            self._pending.release()

        self._authenticated(session.user)
        return True

    def back(self) -> None:
        """Return to the email step from either password step, clearing the error."""
        if self.step in (LoginStep.password, LoginStep.create_password):
            self.step = LoginStep.email
            self.error = ""
