"""
App shell

Top-level state of the members area once the login page is done: who is
logged in, which tab is open, and which tabs are unlocked. Tabs past the
study-plan step stay locked for a first-time user until a plan has been
generated.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from app.api.schemas import UserProfile
from app.client.errors import (
    ApiError,
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
)
from app.client.login_flow import LoginFlow
from app.client.session import SessionClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TabSpec:
    id: str
    label: str
    requires_plan: bool = False
    external_url: str | None = None


@dataclass(frozen=True)
class Tab:
    id: str
    label: str
    locked: bool
    external_url: str | None = None


TABS: tuple[TabSpec, ...] = (
    TabSpec("onboarding", "Start here"),
    TabSpec("ai-assistant", "Generate your study plan"),
    TabSpec(
        "teacher-poli",
        "Teacher Poli",
        requires_plan=True,
        external_url="https://app.teacherpoli.com/login",
    ),
    TabSpec("resources", "Bonus", requires_plan=True),
    TabSpec("community", "Community", requires_plan=True),
    TabSpec("settings", "Settings", requires_plan=True),
)

DEFAULT_TAB = "onboarding"


class AppShell:
    """
    Logged-in state of the members area

    `error` holds the last session-restore failure that kept the token
    (server unreachable or failing), empty otherwise.
    """

    def __init__(self, client: SessionClient) -> None:
        self.client = client
        self._reset()

    def _reset(self) -> None:
        self.user: UserProfile | None = None
        self.is_logged_in = False
        self.has_generated_plan = False
        self.is_first_time_user = True
        self.active_tab = DEFAULT_TAB
        self.error = ""

    @property
    def plan_locked(self) -> bool:
        return self.is_first_time_user and not self.has_generated_plan

    def login_flow(self) -> LoginFlow:
        """A fresh login page wired to this shell."""
        return LoginFlow(self.client, on_login=self.handle_login)

    def handle_login(self, user: UserProfile) -> None:
        self.user = user
        self.is_logged_in = True
        self.has_generated_plan = user.has_completed_onboarding
        self.is_first_time_user = not user.has_completed_onboarding

    def restore_session(self) -> bool:
        """
        Log back in from a persisted token.

        A token the API rejects (expired, purchase lapsed, user gone) is
        discarded so the login page is shown. When the API cannot answer
        (offline, 5xx) the token is kept for the next attempt and the
        message is left in `error`.
        """
        self.error = ""
        if not self.client.is_authenticated:
            return False
        try:
            user = self.client.me()
        except (AuthenticationError, ForbiddenError, NotFoundError) as e:
            logger.info(f"Discarding stored session: {e.message}")
            self.client.logout()
            return False
        except ApiError as e:
            logger.warning(f"Could not restore session, keeping token: {e.message}")
            self.error = e.message
            return False
        self.handle_login(user)
        return True

    def handle_plan_generated(self) -> None:
        """
        Unlock every tab after the first study plan and record it server-side.

        The unlock is local and immediate; if the request fails it is only
        logged and will be missing on the next login.
        """
        self.has_generated_plan = True
        self.is_first_time_user = False
        if not self.user:
            return
        try:
            self.client.complete_onboarding(self.user.email)
        except ApiError as e:
            logger.warning(f"Could not record onboarding for {self.user.email}: {e.message}")
            return
        self.user = self.user.model_copy(update={"has_completed_onboarding": True})

    def tabs(self) -> list[Tab]:
        locked = self.plan_locked
        return [
            Tab(
                id=spec.id,
                label=spec.label,
                locked=spec.requires_plan and locked,
                external_url=spec.external_url,
            )
            for spec in TABS
        ]

    def select_tab(self, tab_id: str) -> bool:
        """Switch tabs; locked or unknown tabs are ignored."""
        for tab in self.tabs():
            if tab.id == tab_id and not tab.locked:
                self.active_tab = tab_id
                return True
        return False

    def logout(self) -> None:
        self.client.logout()
        self._reset()
