"""
Members-area client

- session.py: SessionClient, HTTP calls + token persistence
- login_flow.py: login page state machine
- shell.py: logged-in app state and tab gating
"""
from .errors import ApiError
from .login_flow import MIN_PASSWORD_LENGTH, LoginFlow, LoginStep
from .session import SessionClient
from .shell import TABS, AppShell, Tab
from .storage import TOKEN_STORAGE_KEY, FileTokenStorage, MemoryTokenStorage

__all__ = [
    "ApiError",
    "MIN_PASSWORD_LENGTH",
    "LoginFlow",
    "LoginStep",
    "SessionClient",
    "TABS",
    "AppShell",
    "Tab",
    "TOKEN_STORAGE_KEY",
    "FileTokenStorage",
    "MemoryTokenStorage",
]
