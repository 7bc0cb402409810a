"""
User credential model
"""
from datetime import datetime

from pydantic import Field

from .base import Record, utc_now


class UserCredential(Record):
    """
    User credential record

    Created once per email, after a purchase exists for it. The only
    mutation afterwards is flipping `has_completed_onboarding` to True.

    Fields:
    - email: lower-cased email, the store key
    - name: display name
    - password_hash: bcrypt hash produced by app.core.security
    - created_at: creation time (UTC)
    - has_completed_onboarding: set once the user generated a study plan
    """
    email: str
    name: str
    password_hash: str
    created_at: datetime = Field(default_factory=utc_now)
    has_completed_onboarding: bool = False
