"""
Shared model helpers
"""
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    """
    Canonical store key for an email address.

    Surrounding whitespace is dropped and the address is lower-cased, so
    "Foo@Bar.com" and "foo@bar.com" resolve to the same record. Applying it
    twice gives the same result.
    """
    return email.strip().lower()


class Record(BaseModel):
    """Base class for everything kept in the credential store."""
    model_config = ConfigDict(validate_assignment=True)


__all__ = ["Record", "normalize_email", "utc_now"]
