"""
Store record models

Records are plain Pydantic models; app.core.store serialises them for the
configured backend.

- purchase.py: purchase registered by the Hotmart webhook
- user.py: user credential (password hash, onboarding flag)
"""
from .base import Record, normalize_email, utc_now
from .purchase import Purchase
from .user import UserCredential

__all__ = [
    "Record",
    "normalize_email",
    "utc_now",
    "Purchase",
    "UserCredential",
]
