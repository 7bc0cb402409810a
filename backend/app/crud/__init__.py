"""CRUD operations over the credential store"""
from .purchase import (
    get_by_email as get_purchase_by_email,
)
from .purchase import (
    upsert as upsert_purchase,
)
from .user import (
    create as create_user,
)
from .user import (
    exists as user_exists,
)
from .user import (
    get_by_email as get_user_by_email,
)
from .user import (
    mark_onboarding_complete,
)

__all__ = [
    "get_purchase_by_email",
    "upsert_purchase",
    "create_user",
    "user_exists",
    "get_user_by_email",
    "mark_onboarding_complete",
]
