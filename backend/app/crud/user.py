"""User credential CRUD operations"""
from app.api.errors import already_registered, user_not_found
from app.core.store import KeyValueStore
from app.models import UserCredential, normalize_email


def get_by_email(*, store: KeyValueStore[UserCredential], email: str) -> UserCredential | None:
    """Look up the credential record for an email"""
    return store.get(email)


def exists(*, store: KeyValueStore[UserCredential], email: str) -> bool:
    """Whether a credential record exists for an email"""
    return store.has(email)


def create(
    *,
    store: KeyValueStore[UserCredential],
    email: str,
    name: str,
    password_hash: str,
) -> UserCredential:
    """Create the credential record; fails with ConflictError if one exists"""
    user = UserCredential(
        email=normalize_email(email),
        name=name,
        password_hash=password_hash,
    )
    if not store.put_if_absent(user.email, user):
        raise already_registered()
    return user


def mark_onboarding_complete(*, store: KeyValueStore[UserCredential], email: str) -> UserCredential:
    """Set the onboarding flag; calling it again changes nothing"""
    user = store.get(email)
    if not user:
        raise user_not_found()
    if user.has_completed_onboarding:
        return user
    user = user.model_copy(update={"has_completed_onboarding": True})
    store.put(user.email, user)
    return user
