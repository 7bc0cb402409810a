from __future__ import annotations

import pytest

from app.api.errors import (
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from app.core import security
from app.core.store import KeyValueStore, Stores
from app.enums import PurchaseStatus
from app.models import Purchase, Record, UserCredential, normalize_email
from app.services.auth_service import AuthService


class _FakeStore(KeyValueStore):
    """Dict-backed store that records every call."""

    def __init__(self) -> None:
        self.items: dict[str, Record] = {}
        self.calls: list[tuple[str, str]] = []
        self.refuse_inserts = False

    def get(self, key):
        self.calls.append(("get", key))
        return self.items.get(normalize_email(key))

    def put(self, key, value):
        self.calls.append(("put", key))
        self.items[normalize_email(key)] = value

    def has(self, key):
        self.calls.append(("has", key))
        return normalize_email(key) in self.items

    def put_if_absent(self, key, value):
        self.calls.append(("put_if_absent", key))
        if self.refuse_inserts or normalize_email(key) in self.items:
            return False
        self.items[normalize_email(key)] = value
        return True


@pytest.fixture()
def fake_stores() -> Stores:
    return Stores(purchases=_FakeStore(), users=_FakeStore())


@pytest.fixture()
def service(fake_stores) -> AuthService:
    return AuthService(fake_stores)


def _purchase(email: str = "a@x.com", name: str = "Ana", status: PurchaseStatus = PurchaseStatus.active) -> Purchase:
    return Purchase(email=email, name=name, purchase_id="T1", product_id="p1", status=status)


def test_check_purchase_is_a_pure_read(service, fake_stores):
    fake_stores.purchases.put("a@x.com", _purchase())
    fake_stores.purchases.calls.clear()

    result = service.check_purchase("A@X.com")
    assert result.has_purchase is True
    assert result.customer_name == "Ana"
    assert [c[0] for c in fake_stores.purchases.calls] == ["get"]
    assert fake_stores.users.calls == []


def test_check_purchase_failures(service, fake_stores):
    with pytest.raises(ValidationError):
        service.check_purchase("")
    with pytest.raises(ValidationError):
        service.check_purchase(None)
    with pytest.raises(NotFoundError):
        service.check_purchase("a@x.com")

    fake_stores.purchases.put("a@x.com", _purchase(status=PurchaseStatus.cancelled))
    with pytest.raises(ForbiddenError):
        service.check_purchase("a@x.com")


def test_create_password_stores_hashed_credential(service, fake_stores):
    fake_stores.purchases.put("a@x.com", _purchase())

    result = service.create_password("A@x.com", "secret1")
    assert result.success is True
    assert result.user.email == "a@x.com"
    assert result.user.name == "Ana"
    assert result.user.has_completed_onboarding is False

    user = fake_stores.users.items["a@x.com"]
    assert isinstance(user, UserCredential)
    assert user.password_hash != "secret1"
    assert security.verify_password("secret1", user.password_hash)
    assert user.has_completed_onboarding is False


def test_create_password_uses_atomic_insert(service, fake_stores):
    fake_stores.purchases.put("a@x.com", _purchase())
    # Another worker inserted the record between our checks.
    fake_stores.users.refuse_inserts = True

    with pytest.raises(ConflictError):
        service.create_password("a@x.com", "secret1")
    assert ("put_if_absent", "a@x.com") in fake_stores.users.calls
    assert not any(c[0] == "put" for c in fake_stores.users.calls)


def test_create_password_works_for_inactive_purchase(service, fake_stores):
    # Only the presence of a purchase gates registration; login re-checks the status.
    fake_stores.purchases.put("a@x.com", _purchase(status=PurchaseStatus.refunded))
    service.create_password("a@x.com", "secret1")

    with pytest.raises(ForbiddenError):
        service.login("a@x.com", "secret1")


def test_login_flow_through_service(service, fake_stores):
    fake_stores.purchases.put("a@x.com", _purchase())

    with pytest.raises(NotFoundError):
        service.login("a@x.com", "secret1")

    service.create_password("a@x.com", "secret1", "Ana Paula")

    with pytest.raises(AuthenticationError):
        service.login("a@x.com", "nope-nope")
    with pytest.raises(ValidationError):
        service.login("a@x.com", "")

    result = service.login("a@x.com", "secret1")
    assert result.user.name == "Ana Paula"
    assert security.decode_access_token(result.token)["name"] == "Ana Paula"

    del fake_stores.purchases.items["a@x.com"]
    with pytest.raises(ForbiddenError):
        service.login("a@x.com", "secret1")


def test_complete_onboarding(service, fake_stores):
    fake_stores.purchases.put("a@x.com", _purchase())
    service.create_password("a@x.com", "secret1")

    with pytest.raises(ForbiddenError):
        service.complete_onboarding("b@x.com", actor="a@x.com")
    with pytest.raises(NotFoundError):
        service.complete_onboarding("ghost@x.com", actor="ghost@x.com")

    assert service.complete_onboarding("A@X.COM", actor="a@x.com").has_completed_onboarding is True
    fake_stores.users.calls.clear()

    # Second call is a no-op: nothing written.
    assert service.complete_onboarding(None, actor="a@x.com").has_completed_onboarding is True
    assert [c[0] for c in fake_stores.users.calls] == ["get"]


def test_has_credential(service, fake_stores):
    fake_stores.purchases.put("a@x.com", _purchase())
    assert service.has_credential("a@x.com") is False
    service.create_password("a@x.com", "secret1")
    assert service.has_credential("A@x.com") is True
    with pytest.raises(ValidationError):
        service.has_credential(" ")


def test_duplicate_registration_skips_password_hashing(service, fake_stores, monkeypatch):
    fake_stores.purchases.put("a@x.com", _purchase())
    service.create_password("a@x.com", "secret1")
    fake_stores.users.calls.clear()

    def no_hashing(password: str) -> str:
        raise AssertionError("password hashed for an existing user")

    monkeypatch.setattr(security, "get_password_hash", no_hashing)
    with pytest.raises(ConflictError):
        service.create_password("A@x.com", "another-password")
    assert [c[0] for c in fake_stores.users.calls] == ["has"]
