"""Purchase CRUD operations"""
from typing import Any

from app.core.store import KeyValueStore
from app.enums import PurchaseStatus
from app.models import Purchase, normalize_email, utc_now


def get_by_email(*, store: KeyValueStore[Purchase], email: str) -> Purchase | None:
    """Look up the purchase registered for an email"""
    return store.get(email)


def upsert(
    *,
    store: KeyValueStore[Purchase],
    email: str,
    name: str,
    purchase_id: str,
    product_id: str,
    raw_payload: dict[str, Any] | None = None,
) -> Purchase:
    """Register an active purchase, replacing any earlier one for the email"""
    purchase = Purchase(
        email=normalize_email(email),
        name=name,
        purchase_id=purchase_id,
        product_id=product_id,
        status=PurchaseStatus.active,
        purchase_date=utc_now(),
        raw_payload=raw_payload or {},
    )
    store.put(purchase.email, purchase)
    return purchase
