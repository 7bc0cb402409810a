"""
Enumerations

All enums subclass both str and Enum so they serialise as plain strings.
"""
from enum import Enum


class PurchaseStatus(str, Enum):
    """
    Purchase status

    Ingestion only ever writes `active`. The other members exist so a
    refund/chargeback handler can record them; login and check-purchase
    already reject anything that is not `active`.
    """
    active = "active"
    cancelled = "cancelled"
    refunded = "refunded"
    chargeback = "chargeback"


class HotmartEvent(str, Enum):
    """Hotmart webhook event names that register a purchase."""
    purchase_complete = "PURCHASE_COMPLETE"
    purchase_approved = "PURCHASE_APPROVED"


PURCHASE_COMPLETED_EVENTS = frozenset(e.value for e in HotmartEvent)
