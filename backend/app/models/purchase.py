"""
Purchase model
"""
from datetime import datetime
from typing import Any

from pydantic import Field

from app.enums import PurchaseStatus

from .base import Record, utc_now


class Purchase(Record):
    """
    Purchase record

    Evidence that an email completed a payment on Hotmart. It gates password
    creation and is re-checked on every login.

    Fields:
    - email: lower-cased buyer email, the store key
    - name: buyer name as sent by Hotmart
    - purchase_id: Hotmart transaction code
    - product_id: Hotmart product id
    - status: always `active` when written by ingestion
    - purchase_date: ingestion time (UTC)
    - raw_payload: the webhook `data` object, kept for audit/debugging
    """
    email: str
    name: str = ""
    purchase_id: str
    product_id: str
    status: PurchaseStatus = PurchaseStatus.active
    purchase_date: datetime = Field(default_factory=utc_now)
    raw_payload: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_active(self) -> bool:
        return self.status == PurchaseStatus.active
