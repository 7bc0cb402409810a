"""
Hotmart purchase ingestion

Docs: https://developers.hotmart.com/docs/en/2.0.0/webhook/using-webhook/

Hotmart posts {"event": ..., "data": {...}} for every purchase lifecycle
change. PURCHASE_COMPLETE and PURCHASE_APPROVED register the buyer's
purchase; every other event is acknowledged and ignored.
"""

import hashlib
import hmac
import json
import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from app import crud
from app.api.errors import InternalError
from app.api.schemas import HotmartPurchaseData, HotmartWebhook
from app.core.store import KeyValueStore
from app.enums import PURCHASE_COMPLETED_EVENTS
from app.models import Purchase

logger = logging.getLogger(__name__)


def malformed_payload() -> InternalError:
    return InternalError(code=500001, message="Internal server error")


class HotmartService:
    """Hotmart webhook verification and ingestion"""

    def __init__(self, webhook_secret: str | None = None, *, environment: str = "local"):
        """
        Args:
            webhook_secret: Hotmart hottok, also used as HMAC key
            environment: unsigned webhooks are only accepted in "local"
        """
        self.webhook_secret = webhook_secret
        self.environment = environment

    def verify_webhook(
        self,
        payload: bytes,
        *,
        hottok: str | None = None,
        signature: str | None = None,
    ) -> bool:
        """
        Check that a webhook really comes from Hotmart.

        Either header is enough: X-Hotmart-Hottok must equal the secret,
        X-Hotmart-Signature must be the hex HMAC-SHA256 of the raw body.

        Args:
            payload: raw request body
            hottok: X-Hotmart-Hottok header value
            signature: X-Hotmart-Signature header value
        """
        if not self.webhook_secret:
            if self.environment == "local":
                logger.warning("Webhook secret not configured, skipping signature verification")
                return True
            logger.error("Webhook secret not configured, rejecting webhook")
            return False

        if hottok and hmac.compare_digest(hottok.encode(), self.webhook_secret.encode()):
            return True
        if signature:
            expected_signature = hmac.new(
                self.webhook_secret.encode(),
                payload,
                hashlib.sha256,
            ).hexdigest()
            return hmac.compare_digest(signature.lower().encode(), expected_signature.encode())
        return False

    def parse_webhook(self, payload: bytes) -> HotmartWebhook:
        """Decode the request body; anything but a JSON object is malformed."""
        try:
            body: Any = json.loads(payload)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"Failed to decode webhook body: {e}")
            raise malformed_payload()
        if not isinstance(body, dict):
            logger.error("Webhook body is not a JSON object")
            raise malformed_payload()
        try:
            return HotmartWebhook.model_validate(body)
        except PydanticValidationError as e:
            logger.error(f"Failed to parse webhook event: {e}")
            raise malformed_payload()

    def ingest(self, store: KeyValueStore[Purchase], webhook: HotmartWebhook) -> Purchase | None:
        """
        Apply a webhook to the purchase store.

        Returns the stored purchase, or None for events that do not register
        a purchase.
        """
        if webhook.event not in PURCHASE_COMPLETED_EVENTS:
            logger.info(f"Ignoring Hotmart event: {webhook.event or '<missing>'}")
            return None

        try:
            data = HotmartPurchaseData.model_validate(webhook.data or {})
        except PydanticValidationError as e:
            logger.error(f"Invalid {webhook.event} payload: {e}")
            raise malformed_payload()

        purchase = crud.upsert_purchase(
            store=store,
            email=data.buyer.email,
            name=data.buyer.name,
            purchase_id=data.purchase.transaction,
            product_id=data.purchase.product.id,
            raw_payload=webhook.data,
        )
        logger.info(f"Purchase registered for: {purchase.email}")
        return purchase
