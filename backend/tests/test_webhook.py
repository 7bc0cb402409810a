from __future__ import annotations

import asyncio
import hashlib
import hmac
import json

from conftest import ingest, purchase_event

from app.core.config import settings
from app.enums import PurchaseStatus


def test_purchase_complete_and_approved_register_purchase(client, stores):
    ingest(client, "Ana@X.com", "Ana", event="PURCHASE_COMPLETE", transaction="HP01", product_id="123")
    ingest(client, "bruno@x.com", "Bruno", event="PURCHASE_APPROVED", transaction="HP02")

    ana = stores.purchases.get("ana@x.com")
    assert ana is not None
    assert ana.email == "ana@x.com"
    assert ana.name == "Ana"
    assert ana.purchase_id == "HP01"
    assert ana.product_id == "123"
    assert ana.status == PurchaseStatus.active
    assert ana.raw_payload["buyer"]["email"] == "Ana@X.com"

    assert stores.purchases.get("bruno@x.com").purchase_id == "HP02"


def test_numeric_product_id_is_accepted(client, stores):
    ingest(client, "a@x.com", product_id=4242)
    assert stores.purchases.get("a@x.com").product_id == "4242"


def test_later_event_replaces_earlier_purchase(client, stores):
    ingest(client, "a@x.com", "Ana", transaction="T1", product_id="p1")
    first = stores.purchases.get("a@x.com")

    payload = purchase_event("A@x.com", "Ana Souza", transaction="T2", product_id="p2")
    payload["data"]["buyer"].pop("name")
    r = client.post("/webhook/hotmart", json=payload)
    assert r.status_code == 200

    second = stores.purchases.get("a@x.com")
    assert second.purchase_id == "T2"
    assert second.product_id == "p2"
    # Wholesale replacement, nothing carried over from the first event.
    assert second.name == ""
    assert second.purchase_date >= first.purchase_date
    assert len(stores.purchases) == 1


def test_other_events_are_acknowledged_without_changes(client, stores):
    for event in ("PURCHASE_REFUNDED", "PURCHASE_CANCELED", "SOMETHING_NEW"):
        r = client.post("/webhook/hotmart", json=purchase_event("a@x.com", event=event))
        assert r.status_code == 200
        assert r.json() == {"success": True}

    r = client.post("/webhook/hotmart", json={"event": "SUBSCRIPTION_CANCELLATION"})
    assert r.status_code == 200
    r = client.post("/webhook/hotmart", json={})
    assert r.status_code == 200

    assert len(stores.purchases) == 0


def test_unknown_event_does_not_touch_existing_purchase(client, stores):
    ingest(client, "a@x.com")
    client.post("/webhook/hotmart", json=purchase_event("a@x.com", event="PURCHASE_REFUNDED"))
    assert stores.purchases.get("a@x.com").status == PurchaseStatus.active


def test_malformed_body_is_internal_error(client, stores):
    for raw in (b"{not json", b"[1, 2, 3]", b"\xff\xfe", b'{"event": "PURCHASE_APPROVED", "data": [1]}'):
        r = client.post(
            "/webhook/hotmart", content=raw, headers={"Content-Type": "application/json"}
        )
        assert r.status_code == 500
        assert r.json()["error"] == "Internal server error"
    assert len(stores.purchases) == 0


def test_completed_event_missing_fields_is_internal_error(client, stores):
    payload = purchase_event("a@x.com")
    del payload["data"]["purchase"]["transaction"]
    assert client.post("/webhook/hotmart", json=payload).status_code == 500

    payload = purchase_event("")
    assert client.post("/webhook/hotmart", json=payload).status_code == 500

    r = client.post("/webhook/hotmart", json={"event": "PURCHASE_COMPLETE"})
    assert r.status_code == 500
    assert len(stores.purchases) == 0


def test_hottok_header_is_verified(client, stores, monkeypatch):
    monkeypatch.setattr(settings, "HOTMART_WEBHOOK_SECRET", "hottok-123")
    payload = purchase_event("a@x.com")

    r = client.post("/webhook/hotmart", json=payload)
    assert r.status_code == 401
    r = client.post("/webhook/hotmart", json=payload, headers={"X-Hotmart-Hottok": "wrong"})
    assert r.status_code == 401
    assert len(stores.purchases) == 0

    r = client.post("/webhook/hotmart", json=payload, headers={"X-Hotmart-Hottok": "hottok-123"})
    assert r.status_code == 200
    assert stores.purchases.has("a@x.com")


def test_hmac_signature_is_verified(client, stores, monkeypatch):
    monkeypatch.setattr(settings, "HOTMART_WEBHOOK_SECRET", "s3cret")
    raw = json.dumps(purchase_event("a@x.com")).encode()
    signature = hmac.new(b"s3cret", raw, hashlib.sha256).hexdigest()
    headers = {"Content-Type": "application/json"}

    r = client.post(
        "/webhook/hotmart", content=raw, headers={**headers, "X-Hotmart-Signature": "00" * 32}
    )
    assert r.status_code == 401
    assert r.json()["code"] == 401003

    r = client.post(
        "/webhook/hotmart", content=raw, headers={**headers, "X-Hotmart-Signature": signature}
    )
    assert r.status_code == 200
    assert stores.purchases.has("a@x.com")


def test_unsigned_webhook_rejected_outside_local(client, stores, monkeypatch):
    monkeypatch.setattr(settings, "ENVIRONMENT", "production")
    r = client.post("/webhook/hotmart", json=purchase_event("a@x.com"))
    assert r.status_code == 401
    assert len(stores.purchases) == 0


def test_simulate_purchase(client, stores):
    r = client.post("/test/simulate-purchase", json={"email": "Dev@X.com"})
    assert r.status_code == 200
    assert r.json() == {"success": True}

    purchase = stores.purchases.get("dev@x.com")
    assert purchase.name == "Test User"
    assert purchase.purchase_id.startswith("TEST_")
    assert purchase.product_id == "teacher-poli-course"
    assert purchase.raw_payload == {"test": True}

    r = client.post("/api/auth/check-purchase", json={"email": "dev@x.com"})
    assert r.status_code == 200

    assert client.post("/test/simulate-purchase", json={}).status_code == 400


def test_webhook_store_writes_run_off_the_event_loop(client, stores, monkeypatch):
    writes = []
    put = stores.purchases.put

    def recording_put(key, value):
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            writes.append("worker thread")
        else:
            writes.append("event loop")
        put(key, value)

    monkeypatch.setattr(stores.purchases, "put", recording_put)
    ingest(client, "a@x.com")

    assert writes == ["worker thread"]
    assert stores.purchases.has("a@x.com")
