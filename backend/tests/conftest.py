from __future__ import annotations

import os

# Cheap hashes for the test run; must be set before app.core.config is imported.
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ["ENVIRONMENT"] = "local"
os.environ.pop("HOTMART_WEBHOOK_SECRET", None)

from collections.abc import Generator  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.api.deps import get_stores  # noqa: E402
from app.core.store import Stores, memory_stores  # noqa: E402
from app.main import app  # noqa: E402


@pytest.fixture(scope="function")
def stores() -> Stores:
    return memory_stores()


@pytest.fixture(scope="function")
def client(stores: Stores) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_stores] = lambda: stores
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def purchase_event(
    email: str,
    name: str = "Ana",
    *,
    event: str = "PURCHASE_APPROVED",
    transaction: str = "T1",
    product_id: Any = "p1",
) -> dict[str, Any]:
    return {
        "event": event,
        "data": {
            "buyer": {"email": email, "name": name},
            "purchase": {"transaction": transaction, "product": {"id": product_id}},
        },
    }


def ingest(client: TestClient, email: str, name: str = "Ana", **kwargs: Any) -> None:
    r = client.post("/webhook/hotmart", json=purchase_event(email, name, **kwargs))
    assert r.status_code == 200
    assert r.json() == {"success": True}
