"""
Local-only routes

Mounted by app.main only when ENVIRONMENT == "local". Lets developers and the
login page's test button register a purchase without going through Hotmart.
"""
from __future__ import annotations

import time

from fastapi import APIRouter

from app import crud
from app.api.deps import StoresDep
from app.api.errors import missing_fields
from app.api.schemas import SimulatePurchaseRequest, SuccessResponse

router = APIRouter(prefix="/test", tags=["private"])


@router.post("/simulate-purchase", response_model=SuccessResponse)
def simulate_purchase(stores: StoresDep, body: SimulatePurchaseRequest) -> SuccessResponse:
    if not body.email or not body.email.strip():
        raise missing_fields("email")
    crud.upsert_purchase(
        store=stores.purchases,
        email=body.email,
        name=body.name or "Test User",
        purchase_id=f"TEST_{int(time.time() * 1000)}",
        product_id="teacher-poli-course",
        raw_payload={"test": True},
    )
    return SuccessResponse()
