"""
Payment platform webhooks

- POST /webhook/hotmart: purchase notifications from Hotmart
"""
from __future__ import annotations

from fastapi import APIRouter, Header, Request
from starlette.concurrency import run_in_threadpool

from app.api.deps import HotmartServiceDep, StoresDep
from app.api.errors import AuthenticationError
from app.api.schemas import SuccessResponse
from app.core.store import Stores
from app.services.hotmart_service import HotmartService

router = APIRouter(prefix="/webhook", tags=["webhook"])


def handle_hotmart_webhook(
    service: HotmartService,
    stores: Stores,
    payload: bytes,
    *,
    hottok: str | None,
    signature: str | None,
) -> None:
    """
    Verify, parse and ingest one webhook body.

    Raises:
        AuthenticationError: neither header authenticates the body
        InternalError: the body is not a usable Hotmart event
    """
    if not service.verify_webhook(payload, hottok=hottok, signature=signature):
        raise AuthenticationError(code=401003, message="Invalid webhook signature")
    webhook = service.parse_webhook(payload)
    service.ingest(stores.purchases, webhook)


@router.post("/hotmart", response_model=SuccessResponse)
async def hotmart(
    request: Request,
    stores: StoresDep,
    service: HotmartServiceDep,
    x_hotmart_hottok: str | None = Header(default=None),
    x_hotmart_signature: str | None = Header(default=None),
) -> SuccessResponse:
    """
    Register a Hotmart purchase.

    Request path: POST /webhook/hotmart

    The signature covers the raw bytes, so the body is read unparsed here;
    the store calls are blocking and run in the thread pool.
    """
    payload = await request.body()
    await run_in_threadpool(
        handle_hotmart_webhook,
        service,
        stores,
        payload,
        hottok=x_hotmart_hottok,
        signature=x_hotmart_signature,
    )
    return SuccessResponse()
