"""
FastAPI application entry point

Creates the app, configures CORS and Sentry, registers the exception
handlers and mounts the routers:
- /api/*      JSON API (auth, utils)
- /webhook/*  Hotmart purchase notifications
- /test/*     local-only helpers

Run:
    uvicorn app.main:app --reload
"""
import logging
from typing import Any

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException

from app.api.errors import AppError
from app.api.main import api_router, private_router, webhook_router
from app.core.config import settings

logger = logging.getLogger(__name__)


def custom_generate_unique_id(route: APIRoute) -> str:
    """
    OpenAPI operation id as "{tag}-{route name}", e.g. "auth-login".
    """
    return f"{route.tags[0]}-{route.name}"


def error_body(code: int, message: str, **extra: Any) -> dict[str, Any]:
    return {"success": False, "code": code, "error": message, **extra}


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    # ctx may hold exception instances; input may echo a password.
    return [
        {k: v for k, v in err.items() if k not in ("ctx", "input")}
        for err in exc.errors()
    ]


if settings.SENTRY_DSN and settings.ENVIRONMENT != "local":  # pragma: no cover
    sentry_sdk.init(dsn=str(settings.SENTRY_DSN), enable_tracing=True)

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    generate_unique_id_function=custom_generate_unique_id,
)


@app.exception_handler(AppError)
async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    """
    Render an AppError as {"success": false, "code", "error", ...extra}.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.code, exc.message, **exc.extra),
    )


@app.exception_handler(HTTPException)
async def http_error_handler(_: Request, exc: HTTPException) -> JSONResponse:
    """
    Render FastAPI/Starlette HTTP errors (404 route, 405 method, ...) in the
    same shape. A dict detail with code/message keys is passed through,
    anything else gets code status_code * 1000.
    """
    if isinstance(exc.detail, dict) and {"code", "message"} <= set(exc.detail.keys()):
        content = error_body(exc.detail["code"], str(exc.detail["message"]))
    else:
        content = error_body(exc.status_code * 1000, str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Malformed request bodies are reported as 400 with the field errors.
    """
    return JSONResponse(
        status_code=400,
        content=error_body(400000, "Validation error", errors=jsonable_errors(exc)),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content=error_body(500000, "Internal server error"))


if settings.all_cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.all_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(api_router, prefix=settings.API_PREFIX)
app.include_router(webhook_router)

if settings.ENVIRONMENT == "local":
    app.include_router(private_router)
