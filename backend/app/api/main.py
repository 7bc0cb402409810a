"""
API router aggregation

- api_router: JSON API served under settings.API_PREFIX (/api)
    - auth: purchase check, password creation, login, onboarding
    - utils: health check
- webhook_router: payment platform callbacks (/webhook/*)
- private_router: local-only helpers (/test/*), see app.main
"""
from fastapi import APIRouter

from app.api.routes import (
    auth,
    private,
    utils,
    webhook,
)

api_router = APIRouter()
api_router.include_router(auth.router)  # /auth/*
api_router.include_router(utils.router)  # /utils/*

webhook_router = webhook.router  # /webhook/*
private_router = private.router  # /test/*
