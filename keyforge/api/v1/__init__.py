"""API v1 router."""

from fastapi import APIRouter

from keyforge.api.v1.api_keys import router as api_keys_router

router = APIRouter()

router.include_router(api_keys_router, prefix="/api-keys", tags=["api-keys"])
