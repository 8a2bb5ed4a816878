"""API keys endpoints.

- GET    /api-keys        list the caller's keys (masked)
- POST   /api-keys        create a key; the plaintext secret is returned once
- DELETE /api-keys/{id}   idempotent delete
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from keyforge.api.dependencies import ApiKeyManagerDep
from keyforge.models.api_key import ApiKey
from keyforge.utils.datetime import utcnow

router = APIRouter()


# Request/Response Models


class CreateApiKeyRequest(BaseModel):
    """Request to create an API key."""

    name: str
    expires_at: datetime | None = Field(
        default=None,
        description="Expiry timestamp. Omit or null for a key that never expires.",
    )


class ApiKeyResponse(BaseModel):
    """API key as shown in lists. Never contains the plaintext secret."""

    id: str
    name: str
    masked_secret: str
    is_active: bool
    is_expired: bool
    created_at: datetime
    expires_at: datetime | None


class CreatedApiKeyResponse(ApiKeyResponse):
    """Creation response: the only time the plaintext secret is returned."""

    secret: str


class ApiKeyListResponse(BaseModel):
    """API key list response."""

    items: list[ApiKeyResponse]


def _key_to_response(key: ApiKey, now: datetime) -> ApiKeyResponse:
    """Convert ApiKey record to API response."""
    return ApiKeyResponse(
        id=key.id,
        name=key.name,
        masked_secret=key.masked_secret,
        is_active=key.is_active,
        is_expired=key.is_expired(now),
        created_at=key.created_at,
        expires_at=key.expires_at,
    )


# Endpoints


@router.get("", response_model=ApiKeyListResponse)
async def list_api_keys(
    manager: ApiKeyManagerDep,
    limit: int | None = Query(None, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> ApiKeyListResponse:
    """List API keys owned by the current user, most recent first."""
    keys = await manager.list_keys(limit=limit, offset=offset)
    now = utcnow()
    return ApiKeyListResponse(items=[_key_to_response(k, now) for k in keys])


@router.post("", response_model=CreatedApiKeyResponse, status_code=201)
async def create_api_key(
    request: CreateApiKeyRequest,
    manager: ApiKeyManagerDep,
) -> CreatedApiKeyResponse:
    """Create an API key.

    The plaintext secret is part of this response only; copy it now.
    """
    key = await manager.create_key(request.name, request.expires_at)
    base = _key_to_response(key, utcnow())
    return CreatedApiKeyResponse(**base.model_dump(), secret=key.secret)


@router.delete("/{key_id}", status_code=204)
async def delete_api_key(
    key_id: str,
    manager: ApiKeyManagerDep,
) -> None:
    """Delete an API key. Deleting a missing key is not an error."""
    await manager.delete_key(key_id)
