"""FastAPI dependencies for the Keyforge API.

Provides dependency injection for:
- Row store (owned by the app lifespan)
- ApiKeyRepository
- Identity provider
- ApiKeyManager
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from keyforge.config import get_settings
from keyforge.identity import IdentityProvider, RequestIdentityProvider
from keyforge.repositories.api_key import ApiKeyRepository
from keyforge.services.api_key import ApiKeyManager
from keyforge.stores.base import RowStore


def get_row_store(request: Request) -> RowStore:
    """Get the row store created at startup."""
    return request.app.state.row_store


def get_api_key_repository(
    store: Annotated[RowStore, Depends(get_row_store)],
) -> ApiKeyRepository:
    """Get ApiKeyRepository configured with the store call policy."""
    policy = get_settings().store
    return ApiKeyRepository(
        store,
        timeout=policy.timeout_seconds,
        list_retries=policy.list_retries,
        retry_backoff=policy.retry_backoff_seconds,
    )


def get_identity_provider(request: Request) -> IdentityProvider:
    """Get an identity provider bound to this request."""
    return RequestIdentityProvider(request.headers, get_settings().security)


def get_api_key_manager(
    repository: Annotated[ApiKeyRepository, Depends(get_api_key_repository)],
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> ApiKeyManager:
    """Get ApiKeyManager for the current request's user."""
    return ApiKeyManager(repository, identity)


# Type aliases for cleaner dependency injection
ApiKeyManagerDep = Annotated[ApiKeyManager, Depends(get_api_key_manager)]
