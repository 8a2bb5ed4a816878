"""API Key Manager.

Binds the key repository to the identity of the caller: every operation
resolves the current user first and passes that user's id as the owner.
"""

from __future__ import annotations

from datetime import datetime

import structlog

from keyforge.errors import UnauthorizedError
from keyforge.identity import IdentityProvider, User
from keyforge.models.api_key import ApiKey
from keyforge.repositories.api_key import ApiKeyRepository

logger = structlog.get_logger()


class ApiKeyManager:
    """Owner-scoped API key operations for the current user."""

    def __init__(self, repository: ApiKeyRepository, identity: IdentityProvider) -> None:
        self._repo = repository
        self._identity = identity

    async def _require_user(self) -> User:
        user = await self._identity.get_current_user()
        if user is None:
            logger.info("api_key.unauthorized")
            raise UnauthorizedError()
        return user

    async def list_keys(self, *, limit: int | None = None, offset: int = 0) -> list[ApiKey]:
        """List the current user's keys (masked)."""
        user = await self._require_user()
        return await self._repo.list_by_owner(user.id, limit=limit, offset=offset)

    async def create_key(self, name: str, expires_at: datetime | None = None) -> ApiKey:
        """Create a key for the current user; the result carries the plaintext secret."""
        user = await self._require_user()
        return await self._repo.create(user.id, name, expires_at)

    async def delete_key(self, key_id: str) -> None:
        """Delete one of the current user's keys. Idempotent."""
        user = await self._require_user()
        await self._repo.delete(key_id, user.id)
