"""ApiKeyRepository - owner-scoped CRUD for API keys on a row store."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any, TypeVar

import structlog
from pydantic import ValidationError as PydanticValidationError

from keyforge.errors import DecodeError, StoreUnavailable, ValidationError
from keyforge.keys import token
from keyforge.keys.masking import mask
from keyforge.models.api_key import API_KEYS_TABLE, ApiKey
from keyforge.stores.base import Row, RowStore
from keyforge.utils.datetime import as_naive_utc, utcnow

logger = structlog.get_logger()

T = TypeVar("T")

NAME_MAX_LEN = 255


class ApiKeyRepository:
    """Durable CRUD for ApiKey rows, always filtered by owner."""

    def __init__(
        self,
        store: RowStore,
        *,
        timeout: float = 5.0,
        list_retries: int = 2,
        retry_backoff: float = 0.2,
        generate_secret: Callable[[], str] = token.generate,
    ) -> None:
        self._store = store
        self._timeout = timeout
        self._list_retries = list_retries
        self._retry_backoff = retry_backoff
        self._generate_secret = generate_secret
        self._log = logger.bind(repository="api_key")

    async def _call(self, op: str, awaitable: Awaitable[T]) -> T:
        """Run a store call under the request timeout."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except asyncio.TimeoutError as e:
            self._log.warning("api_key.store_timeout", op=op, timeout=self._timeout)
            raise StoreUnavailable(
                f"Row store {op} timed out after {self._timeout}s",
                details={"op": op, "timeout": self._timeout},
            ) from e

    @staticmethod
    def _decode(row: Row) -> ApiKey:
        try:
            return ApiKey.model_validate(row)
        except PydanticValidationError as e:
            raise DecodeError(
                details={
                    "id": row.get("id"),
                    "fields": [".".join(str(p) for p in err["loc"]) for err in e.errors()],
                },
            ) from e

    @staticmethod
    def _validate_name(name: Any) -> str:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("API key name must not be empty", details={"field": "name"})
        name = name.strip()
        if len(name) > NAME_MAX_LEN:
            raise ValidationError(
                f"API key name must be at most {NAME_MAX_LEN} characters",
                details={"field": "name", "length": len(name)},
            )
        return name

    @staticmethod
    def _validate_expiry(expires_at: Any, now: datetime) -> datetime | None:
        if expires_at is None:
            return None
        if not isinstance(expires_at, datetime):
            raise ValidationError(
                "expires_at must be a datetime",
                details={"field": "expires_at"},
            )
        expires_at = as_naive_utc(expires_at)
        if expires_at <= now:
            raise ValidationError(
                "expires_at must be in the future",
                details={"field": "expires_at", "expires_at": expires_at.isoformat()},
            )
        return expires_at

    async def list_by_owner(
        self,
        owner_id: str,
        *,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[ApiKey]:
        """List keys owned by ``owner_id``, most recent first.

        Transient store failures are retried with exponential backoff.

        Raises:
            StoreUnavailable: If every attempt fails
            DecodeError: If a stored row is malformed
        """
        attempts = self._list_retries + 1
        for attempt in range(attempts):
            try:
                rows = await self._call(
                    "select",
                    self._store.select(
                        API_KEYS_TABLE,
                        {"owner_id": owner_id},
                        order_by="created_at",
                        descending=True,
                        limit=limit,
                        offset=offset,
                    ),
                )
                break
            except StoreUnavailable:
                if attempt == attempts - 1:
                    raise
                delay = self._retry_backoff * (2**attempt)
                self._log.info(
                    "api_key.list.retry",
                    owner_id=owner_id,
                    attempt=attempt + 1,
                    delay=delay,
                )
                await asyncio.sleep(delay)

        keys = [self._decode(row) for row in rows]
        # The store applies the owner filter; foreign rows must never reach callers
        for key in keys:
            if key.owner_id != owner_id:
                raise DecodeError(
                    "Row store returned a key owned by another user",
                    details={"id": key.id},
                )
        return keys

    async def create(
        self,
        owner_id: str,
        name: str,
        expires_at: datetime | None = None,
    ) -> ApiKey:
        """Create a key and return it with the plaintext secret (shown only once).

        Raises:
            ValidationError: Empty name or malformed expiry; nothing is persisted
            UnavailableRandomness: Secret generation failed
            StoreUnavailable: Backend failure
        """
        name = self._validate_name(name)
        expires_at = self._validate_expiry(expires_at, utcnow())

        secret = self._generate_secret()
        masked = mask(secret)
        row = await self._call(
            "insert",
            self._store.insert(
                API_KEYS_TABLE,
                {
                    "owner_id": owner_id,
                    "name": name,
                    "secret_hash": token.hash_secret(secret),
                    "masked_secret": masked,
                    "is_active": True,
                    "expires_at": expires_at,
                },
            ),
        )
        created = self._decode(row)

        self._log.info(
            "api_key.create",
            key_id=created.id,
            owner_id=owner_id,
            masked_secret=masked,
            expires_at=expires_at.isoformat() if expires_at else None,
        )
        return created.model_copy(update={"secret": secret})

    async def delete(self, key_id: str, owner_id: str) -> None:
        """Delete a key if it belongs to ``owner_id``.

        Missing or foreign-owned ids are a no-op, so repeated deletes are safe.

        Raises:
            StoreUnavailable: Backend failure
        """
        removed = await self._call(
            "delete",
            self._store.delete(API_KEYS_TABLE, {"id": key_id, "owner_id": owner_id}),
        )
        self._log.info("api_key.delete", key_id=key_id, owner_id=owner_id, removed=removed)

    async def verify(self, secret: str) -> ApiKey | None:
        """Look up the key matching a plaintext secret.

        The store is queried by the SHA-256 digest, so an equality hit is a match.
        Expiry is not applied here; callers that enforce it use ``is_expired``.
        """
        rows = await self._call(
            "select",
            self._store.select(API_KEYS_TABLE, {"secret_hash": token.hash_secret(secret)}),
        )
        if not rows:
            return None
        return self._decode(rows[0])
