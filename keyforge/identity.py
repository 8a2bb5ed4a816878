"""Identity lookup: who is the current user.

The identity provider itself (sign-up, sign-in, session issuance) is external.
Keyforge only needs a stable user id for the caller of each operation.
"""

from __future__ import annotations

import hmac
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

import structlog

from keyforge.config import SecurityConfig

logger = structlog.get_logger()


@dataclass(frozen=True)
class User:
    """Authenticated user as seen by keyforge."""

    id: str
    email: str | None = None


class IdentityProvider(Protocol):
    """Resolves the user behind the current request or action."""

    async def get_current_user(self) -> User | None: ...


class StaticIdentityProvider:
    """Identity provider bound to a fixed user (or to nobody)."""

    def __init__(self, user: User | None) -> None:
        self._user = user

    async def get_current_user(self) -> User | None:
        return self._user


class RequestIdentityProvider:
    """Resolves the current user from HTTP request headers.

    Resolution order:
    1. ``Authorization: Bearer <token>`` looked up in configured session tokens
    2. No token and anonymous mode: ``X-User-Id`` header
    3. Otherwise: no user
    """

    def __init__(self, headers: Mapping[str, str], security: SecurityConfig) -> None:
        self._headers = headers
        self._security = security

    def _lookup_session(self, token: str) -> str | None:
        for stored_token, user_id in self._security.session_tokens.items():
            if hmac.compare_digest(stored_token.encode(), token.encode()):
                return user_id
        return None

    async def get_current_user(self) -> User | None:
        auth_header = self._headers.get("authorization") or self._headers.get("Authorization")

        if auth_header and auth_header.startswith("Bearer "):
            user_id = self._lookup_session(auth_header[7:])
            if user_id is None:
                logger.debug("identity.session.unknown")
                return None
            logger.debug("identity.resolved", source="session", user_id=user_id)
            return User(id=user_id)

        if self._security.allow_anonymous:
            user_id = self._headers.get("x-user-id") or self._headers.get("X-User-Id")
            if user_id:
                logger.debug("identity.resolved", source="header", user_id=user_id)
                return User(id=user_id)

        return None
