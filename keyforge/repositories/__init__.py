"""Repositories over the row store."""

from keyforge.repositories.api_key import ApiKeyRepository

__all__ = ["ApiKeyRepository"]
