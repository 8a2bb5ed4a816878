"""Data models."""

from keyforge.models.api_key import API_KEYS_TABLE, ApiKey, ApiKeyRow

__all__ = [
    "API_KEYS_TABLE",
    "ApiKey",
    "ApiKeyRow",
]
