"""Keyforge services layer."""

from keyforge.services.api_key import ApiKeyManager

__all__ = ["ApiKeyManager"]
