"""API key secret generation and hashing.

Key format: sk-{43 URL-safe base64 chars} (32 random bytes, 256 bits).
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

from keyforge.errors import UnavailableRandomness

TOKEN_PREFIX = "sk-"
TOKEN_BYTES = 32


def generate() -> str:
    """Generate a new plaintext API key secret.

    Returns:
        URL-safe secret string

    Raises:
        UnavailableRandomness: If the OS CSPRNG cannot be used
    """
    try:
        random_part = secrets.token_urlsafe(TOKEN_BYTES)
    except (NotImplementedError, OSError) as e:
        raise UnavailableRandomness(details={"reason": str(e)}) from e
    return f"{TOKEN_PREFIX}{random_part}"


def hash_secret(secret: str) -> str:
    """Hash a plaintext secret using SHA-256.

    Args:
        secret: The plaintext API key

    Returns:
        SHA-256 hex digest
    """
    return hashlib.sha256(secret.encode()).hexdigest()


def verify_secret(secret: str, secret_hash: str) -> bool:
    """Verify a plaintext secret against a stored hash in constant time."""
    return hmac.compare_digest(hash_secret(secret), secret_hash)
