"""Display-safe masking of API key secrets."""

from __future__ import annotations

MASK_CHAR = "*"
VISIBLE_PREFIX_LEN = 4


def mask(
    secret: str,
    *,
    visible: int = VISIBLE_PREFIX_LEN,
    mask_char: str = MASK_CHAR,
) -> str:
    """Return the masked display form of a secret.

    The first ``visible`` characters are kept and every remaining character is
    replaced by ``mask_char``, so the result has the same length as the input.
    Secrets no longer than ``visible`` are returned unchanged.
    """
    if len(secret) <= visible:
        return secret
    return secret[:visible] + mask_char * (len(secret) - visible)
