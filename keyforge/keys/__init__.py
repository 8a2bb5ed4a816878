"""Pure key primitives: generation, masking and expiry."""

from keyforge.keys.expiry import is_expired
from keyforge.keys.masking import MASK_CHAR, VISIBLE_PREFIX_LEN, mask
from keyforge.keys.token import generate, hash_secret, verify_secret

__all__ = [
    "MASK_CHAR",
    "VISIBLE_PREFIX_LEN",
    "generate",
    "hash_secret",
    "is_expired",
    "mask",
    "verify_secret",
]
