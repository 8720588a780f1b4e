"""Personal token generation and fingerprinting.

Cleartext tokens look like ``CXI_`` followed by 32 alphanumerics. Only the
SHA-256 fingerprint (and an 8-character display mask) is ever stored.
"""

from __future__ import annotations

import secrets
import string
from hashlib import sha256

from codexi.settings import TOKEN_PREFIX, TOKEN_RANDOM_LENGTH

TOKEN_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
MASK_LENGTH = 8


def generate_token() -> str:
    """Return a fresh cleartext token drawn from the OS CSPRNG."""
    body = "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(TOKEN_RANDOM_LENGTH))
    return f"{TOKEN_PREFIX}{body}"


def fingerprint_token(cleartext: str) -> str:
    """Lowercase hex SHA-256 of the token's UTF-8 bytes."""
    return sha256(cleartext.encode("utf-8")).hexdigest()


def mask_token(cleartext: str) -> str:
    """Display form shown in listings, e.g. ``CXI_a1B2...``."""
    return cleartext[:MASK_LENGTH] + "..."


def has_token_prefix(value: object) -> bool:
    return isinstance(value, str) and value.startswith(TOKEN_PREFIX)
