from __future__ import annotations

"""Application-level configuration helpers (env → constants).

Only generic values that may be imported *anywhere* in the code-base should
live in this module. Keep it free of heavy imports so cold starts stay cheap.
"""

# Standard library
import os

__all__ = [
    "CORS_ALLOWED_ORIGINS",
    "CORS_ALLOW_HEADERS",
    "FINGERPRINT_MAX_ATTEMPTS",
    "LOG_LEVEL",
    "MAX_ACTIVE_TOKENS",
    "MAX_TOKEN_NAME_LENGTH",
    "RATE_LIMIT_DEFAULT",
    "TOKEN_PREFIX",
    "TOKEN_RANDOM_LENGTH",
]

# Personal token shape: CXI_ + 32 alphanumerics
TOKEN_PREFIX = "CXI_"
TOKEN_RANDOM_LENGTH = 32
MAX_TOKEN_NAME_LENGTH = 50
FINGERPRINT_MAX_ATTEMPTS = 3


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


MAX_ACTIVE_TOKENS: int = _env_int("CODEXI_MAX_ACTIVE_TOKENS", 10)

RATE_LIMIT_DEFAULT: str = os.getenv("RATE_LIMIT_DEFAULT", "60/minute")

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


def _collect_origins() -> list[str]:
    """Collect allowed CORS origins from the environment.

    The edge functions this service replaces answer every origin, so the
    wildcard stays the default when ``CORS_ALLOWED_ORIGINS`` is unset.
    """
    raw = os.getenv("CORS_ALLOWED_ORIGINS", "")
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or ["*"]


CORS_ALLOWED_ORIGINS: list[str] = _collect_origins()

CORS_ALLOW_HEADERS: list[str] = ["authorization", "x-client-info", "apikey", "content-type"]
