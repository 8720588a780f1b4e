from __future__ import annotations

"""Personal token validation."""

from dataclasses import dataclass, field
from typing import Sequence

from supabase import AsyncClient

from codexi.models import AuthContext, grants
from codexi.utils.errors import ErrorKind, TokenServiceError
from codexi.utils.logger import logger
from codexi.utils.token_codec import fingerprint_token, has_token_prefix
from codexi.utils.token_store import find_active_token, touch_last_used
from codexi.utils.utils import parse_timestamp, utc_now


@dataclass
class ValidatedToken:
    user_id: str
    token_id: str
    token_name: str
    permissions: dict[str, list[str]] = field(default_factory=dict)

    def auth_context(self) -> AuthContext:
        return AuthContext(
            user_id=self.user_id,
            token_id=self.token_id,
            token_name=self.token_name,
            permissions=self.permissions,
        )


def _reject(kind: ErrorKind, reason: str, token_hash: str | None = None, token_id: str | None = None):
    logger.info(
        "token.rejected",
        extra={
            "extra": {
                "reason": reason,
                "token_hash_prefix": token_hash[:8] if token_hash else None,
                "token_id": token_id,
            }
        },
    )
    return TokenServiceError(kind)


async def validate_personal_token(
    supabase: AsyncClient,
    presented: str | None,
    required_permissions: Sequence[str] | None = None,
) -> ValidatedToken:
    """Check a presented cleartext token and return who it belongs to.

    Steps run in order and stop at the first failure: prefix check (no store
    access), active-record lookup by fingerprint, expiry, permissions. Only a
    fully successful check advances ``last_used_at``, and a failure to write
    that timestamp is logged rather than raised.
    """
    if not has_token_prefix(presented):
        raise _reject(ErrorKind.malformed_token, "bad_prefix")

    token_hash = fingerprint_token(presented)
    record = await find_active_token(supabase, token_hash)
    if record is None:
        raise _reject(ErrorKind.not_found_or_revoked, "not_found", token_hash)

    now = utc_now()
    expires_at = parse_timestamp(record.expires_at)
    if expires_at is not None and expires_at < now:
        raise _reject(ErrorKind.expired, "expired", token_hash, record.id)

    if required_permissions and not grants(required_permissions, record.permissions):
        raise _reject(ErrorKind.forbidden, "insufficient_permissions", token_hash, record.id)

    try:
        await touch_last_used(supabase, record.id, now)
    except Exception as exc:  # noqa: BLE001
        logger.warning(
            "token.touch_failed",
            extra={"extra": {"token_id": record.id, "error": type(exc).__name__}},
        )

    logger.info("token.validated", extra={"extra": {"user_id": record.user_id, "token_id": record.id}})
    return ValidatedToken(
        user_id=record.user_id,
        token_id=record.id,
        token_name=record.token_name,
        permissions=record.permissions,
    )

