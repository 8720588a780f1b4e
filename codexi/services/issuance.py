from __future__ import annotations

"""Personal token issuance.

The cleartext token exists only in the return value of
:func:`issue_personal_token`; the table holds its fingerprint and a display
mask.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from pydantic import ValidationError
from supabase import AsyncClient

from codexi.models import PersonalToken, TokenData, TokenPermissions
from codexi.settings import FINGERPRINT_MAX_ATTEMPTS, MAX_ACTIVE_TOKENS, MAX_TOKEN_NAME_LENGTH
from codexi.utils.errors import ErrorKind, TokenServiceError
from codexi.utils.logger import logger
from codexi.utils.token_codec import fingerprint_token, generate_token, mask_token
from codexi.utils.token_store import count_active_tokens, insert_token
from codexi.utils.utils import generate_uuid, parse_timestamp, utc_now

NEVER_EXPIRES = "never"


@dataclass
class IssuedToken:
    token: str  # cleartext, shown once
    record: PersonalToken

    def token_data(self) -> TokenData:
        return TokenData(
            id=self.record.id,
            token_name=self.record.token_name,
            token_prefix=mask_token(self.token),
            permissions=self.record.permissions,
            expires_at=self.record.expires_at,
            created_at=self.record.created_at,
        )


def _check_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip() or len(name) > MAX_TOKEN_NAME_LENGTH:
        raise TokenServiceError(
            ErrorKind.invalid_input,
            f"Token name is required and must be at most {MAX_TOKEN_NAME_LENGTH} characters",
        )
    return name


def _check_permissions(permissions: TokenPermissions | Mapping[str, Any] | None) -> TokenPermissions:
    if isinstance(permissions, TokenPermissions):
        return permissions
    try:
        return TokenPermissions.model_validate(permissions or {})
    except ValidationError:
        raise TokenServiceError(ErrorKind.invalid_input, "Invalid permissions")


def _check_expiry(expires_at: datetime | str | None) -> datetime | None:
    if expires_at is None or expires_at == NEVER_EXPIRES:
        return None
    try:
        return parse_timestamp(expires_at)
    except (TypeError, ValueError):
        raise TokenServiceError(ErrorKind.invalid_input, "Invalid expiration date")


async def issue_personal_token(
    supabase: AsyncClient,
    owner_id: str,
    name: str,
    permissions: TokenPermissions | Mapping[str, Any] | None,
    expires_at: datetime | str | None = None,
) -> IssuedToken:
    """Create a token for *owner_id* and return its cleartext exactly once.

    Raises:
        TokenServiceError: ``invalid_input`` for a bad name, permission
            mapping or expiry; ``quota_exceeded`` when the owner already holds
            ``MAX_ACTIVE_TOKENS`` active tokens; ``internal`` on store failure
            or when every generated fingerprint collided.
    """
    name = _check_name(name)
    granted = _check_permissions(permissions)
    expiry = _check_expiry(expires_at)

    # Not atomic with the insert below; concurrent requests may overshoot
    active = await count_active_tokens(supabase, owner_id)
    if active >= MAX_ACTIVE_TOKENS:
        logger.info("token.quota_exceeded", extra={"extra": {"user_id": owner_id, "active": active}})
        raise TokenServiceError(
            ErrorKind.quota_exceeded,
            f"Maximum of {MAX_ACTIVE_TOKENS} active tokens allowed",
        )

    for attempt in range(1, FINGERPRINT_MAX_ATTEMPTS + 1):
        raw_token = generate_token()
        record = await insert_token(
            supabase,
            {
                "id": generate_uuid(),
                "user_id": owner_id,
                "token_name": name,
                "token_hash": fingerprint_token(raw_token),
                "token_prefix": mask_token(raw_token),
                "permissions": granted.as_mapping(),
                "expires_at": expiry.isoformat() if expiry else None,
                "is_active": True,
                "created_at": utc_now().isoformat(),
            },
        )
        if record is not None:
            logger.info(
                "token.issued",
                extra={"extra": {"user_id": owner_id, "token_id": record.id, "attempt": attempt}},
            )
            return IssuedToken(token=raw_token, record=record)
        logger.warning("token.fingerprint_collision", extra={"extra": {"user_id": owner_id, "attempt": attempt}})

    raise TokenServiceError(ErrorKind.internal, "Failed to create token")
