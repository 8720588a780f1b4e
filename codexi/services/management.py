"""Owner-facing token listing and revocation."""

from __future__ import annotations

from supabase import AsyncClient

from codexi.models import PersonalToken
from codexi.utils.errors import ErrorKind, TokenServiceError
from codexi.utils.logger import logger
from codexi.utils.token_store import deactivate_token, list_tokens


async def list_personal_tokens(supabase: AsyncClient, owner_id: str) -> list[PersonalToken]:
    """Owner's tokens, newest first, without fingerprints."""
    return await list_tokens(supabase, owner_id)


async def revoke_personal_token(supabase: AsyncClient, owner_id: str, token_id: str) -> None:
    """Permanently deactivate one of the owner's tokens. The row is kept."""
    if not await deactivate_token(supabase, owner_id, token_id):
        raise TokenServiceError(ErrorKind.not_found)
    logger.info("token.revoked", extra={"extra": {"user_id": owner_id, "token_id": token_id}})
