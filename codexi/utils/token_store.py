"""Access to the `personal_tokens` table.

Every function takes the caller's Supabase client; nothing here holds a
client of its own. Database or network failures surface as
``TokenServiceError(ErrorKind.internal)``.
"""

from __future__ import annotations

import inspect
from datetime import datetime
from typing import Any

from supabase import AsyncClient

from codexi.models.db import PersonalToken
from codexi.utils.database import DUPLICATE, insert_data, query_data, query_many, query_one, update_data
from codexi.utils.errors import ErrorKind, TokenServiceError
from codexi.utils.logger import logger

PERSONAL_TOKEN_TABLE = "personal_tokens"

# Everything except the fingerprint
LISTING_FIELDS = "id,user_id,token_name,token_prefix,permissions,expires_at,is_active,last_used_at,created_at"


async def _safe_supabase_call(coro, *, detail: str):
    """Await a Supabase call and translate unexpected failures into ``internal``."""
    try:
        return await coro if inspect.isawaitable(coro) else coro  # type: ignore[misc]
    except TokenServiceError:
        raise
    except Exception as exc:
        logger.error("token.store_failed", extra={"extra": {"detail": detail, "error": type(exc).__name__}})
        raise TokenServiceError(ErrorKind.internal, "Internal server error") from exc


async def count_active_tokens(supabase: AsyncClient, user_id: str) -> int:
    resp = await _safe_supabase_call(
        query_data(
            supabase,
            PERSONAL_TOKEN_TABLE,
            filters={"user_id": user_id, "is_active": True},
            select_fields="id",
            count="exact",
        ),
        detail="Failed to check existing tokens",
    )
    counted = getattr(resp, "count", None)
    if counted is not None:
        return counted
    return len(getattr(resp, "data", []) or [])


async def insert_token(supabase: AsyncClient, row: dict[str, Any]) -> PersonalToken | None:
    """Insert a token row; ``None`` means the fingerprint already exists."""
    stored = await _safe_supabase_call(
        insert_data(supabase, PERSONAL_TOKEN_TABLE, row),
        detail="Failed to create token",
    )
    if stored == DUPLICATE:
        return None
    return PersonalToken.from_row(stored)


async def find_active_token(supabase: AsyncClient, token_hash: str) -> PersonalToken | None:
    row = await _safe_supabase_call(
        query_one(
            supabase,
            PERSONAL_TOKEN_TABLE,
            match={"token_hash": token_hash, "is_active": True},
            select_fields="id,user_id,token_name,permissions,expires_at,is_active,last_used_at",
        ),
        detail="Failed to look up token",
    )
    if not row:
        return None
    return PersonalToken.from_row(row)


async def touch_last_used(supabase: AsyncClient, token_id: str, when: datetime) -> None:
    """Record a successful use. Callers decide how to treat failures."""
    await update_data(
        supabase,
        PERSONAL_TOKEN_TABLE,
        update_values={"last_used_at": when.isoformat()},
        filters={"id": token_id},
        error_message="last_used_at update failed",
    )


async def list_tokens(supabase: AsyncClient, user_id: str) -> list[PersonalToken]:
    rows = await _safe_supabase_call(
        query_many(
            supabase,
            PERSONAL_TOKEN_TABLE,
            match={"user_id": user_id},
            order_by=("created_at", True),
            select_fields=LISTING_FIELDS,
        ),
        detail="Failed to list tokens",
    )
    return [PersonalToken.from_row(row) for row in rows]


async def deactivate_token(supabase: AsyncClient, user_id: str, token_id: str) -> bool:
    """Flip ``is_active`` off. Returns False when the owner holds no such token."""
    updated = await _safe_supabase_call(
        update_data(
            supabase,
            PERSONAL_TOKEN_TABLE,
            update_values={"is_active": False},
            filters={"id": token_id, "user_id": user_id},
            error_message="token_revoke_failed",
        ),
        detail="Failed to revoke token",
    )
    return bool(updated)
