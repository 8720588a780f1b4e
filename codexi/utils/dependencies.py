"""FastAPI dependency providers for external clients."""

from __future__ import annotations

from fastapi import Request
from supabase import AsyncClient, acreate_client

from codexi import SUPABASE_KEY, SUPABASE_URL
from codexi.utils.errors import ErrorKind, TokenServiceError


async def create_supabase_client() -> AsyncClient:
    """Build the process-wide client. Called once by the app lifespan."""
    return await acreate_client(SUPABASE_URL, SUPABASE_KEY)  # type: ignore[arg-type]


async def get_supabase_async(request: Request) -> AsyncClient:
    """Return the Supabase client owned by the running application.

    The hosting layer puts it on ``app.state.supabase``, either through
    ``create_app(supabase=...)`` or at startup.
    """
    client = getattr(request.app.state, "supabase", None)
    if client is None:
        raise TokenServiceError(ErrorKind.internal, "Token store unavailable")
    return client
