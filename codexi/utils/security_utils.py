"""Verification of dashboard sessions (Supabase Auth JWTs)."""

from __future__ import annotations

import os

from jose import JWTError, jwt as jose_jwt
from supabase import AsyncClient

from codexi.utils.errors import ErrorKind, TokenServiceError
from codexi.utils.logger import logger

_JWT_SECRET_ENV = "SUPABASE_JWT_SECRET"
SUPABASE_JWT_AUDIENCE = "authenticated"


def _decode_locally(token: str, secret: str) -> str:
    try:
        claims = jose_jwt.decode(
            token,
            secret,
            algorithms=["HS256"],
            audience=SUPABASE_JWT_AUDIENCE,
        )
    except JWTError as exc:
        logger.info("auth.session_rejected", extra={"extra": {"reason": type(exc).__name__}})
        raise TokenServiceError(ErrorKind.unauthenticated) from exc
    user_id = claims.get("sub")
    if not user_id:
        raise TokenServiceError(ErrorKind.unauthenticated)
    return str(user_id)


async def verify_supabase_jwt(token: str, supabase: AsyncClient) -> str:
    """Return the Supabase auth user id behind a session JWT.

    With ``SUPABASE_JWT_SECRET`` configured the signature is checked locally;
    otherwise the token is handed to Supabase Auth (``auth.get_user``).

    Raises:
        TokenServiceError: ``unauthenticated`` for any invalid, expired or
            unknown session.
    """
    if not token:
        raise TokenServiceError(ErrorKind.unauthenticated)

    secret = os.getenv(_JWT_SECRET_ENV)
    if secret:
        return _decode_locally(token, secret)

    try:
        resp = await supabase.auth.get_user(token)
    except Exception as exc:  # noqa: BLE001
        logger.info("auth.session_rejected", extra={"extra": {"reason": type(exc).__name__}})
        raise TokenServiceError(ErrorKind.unauthenticated) from exc

    user = getattr(resp, "user", None)
    if user is None or not getattr(user, "id", None):
        raise TokenServiceError(ErrorKind.unauthenticated)
    return str(user.id)
