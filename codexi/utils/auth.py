"""Authentication dependencies.

Two kinds of callers reach this service:

* dashboard users holding a Supabase session JWT (issue, list, revoke), and
* tools or agent handlers holding a ``CXI_`` personal token.

Usage::

    auth: AuthContext = Depends(require_user())
    auth: AuthContext = Depends(require_personal_token("agent:use"))
"""

from __future__ import annotations

import os

from fastapi import Depends, Header

from codexi import APP_ENV
from codexi.models import AuthContext
from codexi.services.validation import validate_personal_token
from codexi.utils.dependencies import get_supabase_async
from codexi.utils.errors import ErrorKind, TokenServiceError
from codexi.utils.security_utils import verify_supabase_jwt


def _dev_user_id() -> str:
    return os.getenv("CODEXI_DEV_USER_ID", "dev_user")


def _bearer(authorization: str | None) -> str:
    if not authorization:
        raise TokenServiceError(ErrorKind.unauthenticated)
    return authorization.replace("Bearer ", "", 1).strip()


def require_user():
    """Dependency factory: caller must hold a valid dashboard session."""

    async def _auth_dependency(
        authorization: str | None = Header(None),
        supabase=Depends(get_supabase_async),
    ) -> AuthContext:
        # Development bypass
        if authorization is None and APP_ENV == "development":
            return AuthContext(user_id=_dev_user_id())

        user_id = await verify_supabase_jwt(_bearer(authorization), supabase)
        return AuthContext(user_id=user_id)

    return _auth_dependency


def require_personal_token(*required_permissions: str):
    """Dependency factory: caller must present a personal token holding
    every ``"category:action"`` in *required_permissions*.
    """

    required = list(required_permissions)

    async def _token_dependency(
        authorization: str | None = Header(None),
        supabase=Depends(get_supabase_async),
    ) -> AuthContext:
        validated = await validate_personal_token(supabase, _bearer(authorization), required)
        return validated.auth_context()

    return _token_dependency
