from __future__ import annotations

"""Personal access token endpoints.

Issuing, listing and revoking need a dashboard session (Supabase JWT).
Validation takes the token in the body so edge functions and the CLI can
check a token without holding a session. ``/whoami`` takes the token as a
bearer credential.
"""

from fastapi import APIRouter, Depends, Path

from codexi.models import (
    AuthContext,
    ErrorResponse,
    MessageResponse,
    PersonalTokenResponse,
    TokenCreateRequest,
    TokenCreateResponse,
    TokenValidateRequest,
    TokenValidateResponse,
)
from codexi.services import (
    issue_personal_token,
    list_personal_tokens,
    revoke_personal_token,
    validate_personal_token,
)
from codexi.utils.auth import require_personal_token, require_user
from codexi.utils.dependencies import get_supabase_async

router = APIRouter(tags=["tokens"])

_ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


# ---------------------------------------------------------------------------
# Issue token (Supabase session required)
# ---------------------------------------------------------------------------


@router.post(
    "/generate-personal-token",
    response_model=TokenCreateResponse,
    responses=_ERRORS,
)
async def generate_personal_token(
    payload: TokenCreateRequest,
    auth: AuthContext = Depends(require_user()),
    supabase=Depends(get_supabase_async),
):
    """Issue a new personal token.

    The cleartext ``token`` in the response is the only time it is ever
    visible; only its fingerprint is stored.
    """
    issued = await issue_personal_token(
        supabase,
        auth.user_id,
        payload.tokenName,
        payload.permissions,
        payload.expiresAt,
    )
    return TokenCreateResponse(token=issued.token, tokenData=issued.token_data())


# ---------------------------------------------------------------------------
# Validate token (no session; token in body)
# ---------------------------------------------------------------------------


@router.post(
    "/validate-personal-token",
    response_model=TokenValidateResponse,
    responses=_ERRORS,
)
async def validate_token(
    payload: TokenValidateRequest,
    supabase=Depends(get_supabase_async),
):
    validated = await validate_personal_token(supabase, payload.token, payload.requiredPermissions)
    return TokenValidateResponse(
        user_id=validated.user_id,
        token_name=validated.token_name,
        permissions=validated.permissions,
    )


@router.get("/whoami", response_model=TokenValidateResponse, responses=_ERRORS)
async def whoami(auth: AuthContext = Depends(require_personal_token())):
    """Describe the personal token sent as ``Authorization: Bearer CXI_...``."""
    return TokenValidateResponse(
        user_id=auth.user_id,
        token_name=auth.token_name or "",
        permissions=auth.permissions,
    )


# ---------------------------------------------------------------------------
# List & revoke (owner only)
# ---------------------------------------------------------------------------


@router.get("/personal-tokens", response_model=list[PersonalTokenResponse], responses=_ERRORS)
async def list_tokens(
    auth: AuthContext = Depends(require_user()),
    supabase=Depends(get_supabase_async),
):
    tokens = await list_personal_tokens(supabase, auth.user_id)
    return [PersonalTokenResponse(**t.model_dump(exclude={"token_hash", "user_id"})) for t in tokens]


@router.delete(
    "/personal-tokens/{token_id}",
    response_model=MessageResponse,
    responses={**_ERRORS, 404: {"model": ErrorResponse}},
)
async def revoke_token(
    token_id: str = Path(..., description="Token ID to revoke"),
    auth: AuthContext = Depends(require_user()),
    supabase=Depends(get_supabase_async),
):
    await revoke_personal_token(supabase, auth.user_id, token_id)
    return MessageResponse(message="token_revoked")

