from __future__ import annotations

"""Unified models namespace: API request/response bodies plus DB row models.

Call-sites can simply::

    from codexi.models import TokenCreateRequest, PersonalToken, TokenPermissions
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from codexi.models.db import PersonalToken
from codexi.models.permissions import PermissionCategory, TokenPermissions, grants

# ---------------------------------------------------------------------------
# Authentication Models
# ---------------------------------------------------------------------------


@dataclass
class AuthContext:
    """Identity behind a request.

    Dashboard sessions only carry ``user_id``. Personal tokens also carry the
    token's id, name and permission mapping.
    """

    user_id: str
    token_id: str | None = None
    token_name: str | None = None
    permissions: dict[str, list[str]] = field(default_factory=dict)

    def has_permission(self, permission: str) -> bool:
        """Check a single ``"category:action"`` grant."""
        return grants([permission], self.permissions)

    def has_any_permission(self, *permissions: str) -> bool:
        return any(self.has_permission(p) for p in permissions)

    def is_personal_token(self) -> bool:
        return self.token_id is not None


# ---------------------------------------------------------------------------
# API Pydantic models
# ---------------------------------------------------------------------------


class BaseResponse(BaseModel):
    model_config = {
        "from_attributes": True,
        "json_schema_extra": {"example": {"message": "OK"}},
    }


class MessageResponse(BaseResponse):
    message: str = Field(..., examples=["OK"])


class ErrorResponse(BaseModel):
    error: str = Field(..., examples=["Invalid token format"])


class TokenCreateRequest(BaseModel):
    tokenName: Optional[str] = Field(None, description="Display label, 1-50 characters")
    permissions: TokenPermissions = Field(
        default_factory=TokenPermissions,
        description="Category → allowed actions",
    )
    expiresAt: Optional[str] = Field(
        None,
        description="ISO-8601 expiry, or 'never' / omitted for no expiry",
    )


class TokenData(BaseModel):
    id: str
    token_name: str
    token_prefix: str = Field(..., description="Masked token for display")
    permissions: Dict[str, List[str]]
    expires_at: Optional[datetime]
    created_at: Optional[datetime]


class TokenCreateResponse(BaseModel):
    token: str  # plaintext token (returned only once)
    tokenData: TokenData


class TokenValidateRequest(BaseModel):
    # Optional so a missing token surfaces as "Invalid token format", not a schema error
    token: Optional[str] = None
    requiredPermissions: Optional[List[str]] = Field(
        None,
        description="'category:action' strings that must all be granted",
    )


class TokenValidateResponse(BaseModel):
    valid: bool = True
    user_id: str
    token_name: str
    permissions: Dict[str, List[str]]


class PersonalTokenResponse(BaseModel):
    """Listing view of a token; never includes the fingerprint."""

    id: str
    token_name: str
    token_prefix: Optional[str] = None
    permissions: Dict[str, List[str]]
    expires_at: Optional[datetime] = None
    is_active: bool
    last_used_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


__all__ = [
    "AuthContext",
    "ErrorResponse",
    "MessageResponse",
    "PermissionCategory",
    "PersonalToken",
    "PersonalTokenResponse",
    "TokenCreateRequest",
    "TokenCreateResponse",
    "TokenData",
    "TokenPermissions",
    "TokenValidateRequest",
    "TokenValidateResponse",
    "grants",
]
