from __future__ import annotations

"""Persistence / Supabase row models."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, constr

__all__ = [
    "PersonalToken",
]


class PersonalToken(BaseModel):
    """Row in `personal_tokens`."""

    id: str = Field(..., description="Primary key (UUID)")
    user_id: str = Field(..., description="Owning Supabase auth user")
    token_name: constr(min_length=1, max_length=50)  # type: ignore[valid-type]
    token_hash: Optional[constr(min_length=64, max_length=64)] = Field(  # type: ignore[valid-type]
        None, description="SHA-256 fingerprint; omitted when not selected"
    )
    token_prefix: Optional[str] = Field(None, description="Display mask, e.g. 'CXI_a1B2...'")
    permissions: Dict[str, List[str]] = Field(default_factory=dict)
    expires_at: Optional[datetime] = Field(None, description="Absolute expiry; None never expires")
    is_active: bool = True
    last_used_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "PersonalToken":
        data = dict(row)
        # Rows written before permissions were enforced may hold NULL
        if data.get("permissions") is None:
            data["permissions"] = {}
        return cls.model_validate(data)
