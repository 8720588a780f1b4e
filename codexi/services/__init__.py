"""Token services. Each function takes the request's Supabase client first."""

from codexi.services.issuance import IssuedToken, issue_personal_token
from codexi.services.management import list_personal_tokens, revoke_personal_token
from codexi.services.validation import ValidatedToken, validate_personal_token

__all__ = [
    "IssuedToken",
    "ValidatedToken",
    "issue_personal_token",
    "list_personal_tokens",
    "revoke_personal_token",
    "validate_personal_token",
]
