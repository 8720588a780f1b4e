"""Typed failures raised by the token services and rendered as JSON errors."""

from __future__ import annotations

from enum import Enum

from fastapi import status


class ErrorKind(str, Enum):
    invalid_input = "invalid_input"
    quota_exceeded = "quota_exceeded"
    malformed_token = "malformed_token"
    unauthenticated = "unauthenticated"
    not_found_or_revoked = "not_found_or_revoked"
    expired = "expired"
    forbidden = "forbidden"
    not_found = "not_found"
    internal = "internal"


_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.invalid_input: status.HTTP_400_BAD_REQUEST,
    ErrorKind.quota_exceeded: status.HTTP_400_BAD_REQUEST,
    ErrorKind.malformed_token: status.HTTP_400_BAD_REQUEST,
    ErrorKind.unauthenticated: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.not_found_or_revoked: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.expired: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.forbidden: status.HTTP_403_FORBIDDEN,
    ErrorKind.not_found: status.HTTP_404_NOT_FOUND,
    ErrorKind.internal: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Messages match what the dashboard and CLI already display
_DEFAULT_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.invalid_input: "Invalid request",
    ErrorKind.quota_exceeded: "Maximum of 10 active tokens allowed",
    ErrorKind.malformed_token: "Invalid token format",
    ErrorKind.unauthenticated: "Unauthorized",
    ErrorKind.not_found_or_revoked: "Invalid or expired token",
    ErrorKind.expired: "Token has expired",
    ErrorKind.forbidden: "Insufficient permissions",
    ErrorKind.not_found: "Token not found",
    ErrorKind.internal: "Internal server error",
}


class TokenServiceError(Exception):
    """A failure with a known :class:`ErrorKind`.

    The message is shown to the caller verbatim, so it must never contain the
    cleartext token.
    """

    def __init__(self, kind: ErrorKind, message: str | None = None):
        self.kind = kind
        self.message = message or _DEFAULT_MESSAGES[kind]
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self.kind]

    def __repr__(self) -> str:
        return f"TokenServiceError({self.kind.value!r}, {self.message!r})"
