"""
Authentication error codes.

Closed set of business-rule failures returned in Result errors. Being a
``str`` enum, each member compares equal to its code string.
"""

from enum import Enum


class AuthErrorCode(str, Enum):
    # Session lifecycle
    INVALID_TOKEN = "INVALID_TOKEN"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    TOKEN_MISMATCH = "TOKEN_MISMATCH"
    SESSION_REVOKED = "SESSION_REVOKED"
    SESSION_DELETED = "SESSION_DELETED"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    ACCOUNT_NOT_ELIGIBLE = "ACCOUNT_NOT_ELIGIBLE"
    FORBIDDEN = "FORBIDDEN"

    # Identity flows
    EMAIL_ALREADY_EXISTS = "EMAIL_ALREADY_EXISTS"
    NICKNAME_ALREADY_TAKEN = "NICKNAME_ALREADY_TAKEN"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    MEMBER_NOT_FOUND = "MEMBER_NOT_FOUND"
    EMAIL_NOT_VERIFIED = "EMAIL_NOT_VERIFIED"
    ADMINISTRATOR_NOT_FOUND = "ADMINISTRATOR_NOT_FOUND"


# Failures of refresh; all of them force a fresh login
REFRESH_FAILURE_CODES = frozenset(
    {
        AuthErrorCode.INVALID_TOKEN,
        AuthErrorCode.SESSION_NOT_FOUND,
        AuthErrorCode.TOKEN_MISMATCH,
        AuthErrorCode.SESSION_REVOKED,
        AuthErrorCode.SESSION_DELETED,
        AuthErrorCode.SESSION_EXPIRED,
        AuthErrorCode.ACCOUNT_NOT_ELIGIBLE,
    }
)
