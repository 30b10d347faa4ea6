"""Stable error codes and the failure values handlers return."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class ErrorKind(str, Enum):
    """Coarse category a caller can branch on without knowing every code."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STATE_CONFLICT = "state_conflict"
    AUTHORIZATION = "authorization"
    PERSISTENCE = "persistence"
    TOKEN = "token"
    EXTERNAL = "external"


class ErrorCode(str, Enum):
    # structural validation
    REQUIRED_FIELD = "REQUIRED_FIELD"
    INVALID_FORMAT = "INVALID_FORMAT"
    FIELD_TOO_SHORT = "FIELD_TOO_SHORT"
    FIELD_TOO_LONG = "FIELD_TOO_LONG"
    UNSUPPORTED_EMAIL_DOMAIN = "UNSUPPORTED_EMAIL_DOMAIN"
    INVALID_RANGE = "INVALID_RANGE"
    REQUEST_EMPTY = "REQUEST_EMPTY"
    FORBIDDEN_CONTENT = "FORBIDDEN_CONTENT"

    # users
    USER_NOT_FOUND = "USER_NOT_FOUND"
    USER_DELETED = "USER_DELETED"
    USER_NOT_VERIFIED = "USER_NOT_VERIFIED"
    EMAIL_ALREADY_CONFIRMED = "EMAIL_ALREADY_CONFIRMED"
    EMAIL_NOT_CONFIRMED = "EMAIL_NOT_CONFIRMED"
    EMAIL_AWAITING_CONFIRMATION = "EMAIL_AWAITING_CONFIRMATION"
    EMAIL_ALREADY_USED = "EMAIL_ALREADY_USED"
    ACCOUNT_ALREADY_COMPLETED = "ACCOUNT_ALREADY_COMPLETED"
    INVALID_CONFIRMATION_CODE = "INVALID_CONFIRMATION_CODE"
    CONFIRMATION_CODE_EXPIRED = "CONFIRMATION_CODE_EXPIRED"
    CONFIRMATION_TOKEN_NOT_FOUND = "CONFIRMATION_TOKEN_NOT_FOUND"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    NO_CHANGES_DETECTED = "NO_CHANGES_DETECTED"

    # mentions
    USERNAME_ALREADY_TAKEN = "USERNAME_ALREADY_TAKEN"
    USERNAME_UNCHANGED = "USERNAME_UNCHANGED"

    # chats
    CHAT_NOT_FOUND = "CHAT_NOT_FOUND"
    CHAT_DELETED = "CHAT_DELETED"
    CHAT_ALREADY_EXISTS = "CHAT_ALREADY_EXISTS"
    CHAT_TYPE_MISMATCH = "CHAT_TYPE_MISMATCH"
    CHAT_ACCESS_DENIED = "CHAT_ACCESS_DENIED"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    GROUP_ALREADY_PUBLIC = "GROUP_ALREADY_PUBLIC"
    GROUP_ALREADY_PRIVATE = "GROUP_ALREADY_PRIVATE"
    GROUP_IS_PRIVATE = "GROUP_IS_PRIVATE"

    # messages
    MESSAGE_NOT_FOUND = "MESSAGE_NOT_FOUND"
    MESSAGE_DELETED = "MESSAGE_DELETED"
    NOT_MESSAGE_AUTHOR = "NOT_MESSAGE_AUTHOR"

    # refresh tokens
    REFRESH_TOKEN_NOT_FOUND = "REFRESH_TOKEN_NOT_FOUND"
    REFRESH_TOKEN_REVOKED = "REFRESH_TOKEN_REVOKED"
    REFRESH_TOKEN_EXPIRED = "REFRESH_TOKEN_EXPIRED"

    # infrastructure
    CONFLICT = "CONFLICT"
    DATABASE_ERROR = "DATABASE_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"


_VALIDATION = (
    ErrorCode.REQUIRED_FIELD,
    ErrorCode.INVALID_FORMAT,
    ErrorCode.FIELD_TOO_SHORT,
    ErrorCode.FIELD_TOO_LONG,
    ErrorCode.UNSUPPORTED_EMAIL_DOMAIN,
    ErrorCode.INVALID_RANGE,
    ErrorCode.REQUEST_EMPTY,
    ErrorCode.FORBIDDEN_CONTENT,
)
_NOT_FOUND = (
    ErrorCode.USER_NOT_FOUND,
    ErrorCode.CHAT_NOT_FOUND,
    ErrorCode.MESSAGE_NOT_FOUND,
)
_AUTHORIZATION = (
    ErrorCode.CHAT_ACCESS_DENIED,
    ErrorCode.INSUFFICIENT_PERMISSIONS,
    ErrorCode.NOT_MESSAGE_AUTHOR,
    ErrorCode.INVALID_CREDENTIALS,
)
_TOKEN = (
    ErrorCode.REFRESH_TOKEN_NOT_FOUND,
    ErrorCode.REFRESH_TOKEN_REVOKED,
    ErrorCode.REFRESH_TOKEN_EXPIRED,
    ErrorCode.INVALID_CONFIRMATION_CODE,
    ErrorCode.CONFIRMATION_CODE_EXPIRED,
    ErrorCode.CONFIRMATION_TOKEN_NOT_FOUND,
)

ERROR_KINDS: dict[ErrorCode, ErrorKind] = {
    **{code: ErrorKind.VALIDATION for code in _VALIDATION},
    **{code: ErrorKind.NOT_FOUND for code in _NOT_FOUND},
    **{code: ErrorKind.AUTHORIZATION for code in _AUTHORIZATION},
    **{code: ErrorKind.TOKEN for code in _TOKEN},
    ErrorCode.DATABASE_ERROR: ErrorKind.PERSISTENCE,
    ErrorCode.EXTERNAL_SERVICE_ERROR: ErrorKind.EXTERNAL,
}
"""Kind per code; codes not listed are state conflicts."""


def kind_of(code: ErrorCode) -> ErrorKind:
    return ERROR_KINDS.get(code, ErrorKind.STATE_CONFLICT)


@dataclass(frozen=True, slots=True)
class Failure:
    """A typed, user-presentable failure.

    ``context`` carries structured data a client can use for remediation
    (the conflicting id, a suggested action). Validation failures also carry
    the offending property and the value that was rejected.
    """

    code: ErrorCode
    message: str
    kind: ErrorKind
    context: Mapping[str, Any] = field(default_factory=dict)
    property_name: str | None = None
    attempted_value: Any = None


def business_error(code: ErrorCode, message: str, **context: Any) -> Failure:
    """Build a failure for a rule that depends on persisted state."""

    return Failure(code=code, message=message, kind=kind_of(code), context=context)


def validation_error(
    code: ErrorCode,
    message: str,
    *,
    property_name: str,
    attempted_value: Any = None,
) -> Failure:
    """Build a structural validation failure for ``property_name``."""

    return Failure(
        code=code,
        message=message,
        kind=ErrorKind.VALIDATION,
        property_name=property_name,
        attempted_value=attempted_value,
    )


__all__ = [
    "ERROR_KINDS",
    "ErrorCode",
    "ErrorKind",
    "Failure",
    "business_error",
    "kind_of",
    "validation_error",
]
