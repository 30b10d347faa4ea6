"""Domain vocabulary: enums, limits, error codes, results and events."""

from .enums import ChatRole, ChatType, IsolationLevel, MentionOwner, UserStatus
from .errors import ErrorCode, ErrorKind, Failure, business_error, validation_error
from .results import Result

__all__ = [
    "ChatRole",
    "ChatType",
    "ErrorCode",
    "ErrorKind",
    "Failure",
    "IsolationLevel",
    "MentionOwner",
    "Result",
    "UserStatus",
    "business_error",
    "validation_error",
]
