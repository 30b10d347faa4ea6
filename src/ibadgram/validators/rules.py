"""Reusable property checks.

Each check returns the first :class:`Failure` for one property, or ``None``,
so rules for a single field stop at the first problem while different fields
are all reported.
"""

from __future__ import annotations

import re
from typing import Any, Iterable
from uuid import UUID

from ..domain import constants
from ..domain.errors import ErrorCode, Failure, validation_error

_NAME_ALLOWED = re.compile(r"^[a-zA-ZÀ-ÿ\s'-]+$")
_NAME_REPEATED_SPECIALS = re.compile(r"[\s'-]{2,}")
_NAME_EDGE_SPECIALS = re.compile(r"^[\s'-]|[\s'-]$")
_EMAIL = re.compile(r"^[^@\s]+@([^@\s]+)$")
_SHORTNAME = re.compile(r"^[A-Za-z0-9_.-]+$")
_HEX = re.compile(r"^[0-9A-Fa-f]+$")
_FORBIDDEN_BIO_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE | re.DOTALL)
    for pattern in (
        r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>",
        r"javascript:",
        r"data:text/html",
        r"<iframe\b[^>]*>.*?</iframe>",
        r"<object\b[^>]*>.*?</object>",
    )
)


def collect(*checks: Failure | None) -> list[Failure]:
    return [failure for failure in checks if failure is not None]


def required_id(name: str, value: UUID | None) -> Failure | None:
    if value is None or value.int == 0:
        return validation_error(
            ErrorCode.REQUIRED_FIELD, f"{name} is required", property_name=name, attempted_value=value
        )
    return None


def required_text(name: str, value: str | None) -> Failure | None:
    if value is None or not value.strip():
        return validation_error(
            ErrorCode.REQUIRED_FIELD, f"{name} is required", property_name=name, attempted_value=value
        )
    return None


def length(
    name: str,
    value: str,
    *,
    min_length: int | None = None,
    max_length: int | None = None,
) -> Failure | None:
    if min_length is not None and len(value) < min_length:
        return validation_error(
            ErrorCode.FIELD_TOO_SHORT,
            f"{name} must be at least {min_length} characters long",
            property_name=name,
            attempted_value=value,
        )
    if max_length is not None and len(value) > max_length:
        return validation_error(
            ErrorCode.FIELD_TOO_LONG,
            f"{name} cannot exceed {max_length} characters",
            property_name=name,
            attempted_value=value,
        )
    return None


def in_range(name: str, value: int, *, minimum: int, maximum: int | None = None) -> Failure | None:
    if value < minimum or (maximum is not None and value > maximum):
        bounds = f"between {minimum} and {maximum}" if maximum is not None else f"at least {minimum}"
        return validation_error(
            ErrorCode.INVALID_RANGE,
            f"{name} must be {bounds}",
            property_name=name,
            attempted_value=value,
        )
    return None


def is_valid_name(value: str) -> bool:
    trimmed = value.strip()
    return (
        bool(_NAME_ALLOWED.match(trimmed))
        and not _NAME_REPEATED_SPECIALS.search(trimmed)
        and not _NAME_EDGE_SPECIALS.search(trimmed)
    )


def firstname(value: str | None, *, required: bool = True) -> Failure | None:
    if value is None or value == "":
        return required_text("Firstname", value) if required else None
    failure = length(
        "Firstname",
        value.strip(),
        min_length=constants.FIRSTNAME_MIN_LENGTH,
        max_length=constants.FIRSTNAME_MAX_LENGTH,
    )
    if failure is not None:
        return failure
    if not is_valid_name(value):
        return validation_error(
            ErrorCode.INVALID_FORMAT,
            "Firstname contains invalid characters",
            property_name="Firstname",
            attempted_value=value,
        )
    return None


def lastname(value: str | None) -> Failure | None:
    if not value:
        return None
    failure = length("Lastname", value.strip(), max_length=constants.LASTNAME_MAX_LENGTH)
    if failure is not None:
        return failure
    if not is_valid_name(value):
        return validation_error(
            ErrorCode.INVALID_FORMAT,
            "Lastname contains invalid characters",
            property_name="Lastname",
            attempted_value=value,
        )
    return None


def email(value: str | None) -> Failure | None:
    failure = required_text("Email", value)
    if failure is not None or value is None:
        return failure
    failure = length("Email", value, max_length=constants.EMAIL_MAX_LENGTH)
    if failure is not None:
        return failure
    match = _EMAIL.match(value.strip())
    if match is None:
        return validation_error(
            ErrorCode.INVALID_FORMAT, "Email has an invalid format", property_name="Email", attempted_value=value
        )
    if match.group(1).lower() not in constants.ALLOWED_EMAIL_DOMAINS:
        return validation_error(
            ErrorCode.UNSUPPORTED_EMAIL_DOMAIN,
            "Email domain is not supported",
            property_name="Email",
            attempted_value=value,
        )
    return None


def password(value: str | None) -> Failure | None:
    failure = required_text("Password", value)
    if failure is not None or value is None:
        return failure
    return length(
        "Password",
        value,
        min_length=constants.PASSWORD_MIN_LENGTH,
        max_length=constants.PASSWORD_MAX_LENGTH,
    )


def shortname(value: str | None) -> Failure | None:
    failure = required_text("Shortname", value)
    if failure is not None or value is None:
        return failure
    failure = length(
        "Shortname",
        value,
        min_length=constants.SHORTNAME_MIN_LENGTH,
        max_length=constants.SHORTNAME_MAX_LENGTH,
    )
    if failure is not None:
        return failure
    if not _SHORTNAME.match(value):
        return validation_error(
            ErrorCode.INVALID_FORMAT,
            "Shortname may only contain letters, digits, '.', '_' and '-'",
            property_name="Shortname",
            attempted_value=value,
        )
    return None


def bio(value: str | None) -> Failure | None:
    if not value:
        return None
    failure = length("Bio", value, max_length=constants.BIO_MAX_LENGTH)
    if failure is not None:
        return failure
    if any(pattern.search(value) for pattern in _FORBIDDEN_BIO_PATTERNS):
        return validation_error(
            ErrorCode.FORBIDDEN_CONTENT,
            "Bio contains inappropriate content",
            property_name="Bio",
            attempted_value=value,
        )
    return None


def chat_name(value: str | None) -> Failure | None:
    failure = required_text("Name", value)
    if failure is not None or value is None:
        return failure
    return length(
        "Name",
        value.strip(),
        min_length=constants.CHAT_NAME_MIN_LENGTH,
        max_length=constants.CHAT_NAME_MAX_LENGTH,
    )


def chat_description(value: str | None) -> Failure | None:
    if not value:
        return None
    return length("Description", value, max_length=constants.CHAT_DESCRIPTION_MAX_LENGTH)


def message_text(value: str | None) -> Failure | None:
    failure = required_text("Text", value)
    if failure is not None or value is None:
        return failure
    return length(
        "Text",
        value,
        min_length=constants.MESSAGE_MIN_LENGTH,
        max_length=constants.MESSAGE_MAX_LENGTH,
    )


def confirmation_code(value: str | None) -> Failure | None:
    failure = required_text("Code", value)
    if failure is not None or value is None:
        return failure
    if len(value) != constants.EMAIL_CONFIRMATION_TOKEN_LENGTH:
        return validation_error(
            ErrorCode.INVALID_FORMAT,
            f"Confirmation code must be {constants.EMAIL_CONFIRMATION_TOKEN_LENGTH} characters long",
            property_name="Code",
            attempted_value=value,
        )
    if not _HEX.match(value):
        return validation_error(
            ErrorCode.INVALID_FORMAT,
            "Confirmation code contains invalid characters",
            property_name="Code",
            attempted_value=value,
        )
    return None


def distinct_ids(name: str, left: UUID | None, right: UUID | None) -> Failure | None:
    if left is not None and right is not None and left == right:
        return validation_error(
            ErrorCode.INVALID_FORMAT,
            f"{name} must differ from the caller",
            property_name=name,
            attempted_value=right,
        )
    return None


def any_provided(values: Iterable[Any]) -> Failure | None:
    if not any(value not in (None, "") for value in values):
        return validation_error(
            ErrorCode.REQUEST_EMPTY,
            "At least one field must be provided for update",
            property_name="Request",
        )
    return None
