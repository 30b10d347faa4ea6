from __future__ import annotations

import pytest

from ibadgram.domain.errors import (
    ERROR_KINDS,
    ErrorCode,
    ErrorKind,
    business_error,
    kind_of,
    validation_error,
)
from ibadgram.domain.results import Result

pytestmark = pytest.mark.unit


def test_ok_result_carries_value() -> None:
    result = Result.ok(42)

    assert result.is_success is True
    assert result.is_failure is False
    assert result.unwrap() == 42
    assert result.kind is None


def test_failed_result_exposes_first_error() -> None:
    first = business_error(ErrorCode.CHAT_NOT_FOUND, "Chat not found", chat_id="c1")
    second = business_error(ErrorCode.USER_DELETED, "User deleted")

    result = Result.fail(first, second)

    assert result.is_failure is True
    assert result.error is first
    assert result.kind is ErrorKind.NOT_FOUND
    assert result.error.context == {"chat_id": "c1"}
    with pytest.raises(ValueError):
        result.unwrap()


def test_fail_requires_an_error() -> None:
    with pytest.raises(ValueError):
        Result.fail()


def test_error_on_success_is_rejected() -> None:
    with pytest.raises(ValueError):
        _ = Result.ok().error


def test_propagate_keeps_errors() -> None:
    failure = business_error(ErrorCode.USER_NOT_FOUND, "User not found")

    propagated = Result.fail(failure).propagate()

    assert propagated.errors == (failure,)
    assert propagated.value is None


def test_every_listed_code_has_fixed_kind() -> None:
    assert kind_of(ErrorCode.REQUIRED_FIELD) is ErrorKind.VALIDATION
    assert kind_of(ErrorCode.CHAT_ACCESS_DENIED) is ErrorKind.AUTHORIZATION
    assert kind_of(ErrorCode.REFRESH_TOKEN_EXPIRED) is ErrorKind.TOKEN
    assert kind_of(ErrorCode.DATABASE_ERROR) is ErrorKind.PERSISTENCE
    assert kind_of(ErrorCode.EXTERNAL_SERVICE_ERROR) is ErrorKind.EXTERNAL
    assert kind_of(ErrorCode.USERNAME_ALREADY_TAKEN) is ErrorKind.STATE_CONFLICT
    assert ErrorCode.CHAT_ALREADY_EXISTS not in ERROR_KINDS


def test_validation_error_records_property() -> None:
    failure = validation_error(
        ErrorCode.FIELD_TOO_SHORT,
        "Password too short",
        property_name="Password",
        attempted_value="abc",
    )

    assert failure.kind is ErrorKind.VALIDATION
    assert failure.property_name == "Password"
    assert failure.attempted_value == "abc"
