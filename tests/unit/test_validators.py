from __future__ import annotations

from uuid import UUID, uuid4

import pytest

from ibadgram.domain.errors import ErrorCode
from ibadgram.schemas.commands import (
    CompleteAccountCommand,
    ConfirmEmailCommand,
    CreateAccountCommand,
    CreateChatCommand,
    CreateGroupCommand,
    GetGroupMembersQuery,
    GetMessagesQuery,
    SendMessageCommand,
    UpdateGroupCommand,
    UpdateUserCommand,
)
from ibadgram.validators import chats, messages, rules, users

pytestmark = pytest.mark.unit


def _codes(failures) -> dict[str, ErrorCode]:
    return {failure.property_name: failure.code for failure in failures}


def test_create_account_accepts_valid_input() -> None:
    command = CreateAccountCommand(
        firstname="Anna-Marie", lastname="O'Neil", email="anna@gmail.com", password="secret123"
    )

    assert users.validate_create_account(command) == []


def test_create_account_reports_every_invalid_field() -> None:
    command = CreateAccountCommand(firstname="", email="anna@example.com", password="short")

    codes = _codes(users.validate_create_account(command))

    assert codes == {
        "Firstname": ErrorCode.REQUIRED_FIELD,
        "Email": ErrorCode.UNSUPPORTED_EMAIL_DOMAIN,
        "Password": ErrorCode.FIELD_TOO_SHORT,
    }


@pytest.mark.parametrize("name", ["Jo--hn", "-John", "J0hn", "John-"])
def test_names_reject_bad_characters(name: str) -> None:
    failure = rules.firstname(name)

    assert failure is not None
    assert failure.code is ErrorCode.INVALID_FORMAT


def test_email_requires_single_at_sign() -> None:
    failure = rules.email("not-an-email")

    assert failure is not None
    assert failure.code is ErrorCode.INVALID_FORMAT


def test_bio_rejects_markup() -> None:
    failure = rules.bio("hi <script>alert(1)</script>")

    assert failure is not None
    assert failure.code is ErrorCode.FORBIDDEN_CONTENT


def test_shortname_length_and_charset() -> None:
    assert rules.shortname("abc").code is ErrorCode.FIELD_TOO_SHORT
    assert rules.shortname("has space").code is ErrorCode.INVALID_FORMAT
    assert rules.shortname("g1-pub") is None


def test_confirmation_code_must_be_six_hex_characters() -> None:
    ok = ConfirmEmailCommand(user_id=uuid4(), code="a1B2c3")
    wrong_length = ConfirmEmailCommand(user_id=uuid4(), code="a1b2")
    not_hex = ConfirmEmailCommand(user_id=uuid4(), code="zzzzzz")

    assert users.validate_confirm_email(ok) == []
    assert users.validate_confirm_email(wrong_length)[0].code is ErrorCode.INVALID_FORMAT
    assert users.validate_confirm_email(not_hex)[0].code is ErrorCode.INVALID_FORMAT


def test_ids_are_required() -> None:
    command = CreateChatCommand(user_id=UUID(int=0), peer_id=uuid4())

    assert _codes(chats.validate_create_chat(command)) == {"UserId": ErrorCode.REQUIRED_FIELD}


def test_chat_with_self_is_rejected() -> None:
    user_id = uuid4()

    failures = chats.validate_create_chat(CreateChatCommand(user_id=user_id, peer_id=user_id))

    assert [failure.property_name for failure in failures] == ["PeerId"]


def test_private_group_ignores_shortname() -> None:
    private = CreateGroupCommand(user_id=uuid4(), name="g1", is_private=True, shortname="x")
    public = CreateGroupCommand(user_id=uuid4(), name="g1", is_private=False)

    assert chats.validate_create_group(private) == []
    assert _codes(chats.validate_create_group(public)) == {"Shortname": ErrorCode.REQUIRED_FIELD}


def test_update_group_requires_a_field() -> None:
    command = UpdateGroupCommand(user_id=uuid4(), chat_id=uuid4())

    assert _codes(chats.validate_update_group(command)) == {"Request": ErrorCode.REQUEST_EMPTY}


def test_update_user_requires_a_field() -> None:
    command = UpdateUserCommand(user_id=uuid4())

    assert _codes(users.validate_update_user(command)) == {"Request": ErrorCode.REQUEST_EMPTY}


def test_complete_account_checks_shortname_and_bio() -> None:
    command = CompleteAccountCommand(user_id=uuid4(), shortname="ab", bio="javascript:alert(1)")

    assert _codes(users.validate_complete_account(command)) == {
        "Shortname": ErrorCode.FIELD_TOO_SHORT,
        "Bio": ErrorCode.FORBIDDEN_CONTENT,
    }


def test_message_text_bounds() -> None:
    too_long = SendMessageCommand(user_id=uuid4(), chat_id=uuid4(), text="x" * 1025)
    blank = SendMessageCommand(user_id=uuid4(), chat_id=uuid4(), text="   ")

    assert messages.validate_send_message(too_long)[0].code is ErrorCode.FIELD_TOO_LONG
    assert messages.validate_send_message(blank)[0].code is ErrorCode.REQUIRED_FIELD


def test_paging_bounds() -> None:
    messages_query = GetMessagesQuery(user_id=uuid4(), chat_id=uuid4(), limit=101, offset=-1)
    members_query = GetGroupMembersQuery(
        user_id=uuid4(), chat_id=uuid4(), limit=201, search_term="x" * 101
    )

    assert _codes(messages.validate_get_messages(messages_query)) == {
        "Limit": ErrorCode.INVALID_RANGE,
        "Offset": ErrorCode.INVALID_RANGE,
    }
    assert _codes(chats.validate_get_group_members(members_query)) == {
        "Limit": ErrorCode.INVALID_RANGE,
        "SearchTerm": ErrorCode.FIELD_TOO_LONG,
    }
