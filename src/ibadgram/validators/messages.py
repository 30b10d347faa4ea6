"""Structural checks for message commands and queries."""

from __future__ import annotations

from ..domain import constants
from ..domain.errors import Failure
from ..schemas.commands import (
    DeleteMessageCommand,
    GetMessagesQuery,
    SendMessageCommand,
    UpdateMessageCommand,
)
from . import rules


def validate_send_message(command: SendMessageCommand) -> list[Failure]:
    return rules.collect(
        rules.required_id("UserId", command.user_id),
        rules.required_id("ChatId", command.chat_id),
        rules.message_text(command.text),
    )


def validate_update_message(command: UpdateMessageCommand) -> list[Failure]:
    return rules.collect(
        rules.required_id("UserId", command.user_id),
        rules.required_id("ChatId", command.chat_id),
        rules.in_range("MessageId", command.message_id, minimum=1),
        rules.message_text(command.text),
    )


def validate_delete_message(command: DeleteMessageCommand) -> list[Failure]:
    return rules.collect(
        rules.required_id("UserId", command.user_id),
        rules.required_id("ChatId", command.chat_id),
        rules.in_range("MessageId", command.message_id, minimum=1),
    )


def validate_get_messages(query: GetMessagesQuery) -> list[Failure]:
    return rules.collect(
        rules.required_id("UserId", query.user_id),
        rules.required_id("ChatId", query.chat_id),
        rules.in_range("Limit", query.limit, minimum=1, maximum=constants.MESSAGES_MAX_LIMIT),
        rules.in_range("Offset", query.offset, minimum=0),
    )
