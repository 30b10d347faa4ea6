"""Structural checks for chat and group commands."""

from __future__ import annotations

from ..domain import constants
from ..domain.errors import Failure
from ..schemas.commands import (
    CreateChatCommand,
    CreateGroupCommand,
    DeleteGroupCommand,
    GetChatQuery,
    GetGroupMembersQuery,
    MakePrivateGroupCommand,
    MakePublicGroupCommand,
    UpdateGroupCommand,
    UpdateGroupShortnameCommand,
)
from . import rules


def validate_create_chat(command: CreateChatCommand) -> list[Failure]:
    return rules.collect(
        rules.required_id("UserId", command.user_id),
        rules.required_id("PeerId", command.peer_id),
        rules.distinct_ids("PeerId", command.user_id, command.peer_id),
    )


def validate_create_group(command: CreateGroupCommand) -> list[Failure]:
    return rules.collect(
        rules.required_id("UserId", command.user_id),
        rules.chat_name(command.name),
        rules.chat_description(command.description),
        None if command.is_private else rules.shortname(command.shortname),
    )


def validate_delete_group(command: DeleteGroupCommand) -> list[Failure]:
    return rules.collect(
        rules.required_id("UserId", command.user_id),
        rules.required_id("ChatId", command.chat_id),
    )


def validate_update_group(command: UpdateGroupCommand) -> list[Failure]:
    return rules.collect(
        rules.required_id("UserId", command.user_id),
        rules.required_id("ChatId", command.chat_id),
        rules.any_provided(
            (command.name, command.description, command.is_private, command.shortname)
        ),
        None if command.name is None else rules.chat_name(command.name),
        rules.chat_description(command.description),
        None if command.shortname is None else rules.shortname(command.shortname),
    )


def validate_make_public_group(command: MakePublicGroupCommand) -> list[Failure]:
    return rules.collect(
        rules.required_id("UserId", command.user_id),
        rules.required_id("ChatId", command.chat_id),
        rules.shortname(command.shortname),
    )


def validate_make_private_group(command: MakePrivateGroupCommand) -> list[Failure]:
    return rules.collect(
        rules.required_id("UserId", command.user_id),
        rules.required_id("ChatId", command.chat_id),
    )


def validate_update_group_shortname(command: UpdateGroupShortnameCommand) -> list[Failure]:
    return rules.collect(
        rules.required_id("UserId", command.user_id),
        rules.required_id("ChatId", command.chat_id),
        rules.shortname(command.shortname),
    )


def validate_get_chat(query: GetChatQuery) -> list[Failure]:
    return rules.collect(
        rules.required_id("UserId", query.user_id),
        rules.required_id("ChatId", query.chat_id),
    )


def validate_get_group_members(query: GetGroupMembersQuery) -> list[Failure]:
    search = None
    if query.search_term:
        search = rules.length(
            "SearchTerm", query.search_term, max_length=constants.MEMBERS_SEARCH_MAX_LENGTH
        )
    return rules.collect(
        rules.required_id("UserId", query.user_id),
        rules.required_id("ChatId", query.chat_id),
        rules.in_range("Offset", query.offset, minimum=0),
        rules.in_range("Limit", query.limit, minimum=1, maximum=constants.MEMBERS_MAX_LIMIT),
        search,
    )
