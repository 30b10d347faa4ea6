"""Command and query records accepted by the handlers."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from ..domain.constants import MEMBERS_DEFAULT_LIMIT, MESSAGES_DEFAULT_LIMIT
from ..domain.enums import ChatRole


# chats


@dataclass(frozen=True, slots=True)
class CreateChatCommand:
    """Open a one-to-one chat between ``user_id`` and ``peer_id``."""

    user_id: UUID
    peer_id: UUID


@dataclass(frozen=True, slots=True)
class CreateGroupCommand:
    user_id: UUID
    name: str
    description: str | None = None
    is_private: bool = True
    shortname: str | None = None


@dataclass(frozen=True, slots=True)
class DeleteGroupCommand:
    user_id: UUID
    chat_id: UUID


@dataclass(frozen=True, slots=True)
class UpdateGroupCommand:
    """Partial update; ``None`` leaves a field unchanged."""

    user_id: UUID
    chat_id: UUID
    name: str | None = None
    description: str | None = None
    is_private: bool | None = None
    shortname: str | None = None


@dataclass(frozen=True, slots=True)
class MakePublicGroupCommand:
    user_id: UUID
    chat_id: UUID
    shortname: str


@dataclass(frozen=True, slots=True)
class MakePrivateGroupCommand:
    user_id: UUID
    chat_id: UUID


@dataclass(frozen=True, slots=True)
class UpdateGroupShortnameCommand:
    user_id: UUID
    chat_id: UUID
    shortname: str


# messages


@dataclass(frozen=True, slots=True)
class SendMessageCommand:
    user_id: UUID
    chat_id: UUID
    text: str


@dataclass(frozen=True, slots=True)
class UpdateMessageCommand:
    user_id: UUID
    chat_id: UUID
    message_id: int
    text: str


@dataclass(frozen=True, slots=True)
class DeleteMessageCommand:
    user_id: UUID
    chat_id: UUID
    message_id: int


# users and sessions


@dataclass(frozen=True, slots=True)
class CreateAccountCommand:
    firstname: str
    email: str
    password: str
    lastname: str | None = None


@dataclass(frozen=True, slots=True)
class ConfirmEmailCommand:
    user_id: UUID
    code: str


@dataclass(frozen=True, slots=True)
class UpdateConfirmEmailTokenCommand:
    email: str


@dataclass(frozen=True, slots=True)
class CompleteAccountCommand:
    user_id: UUID
    shortname: str
    bio: str | None = None


@dataclass(frozen=True, slots=True)
class LoginCommand:
    email: str
    password: str
    user_agent: str | None = None
    device_id: str | None = None


@dataclass(frozen=True, slots=True)
class LogoutCommand:
    refresh_token: str


@dataclass(frozen=True, slots=True)
class RefreshTokenCommand:
    refresh_token: str


@dataclass(frozen=True, slots=True)
class UpdateShortnameCommand:
    user_id: UUID
    shortname: str


@dataclass(frozen=True, slots=True)
class UpdateUserCommand:
    user_id: UUID
    firstname: str | None = None
    lastname: str | None = None
    bio: str | None = None


@dataclass(frozen=True, slots=True)
class DeleteAccountCommand:
    user_id: UUID


# queries


@dataclass(frozen=True, slots=True)
class GetMessagesQuery:
    user_id: UUID
    chat_id: UUID
    limit: int = MESSAGES_DEFAULT_LIMIT
    offset: int = 0


@dataclass(frozen=True, slots=True)
class GetGroupMembersQuery:
    user_id: UUID
    chat_id: UUID
    offset: int = 0
    limit: int = MEMBERS_DEFAULT_LIMIT
    search_term: str | None = None
    role_filter: ChatRole | None = None
    include_deleted: bool = False


@dataclass(frozen=True, slots=True)
class GetUserMembershipsQuery:
    user_id: UUID


@dataclass(frozen=True, slots=True)
class GetChatQuery:
    user_id: UUID
    chat_id: UUID


@dataclass(frozen=True, slots=True)
class GetUserQuery:
    user_id: UUID
