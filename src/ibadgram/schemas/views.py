"""Success payloads returned by the handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Union
from uuid import UUID

from ..domain.enums import ChatRole, ChatType, UserStatus


@dataclass(slots=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int


@dataclass(slots=True)
class ConfirmEmailView:
    temporary_access_token: str


@dataclass(slots=True)
class UpdateUserView:
    user_id: UUID
    firstname: str
    lastname: str | None
    bio: str | None
    updated_at: datetime
    changed_fields: tuple[str, ...] = ()


@dataclass(slots=True)
class MessageView:
    user_id: UUID
    chat_id: UUID
    message_id: int
    fullname: str
    nickname: str | None
    text: str
    is_edited: bool
    timestamp: datetime


@dataclass(slots=True)
class PaginationInfo:
    offset: int
    limit: int
    total_count: int
    has_next_page: bool
    next_cursor: int | None = None


@dataclass(slots=True)
class ChatInfo:
    chat_id: UUID
    chat_name: str | None
    is_private: bool
    user_role: ChatRole | None


@dataclass(slots=True)
class MessagePage:
    messages: list[MessageView]
    pagination: PaginationInfo
    chat_info: ChatInfo


@dataclass(slots=True)
class MemberView:
    user_id: UUID
    firstname: str
    lastname: str | None
    role: ChatRole
    nickname: str | None
    is_online: bool
    last_seen: datetime | None
    is_deleted: bool
    joined_at: datetime


@dataclass(slots=True)
class MemberPage:
    members: list[MemberView]
    total_count: int
    offset: int
    limit: int


@dataclass(slots=True)
class MembershipView:
    chat_id: UUID
    type: ChatType
    name: str
    description: str | None = None
    last_message_text: str | None = None
    last_message_at: datetime | None = None


@dataclass(slots=True)
class DeletedChatView:
    chat_id: UUID
    is_deleted: bool = True


@dataclass(slots=True)
class PersonalChatView:
    chat_id: UUID
    message_count: int


@dataclass(slots=True)
class OneToOneChatView:
    chat_id: UUID
    peer_id: UUID
    firstname: str
    lastname: str | None
    shortname: str | None
    bio: str | None = None


@dataclass(slots=True)
class GroupChatView:
    chat_id: UUID
    name: str | None
    description: str | None
    shortname: str | None
    member_count: int
    is_private: bool


ChatView = Union[DeletedChatView, PersonalChatView, OneToOneChatView, GroupChatView]


@dataclass(slots=True)
class UserView:
    user_id: UUID
    firstname: str
    lastname: str | None
    shortname: str | None
    bio: str | None
    status: UserStatus
    last_seen_at: datetime | None
    is_deleted: bool = False


@dataclass(slots=True)
class DeletedUserView:
    user_id: UUID
    is_deleted: bool = True


@dataclass(slots=True)
class ChangedFields:
    """Names of the profile fields an update actually touched."""

    names: list[str] = field(default_factory=list)

    def track(self, name: str, old: object, new: object) -> bool:
        if old == new:
            return False
        self.names.append(name)
        return True
