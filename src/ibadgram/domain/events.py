"""Domain notifications published after a transaction commits."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class DomainEvent:
    occurred_at: datetime

    @property
    def name(self) -> str:
        return type(self).__name__


@dataclass(frozen=True, slots=True)
class ChatCreated(DomainEvent):
    user_id: UUID
    chat_id: UUID
    peer_id: UUID


@dataclass(frozen=True, slots=True)
class GroupCreated(DomainEvent):
    user_id: UUID
    chat_id: UUID
    is_private: bool


@dataclass(frozen=True, slots=True)
class GroupDeleted(DomainEvent):
    user_id: UUID
    chat_id: UUID


@dataclass(frozen=True, slots=True)
class MessageSent(DomainEvent):
    user_id: UUID
    chat_id: UUID
    message_id: int


@dataclass(frozen=True, slots=True)
class MessageUpdated(DomainEvent):
    user_id: UUID
    chat_id: UUID
    message_id: int


@dataclass(frozen=True, slots=True)
class AccountCreated(DomainEvent):
    user_id: UUID
    email: str


@dataclass(frozen=True, slots=True)
class UserLoggedIn(DomainEvent):
    user_id: UUID
    device_id: str | None = None


@dataclass(frozen=True, slots=True)
class UserLoggedOut(DomainEvent):
    user_id: UUID


__all__ = [
    "AccountCreated",
    "ChatCreated",
    "DomainEvent",
    "GroupCreated",
    "GroupDeleted",
    "MessageSent",
    "MessageUpdated",
    "UserLoggedIn",
    "UserLoggedOut",
]
