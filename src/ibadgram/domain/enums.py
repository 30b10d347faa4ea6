"""Enumerations shared by entities, repositories and handlers."""

from __future__ import annotations

from enum import Enum


class ChatType(str, Enum):
    PERSONAL = "personal"
    ONE_TO_ONE = "one_to_one"
    GROUP = "group"


class ChatRole(str, Enum):
    CREATOR = "creator"
    ADMIN = "admin"
    MEMBER = "member"


class MentionOwner(str, Enum):
    """Kind of entity a shortname is bound to."""

    USER = "user"
    CHAT = "chat"


class UserStatus(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class IsolationLevel(str, Enum):
    """Transaction isolation levels accepted by the unit of work."""

    READ_UNCOMMITTED = "READ UNCOMMITTED"
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SERIALIZABLE = "SERIALIZABLE"


__all__ = ["ChatRole", "ChatType", "IsolationLevel", "MentionOwner", "UserStatus"]
