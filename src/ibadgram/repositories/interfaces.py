"""Repository contracts composed by the unit of work.

Reads hide soft-deleted rows unless ``include_deleted=True`` is passed.
``add``/``update``/``delete`` only stage changes; nothing is written until
the owning unit of work saves or commits.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence
from uuid import UUID

from ..db.models import Chat, ChatMember, Mention, Message, RefreshToken, User
from ..domain.enums import ChatRole, MentionOwner


class UserRepository(Protocol):
    async def get_by_id(self, user_id: UUID, *, include_deleted: bool = False) -> User | None:
        """Return a user by identifier."""

    async def get_by_email(self, email: str, *, include_deleted: bool = False) -> User | None:
        """Return the user registered with ``email`` (case-insensitive)."""

    async def email_exists(self, email: str) -> bool:
        """Return ``True`` when a non-deleted user owns ``email``."""

    async def add(self, entity: User) -> User: ...

    async def update(self, entity: User) -> User: ...

    async def delete(self, entity: User) -> None:
        """Soft-delete the user."""


class ChatRepository(Protocol):
    async def get_by_id(self, chat_id: UUID, *, include_deleted: bool = False) -> Chat | None:
        """Return a chat by identifier."""

    async def find_one_to_one_chat(self, user_a: UUID, user_b: UUID) -> Chat | None:
        """Return the one-to-one chat between two users, in either order."""

    async def add(self, entity: Chat) -> Chat: ...

    async def update(self, entity: Chat) -> Chat: ...

    async def delete(self, entity: Chat) -> None:
        """Soft-delete the chat."""


class ChatMemberRepository(Protocol):
    async def get_by_ids(self, chat_id: UUID, user_id: UUID) -> ChatMember | None:
        """Return the membership of ``user_id`` in ``chat_id``."""

    async def get_by_chat_id(self, chat_id: UUID) -> Sequence[ChatMember]:
        """Return all memberships of a chat with their users loaded."""

    async def get_by_user_id(self, user_id: UUID) -> Sequence[ChatMember]:
        """Return all memberships of a user with their chats loaded."""

    async def count_by_chat_id(self, chat_id: UUID) -> int: ...

    async def search(
        self,
        chat_id: UUID,
        *,
        include_deleted_users: bool = False,
        role: ChatRole | None = None,
        search_term: str | None = None,
        offset: int = 0,
        limit: int = 50,
    ) -> tuple[list[ChatMember], int]:
        """Return one page of members and the total matching the filters."""

    async def add(self, entity: ChatMember) -> ChatMember: ...

    async def update(self, entity: ChatMember) -> ChatMember: ...

    async def delete(self, entity: ChatMember) -> None:
        """Remove the membership row."""


class MentionRepository(Protocol):
    async def get_by_id(self, mention_id: UUID, *, include_deleted: bool = False) -> Mention | None:
        """Return a mention by identifier."""

    async def get_by_shortname(self, shortname: str) -> Mention | None: ...

    async def exists_by_shortname(self, shortname: str, *, exclude_id: UUID | None = None) -> bool:
        """Return ``True`` when any mention other than ``exclude_id`` holds ``shortname``."""

    async def get_by_owner(self, owner_kind: MentionOwner, owner_id: UUID) -> Mention | None: ...

    async def add(self, entity: Mention) -> Mention: ...

    async def update(self, entity: Mention) -> Mention: ...

    async def delete(self, entity: Mention) -> None:
        """Hard-delete the mention, freeing its shortname."""


class MessageRepository(Protocol):
    async def get_by_composite_id(
        self, chat_id: UUID, message_id: int, *, include_deleted: bool = False
    ) -> Message | None: ...

    async def get_chat_messages(
        self, chat_id: UUID, limit: int, offset: int = 0
    ) -> list[Message]:
        """Return visible messages newest first with authors loaded."""

    async def get_next_message_id(self, chat_id: UUID) -> int:
        """Return the next per-chat sequence number."""

    async def get_chat_message_count(self, chat_id: UUID) -> int: ...

    async def get_last_message(self, chat_id: UUID) -> Message | None: ...

    async def add(self, entity: Message) -> Message: ...

    async def update(self, entity: Message) -> Message: ...

    async def delete(self, entity: Message) -> None:
        """Soft-delete the message."""


class RefreshTokenRepository(Protocol):
    async def get_by_id(
        self, token_id: UUID, *, include_deleted: bool = False
    ) -> RefreshToken | None: ...

    async def get_by_token(self, token: str) -> RefreshToken | None: ...

    async def get_active_user_tokens(
        self, user_id: UUID, now: datetime | None = None
    ) -> list[RefreshToken]: ...

    async def revoke_token(self, token: str) -> bool:
        """Revoke ``token``; return ``False`` when it does not exist."""

    async def revoke_all_user_tokens(self, user_id: UUID) -> int: ...

    async def cleanup_expired_tokens(self, now: datetime | None = None) -> int:
        """Delete expired or revoked tokens and return how many were removed."""

    async def count_expired_tokens(self, now: datetime | None = None) -> int: ...

    async def token_exists(self, token: str) -> bool: ...

    async def add(self, entity: RefreshToken) -> RefreshToken: ...

    async def update(self, entity: RefreshToken) -> RefreshToken: ...

    async def delete(self, entity: RefreshToken) -> None: ...


__all__ = [
    "ChatMemberRepository",
    "ChatRepository",
    "MentionRepository",
    "MessageRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
