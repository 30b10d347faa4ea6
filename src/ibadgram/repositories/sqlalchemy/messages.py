"""SQLAlchemy implementation of the :class:`MessageRepository`."""

from __future__ import annotations

from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.orm import selectinload

from ...db.models import Message
from ...domain.constants import MESSAGES_MAX_LIMIT
from .base import SQLAlchemyRepository


class SQLAlchemyMessageRepository(SQLAlchemyRepository[Message]):
    model = Message
    entity = "message"
    soft_delete = True
    tracks_updates = True

    async def get_by_composite_id(
        self, chat_id: UUID, message_id: int, *, include_deleted: bool = False
    ) -> Message | None:
        return await self.get_by_id((chat_id, message_id), include_deleted=include_deleted)

    async def get_chat_messages(
        self, chat_id: UUID, limit: int, offset: int = 0
    ) -> list[Message]:
        # one row past the page maximum lets callers detect a following page
        limit = min(max(limit, 1), MESSAGES_MAX_LIMIT + 1)
        offset = max(offset, 0)
        stmt = (
            self._visible(sa.select(Message).where(Message.chat_id == chat_id))
            .options(selectinload(Message.author))
            .order_by(Message.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return await self._all(stmt)

    async def get_next_message_id(self, chat_id: UUID) -> int:
        # deleted messages keep their ids
        stmt = sa.select(sa.func.coalesce(sa.func.max(Message.id), 0)).where(
            Message.chat_id == chat_id
        )
        return int(await self._scalar(stmt)) + 1

    async def get_chat_message_count(self, chat_id: UUID) -> int:
        stmt = self._visible(
            sa.select(sa.func.count()).select_from(Message).where(Message.chat_id == chat_id)
        )
        return await self._scalar(stmt)

    async def get_last_message(self, chat_id: UUID) -> Message | None:
        stmt = (
            self._visible(sa.select(Message).where(Message.chat_id == chat_id))
            .order_by(Message.id.desc())
            .limit(1)
        )
        return await self._first(stmt)
