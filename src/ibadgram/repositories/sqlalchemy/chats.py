"""SQLAlchemy implementation of the :class:`ChatRepository`."""

from __future__ import annotations

from uuid import UUID

import sqlalchemy as sa

from ...db.models import Chat
from ...domain.enums import ChatType
from .base import SQLAlchemyRepository


class SQLAlchemyChatRepository(SQLAlchemyRepository[Chat]):
    model = Chat
    entity = "chat"
    soft_delete = True
    tracks_updates = True

    async def find_one_to_one_chat(self, user_a: UUID, user_b: UUID) -> Chat | None:
        stmt = self._visible(
            sa.select(Chat).where(
                Chat.type == ChatType.ONE_TO_ONE,
                Chat.direct_key == Chat.direct_key_for(user_a, user_b),
            )
        )
        return await self._first(stmt)
