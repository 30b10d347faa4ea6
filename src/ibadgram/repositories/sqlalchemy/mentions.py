"""SQLAlchemy implementation of the :class:`MentionRepository`."""

from __future__ import annotations

from uuid import UUID

import sqlalchemy as sa

from ...db.models import Mention
from ...domain.enums import MentionOwner
from .base import SQLAlchemyRepository


class SQLAlchemyMentionRepository(SQLAlchemyRepository[Mention]):
    """Mentions share one shortname space regardless of owner kind."""

    model = Mention
    entity = "mention"

    async def get_by_shortname(self, shortname: str) -> Mention | None:
        return await self._first(sa.select(Mention).where(Mention.shortname == shortname))

    async def exists_by_shortname(self, shortname: str, *, exclude_id: UUID | None = None) -> bool:
        stmt = sa.select(sa.func.count()).select_from(Mention).where(Mention.shortname == shortname)
        if exclude_id is not None:
            stmt = stmt.where(Mention.id != exclude_id)
        return await self._scalar(stmt) > 0

    async def get_by_owner(self, owner_kind: MentionOwner, owner_id: UUID) -> Mention | None:
        stmt = sa.select(Mention).where(
            Mention.owner_kind == owner_kind, Mention.owner_id == owner_id
        )
        return await self._first(stmt)
