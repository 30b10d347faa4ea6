"""SQLAlchemy implementation of the :class:`UserRepository`."""

from __future__ import annotations

import sqlalchemy as sa

from ...db.models import User
from .base import SQLAlchemyRepository


class SQLAlchemyUserRepository(SQLAlchemyRepository[User]):
    model = User
    entity = "user"
    soft_delete = True
    tracks_updates = True

    async def get_by_email(self, email: str, *, include_deleted: bool = False) -> User | None:
        stmt = self._visible(
            sa.select(User).where(sa.func.lower(User.email) == email.strip().lower()),
            include_deleted=include_deleted,
        )
        # a deleted account may share the address with a live one
        stmt = stmt.order_by(User.is_deleted.asc(), User.created_at.desc())
        return await self._first(stmt)

    async def email_exists(self, email: str) -> bool:
        stmt = self._visible(
            sa.select(sa.func.count())
            .select_from(User)
            .where(sa.func.lower(User.email) == email.strip().lower())
        )
        return await self._scalar(stmt) > 0
