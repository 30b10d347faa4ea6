"""Shared plumbing for the async SQLAlchemy repositories."""

from __future__ import annotations

from typing import Any, ClassVar, Generic, TypeVar

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from ...db.models import Base, utcnow
from ...exceptions import handle_sqlalchemy_errors

ModelT = TypeVar("ModelT", bound=Base)


class SQLAlchemyRepository(Generic[ModelT]):
    """Async repository bound to the session of one unit of work.

    Subclasses declare ``soft_delete = True`` when the model carries an
    ``is_deleted`` flag; reads then hide flagged rows and ``delete`` flips the
    flag instead of removing the row. ``tracks_updates`` stamps
    ``updated_at`` on every staged update.
    """

    model: ClassVar[type[Any]]
    entity: ClassVar[str]
    soft_delete: ClassVar[bool] = False
    tracks_updates: ClassVar[bool] = False

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def _visible(self, stmt: sa.Select[Any], *, include_deleted: bool = False) -> sa.Select[Any]:
        if self.soft_delete and not include_deleted:
            return stmt.where(self.model.is_deleted.is_(False))
        return stmt

    async def _first(self, stmt: sa.Select[Any]) -> Any | None:
        with handle_sqlalchemy_errors(entity=self.entity):
            result = await self._session.execute(stmt)
        return result.scalars().first()

    async def _all(self, stmt: sa.Select[Any]) -> list[Any]:
        with handle_sqlalchemy_errors(entity=self.entity):
            result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def _scalar(self, stmt: sa.Select[Any]) -> Any:
        with handle_sqlalchemy_errors(entity=self.entity):
            return (await self._session.execute(stmt)).scalar_one()

    async def _execute(self, stmt: sa.Executable) -> sa.Result[Any]:
        with handle_sqlalchemy_errors(entity=self.entity):
            return await self._session.execute(stmt)

    async def get_by_id(self, identity: Any, *, include_deleted: bool = False) -> ModelT | None:
        with handle_sqlalchemy_errors(entity=self.entity):
            record = await self._session.get(self.model, identity)
        if record is None:
            return None
        if self.soft_delete and not include_deleted and record.is_deleted:
            return None
        return record

    async def add(self, entity: ModelT) -> ModelT:
        self._session.add(entity)
        return entity

    async def update(self, entity: ModelT) -> ModelT:
        if self.tracks_updates:
            entity.updated_at = utcnow()
        self._session.add(entity)
        return entity

    async def delete(self, entity: ModelT) -> None:
        if self.soft_delete:
            entity.is_deleted = True
            entity.updated_at = utcnow()
            self._session.add(entity)
            return
        with handle_sqlalchemy_errors(entity=self.entity):
            await self._session.delete(entity)
