"""SQLAlchemy implementation of the :class:`RefreshTokenRepository`."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

import sqlalchemy as sa

from ...db.models import RefreshToken, utcnow
from .base import SQLAlchemyRepository


class SQLAlchemyRefreshTokenRepository(SQLAlchemyRepository[RefreshToken]):
    model = RefreshToken
    entity = "refresh_token"

    async def get_by_token(self, token: str) -> RefreshToken | None:
        return await self._first(sa.select(RefreshToken).where(RefreshToken.token == token))

    async def get_active_user_tokens(
        self, user_id: UUID, now: datetime | None = None
    ) -> list[RefreshToken]:
        stmt = (
            sa.select(RefreshToken)
            .where(
                RefreshToken.user_id == user_id,
                RefreshToken.is_revoked.is_(False),
                RefreshToken.expires_at > (now or utcnow()),
            )
            .order_by(RefreshToken.created_at.desc())
        )
        return await self._all(stmt)

    async def revoke_token(self, token: str) -> bool:
        record = await self.get_by_token(token)
        if record is None:
            return False
        if not record.is_revoked:
            record.is_revoked = True
            record.revoked_at = utcnow()
            self._session.add(record)
        return True

    async def revoke_all_user_tokens(self, user_id: UUID) -> int:
        stmt = (
            sa.update(RefreshToken)
            .where(RefreshToken.user_id == user_id, RefreshToken.is_revoked.is_(False))
            .values(is_revoked=True, revoked_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(stmt)
        return result.rowcount or 0

    @staticmethod
    def _expired(now: datetime | None) -> sa.ColumnElement[bool]:
        return sa.or_(
            RefreshToken.expires_at <= (now or utcnow()),
            RefreshToken.is_revoked.is_(True),
        )

    async def count_expired_tokens(self, now: datetime | None = None) -> int:
        stmt = sa.select(sa.func.count()).select_from(RefreshToken).where(self._expired(now))
        return await self._scalar(stmt)

    async def cleanup_expired_tokens(self, now: datetime | None = None) -> int:
        stmt = (
            sa.delete(RefreshToken)
            .where(self._expired(now))
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(stmt)
        return result.rowcount or 0

    async def token_exists(self, token: str) -> bool:
        stmt = sa.select(sa.func.count()).select_from(RefreshToken).where(
            RefreshToken.token == token
        )
        return await self._scalar(stmt) > 0
