"""SQLAlchemy implementation of the :class:`ChatMemberRepository`."""

from __future__ import annotations

from typing import Sequence
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.orm import selectinload

from ...db.models import ChatMember, User
from ...domain.enums import ChatRole
from .base import SQLAlchemyRepository


class SQLAlchemyChatMemberRepository(SQLAlchemyRepository[ChatMember]):
    """Membership rows are hard-deleted; there is no revoked state."""

    model = ChatMember
    entity = "chat_member"

    async def get_by_ids(self, chat_id: UUID, user_id: UUID) -> ChatMember | None:
        return await self.get_by_id((chat_id, user_id))

    async def get_by_chat_id(self, chat_id: UUID) -> Sequence[ChatMember]:
        stmt = (
            sa.select(ChatMember)
            .where(ChatMember.chat_id == chat_id)
            .options(selectinload(ChatMember.user))
            .order_by(ChatMember.created_at)
        )
        return await self._all(stmt)

    async def get_by_user_id(self, user_id: UUID) -> Sequence[ChatMember]:
        stmt = (
            sa.select(ChatMember)
            .where(ChatMember.user_id == user_id)
            .options(selectinload(ChatMember.chat))
            .order_by(ChatMember.created_at)
        )
        return await self._all(stmt)

    async def count_by_chat_id(self, chat_id: UUID) -> int:
        stmt = sa.select(sa.func.count()).select_from(ChatMember).where(
            ChatMember.chat_id == chat_id
        )
        return await self._scalar(stmt)

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
        conditions: list[sa.ColumnElement[bool]] = [ChatMember.chat_id == chat_id]
        if not include_deleted_users:
            conditions.append(User.is_deleted.is_(False))
        if role is not None:
            if role is ChatRole.MEMBER:
                conditions.append(
                    sa.or_(ChatMember.role.is_(None), ChatMember.role == ChatRole.MEMBER)
                )
            else:
                conditions.append(ChatMember.role == role)
        if search_term and search_term.strip():
            pattern = f"%{search_term.strip().lower()}%"
            conditions.append(
                sa.or_(
                    sa.func.lower(User.firstname).like(pattern),
                    sa.func.lower(sa.func.coalesce(User.lastname, "")).like(pattern),
                    sa.func.lower(sa.func.coalesce(ChatMember.nickname, "")).like(pattern),
                )
            )

        privileged = sa.case(
            (ChatMember.role.in_([ChatRole.CREATOR, ChatRole.ADMIN]), 0),
            else_=1,
        )
        stmt = (
            sa.select(ChatMember)
            .join(User, User.id == ChatMember.user_id)
            .where(*conditions)
            .options(selectinload(ChatMember.user))
            .order_by(privileged, ChatMember.created_at)
            .offset(max(offset, 0))
            .limit(limit)
        )
        count_stmt = sa.select(sa.func.count()).select_from(
            sa.select(ChatMember.user_id)
            .join(User, User.id == ChatMember.user_id)
            .where(*conditions)
            .subquery()
        )

        total = await self._scalar(count_stmt)
        members = await self._all(stmt)
        return members, total
