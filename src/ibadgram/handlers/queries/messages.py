"""Message read models."""

from __future__ import annotations

from ...domain.errors import Failure
from ...domain.results import Result
from ...schemas.commands import GetMessagesQuery
from ...schemas.views import ChatInfo, MessagePage, MessageView, PaginationInfo
from ...validators import messages as validators
from ..base import QueryHandler
from ..guards import load_chat, load_member, load_user


class GetMessagesHandler(QueryHandler[GetMessagesQuery, MessagePage]):
    """Newest-first page of a chat's visible messages for one of its members."""

    operation = "messages.get"

    def validate(self, query: GetMessagesQuery) -> list[Failure]:
        return validators.validate_get_messages(query)

    async def _execute(self, query: GetMessagesQuery) -> Result[MessagePage]:
        user = await load_user(self.uow, query.user_id)
        if user.is_failure:
            return user.propagate()
        chat = await load_chat(self.uow, query.chat_id)
        if chat.is_failure:
            return chat.propagate()
        member = await load_member(self.uow, chat.unwrap(), user.unwrap())
        if member.is_failure:
            return member.propagate()

        total = await self.uow.messages.get_chat_message_count(query.chat_id)
        rows = await self.uow.messages.get_chat_messages(
            query.chat_id, query.limit + 1, query.offset
        )
        has_next = len(rows) > query.limit
        rows = rows[: query.limit]

        nicknames = {
            membership.user_id: membership.nickname
            for membership in await self.uow.chat_members.get_by_chat_id(query.chat_id)
        }
        messages = [
            MessageView(
                user_id=row.user_id,
                chat_id=row.chat_id,
                message_id=row.id,
                fullname=row.author.fullname,
                nickname=nicknames.get(row.user_id),
                text=row.text,
                is_edited=row.is_edited,
                timestamp=row.created_at,
            )
            for row in rows
        ]
        loaded_chat = chat.unwrap()
        return Result.ok(
            MessagePage(
                messages=messages,
                pagination=PaginationInfo(
                    offset=query.offset,
                    limit=query.limit,
                    total_count=total,
                    has_next_page=has_next,
                    next_cursor=query.offset + query.limit if has_next else None,
                ),
                chat_info=ChatInfo(
                    chat_id=loaded_chat.id,
                    chat_name=loaded_chat.name,
                    is_private=bool(loaded_chat.is_private),
                    user_role=member.unwrap().effective_role,
                ),
            )
        )


__all__ = ["GetMessagesHandler"]
