"""Chat read models: single chat views and group member listings."""

from __future__ import annotations

from ...db.models import Chat, User
from ...domain.enums import ChatType, MentionOwner, UserStatus
from ...domain.errors import ErrorCode, Failure
from ...domain.results import Result
from ...schemas.commands import GetChatQuery, GetGroupMembersQuery
from ...schemas.views import (
    ChatView,
    DeletedChatView,
    GroupChatView,
    MemberPage,
    MemberView,
    OneToOneChatView,
    PersonalChatView,
)
from ...validators import chats as validators
from ..base import QueryHandler, fail
from ..guards import load_chat, load_member, load_user


class GetGroupMembersHandler(QueryHandler[GetGroupMembersQuery, MemberPage]):
    operation = "group.members.get"

    def validate(self, query: GetGroupMembersQuery) -> list[Failure]:
        return validators.validate_get_group_members(query)

    async def _execute(self, query: GetGroupMembersQuery) -> Result[MemberPage]:
        user = await load_user(self.uow, query.user_id)
        if user.is_failure:
            return user.propagate()
        chat = await load_chat(self.uow, query.chat_id, expected_type=ChatType.GROUP)
        if chat.is_failure:
            return chat.propagate()
        member = await load_member(self.uow, chat.unwrap(), user.unwrap())
        if member.is_failure:
            return member.propagate()

        rows, total = await self.uow.chat_members.search(
            query.chat_id,
            include_deleted_users=query.include_deleted,
            role=query.role_filter,
            search_term=query.search_term,
            offset=query.offset,
            limit=query.limit,
        )
        members = [
            MemberView(
                user_id=row.user_id,
                firstname=row.user.firstname,
                lastname=row.user.lastname,
                role=row.effective_role,
                nickname=row.nickname,
                is_online=row.user.status is UserStatus.ONLINE,
                last_seen=row.user.last_seen_at,
                is_deleted=row.user.is_deleted,
                joined_at=row.created_at,
            )
            for row in rows
        ]
        return Result.ok(
            MemberPage(members=members, total_count=total, offset=query.offset, limit=query.limit)
        )


class GetChatHandler(QueryHandler[GetChatQuery, ChatView]):
    """Describe one chat from the caller's point of view.

    Deleted chats, and one-to-one chats whose other participant is deleted,
    come back as :class:`DeletedChatView`. Public groups can be viewed by
    anyone; every other chat requires membership.
    """

    operation = "chat.get"

    def validate(self, query: GetChatQuery) -> list[Failure]:
        return validators.validate_get_chat(query)

    async def _execute(self, query: GetChatQuery) -> Result[ChatView]:
        loaded = await load_user(self.uow, query.user_id)
        if loaded.is_failure:
            return loaded.propagate()
        user = loaded.unwrap()

        chat = await self.uow.chats.get_by_id(query.chat_id, include_deleted=True)
        if chat is None:
            return fail(ErrorCode.CHAT_NOT_FOUND, "Chat not found", chat_id=str(query.chat_id))
        if chat.is_deleted:
            return Result.ok(DeletedChatView(chat_id=chat.id))

        public_group = chat.type is ChatType.GROUP and not chat.is_private
        if not public_group:
            member = await load_member(self.uow, chat, user)
            if member.is_failure:
                return member.propagate()

        if chat.type is ChatType.PERSONAL:
            count = await self.uow.messages.get_chat_message_count(chat.id)
            return Result.ok(PersonalChatView(chat_id=chat.id, message_count=count))
        if chat.type is ChatType.ONE_TO_ONE:
            return await self._one_to_one(chat, user)
        return await self._group(chat)

    async def _one_to_one(self, chat: Chat, user: User) -> Result[ChatView]:
        memberships = await self.uow.chat_members.get_by_chat_id(chat.id)
        peer = next((m.user for m in memberships if m.user_id != user.id), None)
        if peer is None or peer.is_deleted:
            return Result.ok(DeletedChatView(chat_id=chat.id))
        mention = await self.uow.mentions.get_by_owner(MentionOwner.USER, peer.id)
        return Result.ok(
            OneToOneChatView(
                chat_id=chat.id,
                peer_id=peer.id,
                firstname=peer.firstname,
                lastname=peer.lastname,
                shortname=mention.shortname if mention else None,
                bio=peer.bio,
            )
        )

    async def _group(self, chat: Chat) -> Result[ChatView]:
        mention = await self.uow.mentions.get_by_owner(MentionOwner.CHAT, chat.id)
        return Result.ok(
            GroupChatView(
                chat_id=chat.id,
                name=chat.name,
                description=chat.description,
                shortname=mention.shortname if mention else None,
                member_count=await self.uow.chat_members.count_by_chat_id(chat.id),
                is_private=bool(chat.is_private),
            )
        )


__all__ = ["GetChatHandler", "GetGroupMembersHandler"]
