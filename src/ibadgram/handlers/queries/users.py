"""User read models."""

from __future__ import annotations

from typing import Union

from ...domain.enums import MentionOwner
from ...domain.errors import ErrorCode, Failure
from ...domain.results import Result
from ...schemas.commands import GetUserMembershipsQuery, GetUserQuery
from ...schemas.views import DeletedUserView, MembershipView, UserView
from ...validators import users as validators
from ..base import QueryHandler, fail
from ..guards import load_user


class GetUserHandler(QueryHandler[GetUserQuery, Union[UserView, DeletedUserView]]):
    operation = "user.get"

    def validate(self, query: GetUserQuery) -> list[Failure]:
        return validators.validate_get_user(query)

    async def _execute(self, query: GetUserQuery) -> Result[Union[UserView, DeletedUserView]]:
        user = await self.uow.users.get_by_id(query.user_id, include_deleted=True)
        if user is None:
            return fail(ErrorCode.USER_NOT_FOUND, "User not found", user_id=str(query.user_id))
        if user.is_deleted:
            return Result.ok(DeletedUserView(user_id=user.id))

        mention = await self.uow.mentions.get_by_owner(MentionOwner.USER, user.id)
        return Result.ok(
            UserView(
                user_id=user.id,
                firstname=user.firstname,
                lastname=user.lastname,
                shortname=mention.shortname if mention else None,
                bio=user.bio,
                status=user.status,
                last_seen_at=user.last_seen_at,
            )
        )


class GetUserMembershipsHandler(QueryHandler[GetUserMembershipsQuery, list[MembershipView]]):
    """Active chats of a user, ordered by display name."""

    operation = "user.memberships.get"

    def validate(self, query: GetUserMembershipsQuery) -> list[Failure]:
        return validators.validate_get_user_memberships(query)

    async def _execute(self, query: GetUserMembershipsQuery) -> Result[list[MembershipView]]:
        user = await load_user(self.uow, query.user_id)
        if user.is_failure:
            return user.propagate()

        views: list[MembershipView] = []
        for membership in await self.uow.chat_members.get_by_user_id(query.user_id):
            chat = membership.chat
            if chat.is_deleted:
                continue
            last = await self.uow.messages.get_last_message(chat.id)
            views.append(
                MembershipView(
                    chat_id=chat.id,
                    type=chat.type,
                    name=chat.name or f"Chat {chat.id.hex}",
                    description=chat.description,
                    last_message_text=last.text if last else None,
                    last_message_at=last.created_at if last else None,
                )
            )
        views.sort(key=lambda view: view.name.casefold())
        return Result.ok(views)


__all__ = ["GetUserHandler", "GetUserMembershipsHandler"]
