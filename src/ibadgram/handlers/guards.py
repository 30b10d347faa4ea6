"""Aggregate loaders shared by handlers.

Each guard loads one aggregate and turns a missing, deleted or otherwise
unusable record into a typed failure, so handlers can check them in the
fixed user, chat, membership order and stop at the first problem.
"""

from __future__ import annotations

from uuid import UUID

from ..db.models import Chat, ChatMember, User
from ..domain.enums import ChatRole, ChatType
from ..domain.errors import ErrorCode
from ..domain.results import Result
from ..infrastructure.unit_of_work import UnitOfWork
from .base import fail

_PRIVILEGED = (ChatRole.CREATOR, ChatRole.ADMIN)


async def load_user(
    uow: UnitOfWork, user_id: UUID, *, require_verified: bool = True
) -> Result[User]:
    user = await uow.users.get_by_id(user_id, include_deleted=True)
    if user is None:
        return fail(ErrorCode.USER_NOT_FOUND, "User not found", user_id=str(user_id))
    if user.is_deleted:
        return fail(ErrorCode.USER_DELETED, "User account has been deleted", user_id=str(user_id))
    if require_verified and not user.is_verified:
        return fail(
            ErrorCode.USER_NOT_VERIFIED,
            "User account is not verified",
            user_id=str(user_id),
        )
    return Result.ok(user)


async def load_chat(
    uow: UnitOfWork, chat_id: UUID, *, expected_type: ChatType | None = None
) -> Result[Chat]:
    chat = await uow.chats.get_by_id(chat_id, include_deleted=True)
    if chat is None:
        return fail(ErrorCode.CHAT_NOT_FOUND, "Chat not found", chat_id=str(chat_id))
    if chat.is_deleted:
        return fail(ErrorCode.CHAT_DELETED, "Chat has been deleted", chat_id=str(chat_id))
    if expected_type is not None and chat.type is not expected_type:
        return fail(
            ErrorCode.CHAT_TYPE_MISMATCH,
            f"Operation requires a {expected_type.value} chat",
            chat_id=str(chat_id),
            chat_type=chat.type.value,
        )
    return Result.ok(chat)


async def load_member(
    uow: UnitOfWork,
    chat: Chat,
    user: User,
    *,
    required_role: ChatRole | None = None,
) -> Result[ChatMember]:
    """Load the caller's membership; ``required_role`` narrows who passes.

    ``ChatRole.ADMIN`` admits admins and the creator; ``ChatRole.CREATOR``
    admits only the creator.
    """

    member = await uow.chat_members.get_by_ids(chat.id, user.id)
    if member is None:
        return fail(
            ErrorCode.CHAT_ACCESS_DENIED,
            "User is not a member of this chat",
            chat_id=str(chat.id),
            user_id=str(user.id),
        )
    if required_role is not None and not has_role(member, required_role):
        return fail(
            ErrorCode.INSUFFICIENT_PERMISSIONS,
            f"Operation requires the {required_role.value} role",
            chat_id=str(chat.id),
            user_id=str(user.id),
            role=member.effective_role.value,
        )
    return Result.ok(member)


def has_role(member: ChatMember, required_role: ChatRole) -> bool:
    role = member.effective_role
    if required_role is ChatRole.CREATOR:
        return role is ChatRole.CREATOR
    if required_role is ChatRole.ADMIN:
        return role in _PRIVILEGED
    return True


__all__ = ["has_role", "load_chat", "load_member", "load_user"]
