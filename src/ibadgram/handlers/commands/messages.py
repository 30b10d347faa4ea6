"""Message command handlers."""

from __future__ import annotations

from ...db.models import Chat, ChatMember, Message, utcnow
from ...domain.enums import ChatRole, ChatType
from ...domain.errors import ErrorCode, Failure
from ...domain.events import MessageSent, MessageUpdated
from ...domain.results import Result
from ...infrastructure.unit_of_work import UnitOfWork
from ...schemas.commands import DeleteMessageCommand, SendMessageCommand, UpdateMessageCommand
from ...schemas.views import MessageView
from ...validators import messages as validators
from ..base import Handler, fail
from ..guards import has_role, load_chat, load_member, load_user


class SendMessageHandler(Handler[SendMessageCommand, MessageView]):
    """Append a message to a chat the caller belongs to.

    Message ids are allocated per chat as ``max(id) + 1``; two writers racing
    for the same id collide on the primary key and the loser gets a
    ``CONFLICT`` failure.
    """

    operation = "message.send"

    def validate(self, command: SendMessageCommand) -> list[Failure]:
        return validators.validate_send_message(command)

    async def _execute(self, command: SendMessageCommand) -> Result[MessageView]:
        user = await load_user(self.uow, command.user_id)
        if user.is_failure:
            return user.propagate()
        chat = await load_chat(self.uow, command.chat_id)
        if chat.is_failure:
            return chat.propagate()
        member = await load_member(self.uow, chat.unwrap(), user.unwrap())
        if member.is_failure:
            return member.propagate()

        now = utcnow()
        message = Message(
            chat_id=command.chat_id,
            id=await self.uow.messages.get_next_message_id(command.chat_id),
            user_id=command.user_id,
            text=command.text,
            created_at=now,
        )
        await self.uow.messages.add(message)

        self.publish_after_commit(
            MessageSent(
                occurred_at=now,
                user_id=command.user_id,
                chat_id=command.chat_id,
                message_id=message.id,
            )
        )
        return Result.ok(
            MessageView(
                user_id=command.user_id,
                chat_id=command.chat_id,
                message_id=message.id,
                fullname=user.unwrap().fullname,
                nickname=member.unwrap().nickname,
                text=message.text,
                is_edited=False,
                timestamp=now,
            )
        )


async def _load_own_message(
    uow: UnitOfWork, command: UpdateMessageCommand | DeleteMessageCommand
) -> Result[tuple[Chat, ChatMember, Message]]:
    """Run the shared user, chat, membership and message checks."""

    user = await load_user(uow, command.user_id)
    if user.is_failure:
        return user.propagate()
    chat = await load_chat(uow, command.chat_id)
    if chat.is_failure:
        return chat.propagate()
    member = await load_member(uow, chat.unwrap(), user.unwrap())
    if member.is_failure:
        return member.propagate()

    message = await uow.messages.get_by_composite_id(
        command.chat_id, command.message_id, include_deleted=True
    )
    if message is None:
        return fail(
            ErrorCode.MESSAGE_NOT_FOUND,
            "Message not found",
            chat_id=str(command.chat_id),
            message_id=command.message_id,
        )
    if message.is_deleted:
        return fail(
            ErrorCode.MESSAGE_DELETED,
            "Message has been deleted",
            chat_id=str(command.chat_id),
            message_id=command.message_id,
        )
    return Result.ok((chat.unwrap(), member.unwrap(), message))


class UpdateMessageHandler(Handler[UpdateMessageCommand, None]):
    operation = "message.update"

    def validate(self, command: UpdateMessageCommand) -> list[Failure]:
        return validators.validate_update_message(command)

    async def _execute(self, command: UpdateMessageCommand) -> Result[None]:
        loaded = await _load_own_message(self.uow, command)
        if loaded.is_failure:
            return loaded.propagate()
        _, _, message = loaded.unwrap()
        if message.user_id != command.user_id:
            return fail(
                ErrorCode.NOT_MESSAGE_AUTHOR,
                "Only the author can edit a message",
                message_id=command.message_id,
            )

        message.text = command.text
        await self.uow.messages.update(message)

        self.publish_after_commit(
            MessageUpdated(
                occurred_at=utcnow(),
                user_id=command.user_id,
                chat_id=command.chat_id,
                message_id=command.message_id,
            )
        )
        return Result.ok()


class DeleteMessageHandler(Handler[DeleteMessageCommand, None]):
    """Soft-delete a message; group admins may delete anyone's message."""

    operation = "message.delete"

    def validate(self, command: DeleteMessageCommand) -> list[Failure]:
        return validators.validate_delete_message(command)

    async def _execute(self, command: DeleteMessageCommand) -> Result[None]:
        loaded = await _load_own_message(self.uow, command)
        if loaded.is_failure:
            return loaded.propagate()
        chat, member, message = loaded.unwrap()

        moderator = chat.type is ChatType.GROUP and has_role(member, ChatRole.ADMIN)
        if message.user_id != command.user_id and not moderator:
            return fail(
                ErrorCode.NOT_MESSAGE_AUTHOR,
                "Only the author or a group admin can delete a message",
                message_id=command.message_id,
            )

        await self.uow.messages.delete(message)
        return Result.ok()


__all__ = ["DeleteMessageHandler", "SendMessageHandler", "UpdateMessageHandler"]
