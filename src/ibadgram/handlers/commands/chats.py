"""Chat and group command handlers."""

from __future__ import annotations

from uuid import UUID, uuid4

from ...db.models import Chat, ChatMember, Mention, User, utcnow
from ...domain.constants import CREATOR_NICKNAME
from ...domain.enums import ChatRole, ChatType, MentionOwner
from ...domain.errors import ErrorCode, Failure, validation_error
from ...domain.events import ChatCreated, GroupCreated, GroupDeleted
from ...domain.results import Result
from ...infrastructure.unit_of_work import UnitOfWork
from ...schemas.commands import (
    CreateChatCommand,
    CreateGroupCommand,
    DeleteGroupCommand,
    MakePrivateGroupCommand,
    MakePublicGroupCommand,
    UpdateGroupCommand,
    UpdateGroupShortnameCommand,
)
from ...schemas.views import ChangedFields
from ...validators import chats as validators
from ..base import Handler, fail
from ..guards import load_chat, load_member, load_user


async def _load_owned_group(
    uow: UnitOfWork, user_id: UUID, chat_id: UUID
) -> Result[tuple[User, Chat]]:
    """Load a live group together with its creator, in guard order."""

    user = await load_user(uow, user_id)
    if user.is_failure:
        return user.propagate()
    chat = await load_chat(uow, chat_id, expected_type=ChatType.GROUP)
    if chat.is_failure:
        return chat.propagate()
    member = await load_member(uow, chat.unwrap(), user.unwrap(), required_role=ChatRole.CREATOR)
    if member.is_failure:
        return member.propagate()
    return Result.ok((user.unwrap(), chat.unwrap()))


async def _claim_shortname(
    uow: UnitOfWork, shortname: str, *, exclude_id: UUID | None = None
) -> Result[None]:
    if await uow.mentions.exists_by_shortname(shortname, exclude_id=exclude_id):
        return fail(
            ErrorCode.USERNAME_ALREADY_TAKEN,
            f"Shortname '{shortname}' is already taken",
            shortname=shortname,
        )
    return Result.ok()


class CreateChatHandler(Handler[CreateChatCommand, UUID]):
    """Open the one-to-one chat of two verified users."""

    operation = "chat.create"
    conflict_code = ErrorCode.CHAT_ALREADY_EXISTS

    def validate(self, command: CreateChatCommand) -> list[Failure]:
        return validators.validate_create_chat(command)

    async def _execute(self, command: CreateChatCommand) -> Result[UUID]:
        user = await load_user(self.uow, command.user_id)
        if user.is_failure:
            return user.propagate()
        peer = await load_user(self.uow, command.peer_id)
        if peer.is_failure:
            return peer.propagate()

        existing = await self.uow.chats.find_one_to_one_chat(command.user_id, command.peer_id)
        if existing is not None:
            return fail(
                ErrorCode.CHAT_ALREADY_EXISTS,
                "A chat between these users already exists",
                chat_id=str(existing.id),
            )

        now = utcnow()
        chat = Chat(
            id=uuid4(),
            type=ChatType.ONE_TO_ONE,
            direct_key=Chat.direct_key_for(command.user_id, command.peer_id),
            created_at=now,
        )
        await self.uow.chats.add(chat)
        for member_id in (command.user_id, command.peer_id):
            await self.uow.chat_members.add(
                ChatMember(chat_id=chat.id, user_id=member_id, created_at=now)
            )

        self.publish_after_commit(
            ChatCreated(
                occurred_at=now,
                user_id=command.user_id,
                chat_id=chat.id,
                peer_id=command.peer_id,
            )
        )
        return Result.ok(chat.id)


class CreateGroupHandler(Handler[CreateGroupCommand, UUID]):
    operation = "group.create"
    conflict_code = ErrorCode.USERNAME_ALREADY_TAKEN

    def validate(self, command: CreateGroupCommand) -> list[Failure]:
        return validators.validate_create_group(command)

    async def _execute(self, command: CreateGroupCommand) -> Result[UUID]:
        user = await load_user(self.uow, command.user_id)
        if user.is_failure:
            return user.propagate()

        shortname = None if command.is_private else command.shortname
        if shortname is not None:
            claimed = await _claim_shortname(self.uow, shortname)
            if claimed.is_failure:
                return claimed.propagate()

        now = utcnow()
        chat = Chat(
            id=uuid4(),
            type=ChatType.GROUP,
            name=command.name.strip(),
            description=(command.description or "").strip() or None,
            is_private=command.is_private,
            created_at=now,
        )
        await self.uow.chats.add(chat)
        await self.uow.chat_members.add(
            ChatMember(
                chat_id=chat.id,
                user_id=command.user_id,
                role=ChatRole.CREATOR,
                nickname=CREATOR_NICKNAME,
                created_at=now,
            )
        )
        if shortname is not None:
            await self.uow.mentions.add(
                Mention(shortname=shortname, owner_kind=MentionOwner.CHAT, owner_id=chat.id)
            )

        self.publish_after_commit(
            GroupCreated(
                occurred_at=now,
                user_id=command.user_id,
                chat_id=chat.id,
                is_private=command.is_private,
            )
        )
        return Result.ok(chat.id)


class DeleteGroupHandler(Handler[DeleteGroupCommand, None]):
    operation = "group.delete"

    def validate(self, command: DeleteGroupCommand) -> list[Failure]:
        return validators.validate_delete_group(command)

    async def _execute(self, command: DeleteGroupCommand) -> Result[None]:
        user = await load_user(self.uow, command.user_id)
        if user.is_failure:
            return user.propagate()
        loaded = await load_chat(self.uow, command.chat_id)
        if loaded.is_failure:
            return loaded.propagate()
        chat = loaded.unwrap()
        if chat.type is ChatType.PERSONAL:
            return fail(
                ErrorCode.CHAT_ACCESS_DENIED,
                "Personal chats cannot be deleted",
                chat_id=str(chat.id),
            )
        if chat.type is not ChatType.GROUP:
            return fail(
                ErrorCode.CHAT_TYPE_MISMATCH,
                "Only group chats can be deleted",
                chat_id=str(chat.id),
                chat_type=chat.type.value,
            )
        member = await load_member(self.uow, chat, user.unwrap(), required_role=ChatRole.CREATOR)
        if member.is_failure:
            return member.propagate()

        mention = await self.uow.mentions.get_by_owner(MentionOwner.CHAT, chat.id)
        if mention is not None:
            await self.uow.mentions.delete(mention)
        await self.uow.chats.delete(chat)

        self.publish_after_commit(
            GroupDeleted(occurred_at=utcnow(), user_id=command.user_id, chat_id=chat.id)
        )
        return Result.ok()


class UpdateGroupHandler(Handler[UpdateGroupCommand, tuple[str, ...]]):
    """Partial group update; returns the names of the fields that changed."""

    operation = "group.update"
    conflict_code = ErrorCode.USERNAME_ALREADY_TAKEN

    def validate(self, command: UpdateGroupCommand) -> list[Failure]:
        return validators.validate_update_group(command)

    async def _execute(self, command: UpdateGroupCommand) -> Result[tuple[str, ...]]:
        loaded = await _load_owned_group(self.uow, command.user_id, command.chat_id)
        if loaded.is_failure:
            return loaded.propagate()
        _, chat = loaded.unwrap()

        changed = ChangedFields()
        if command.name is not None:
            name = command.name.strip()
            if changed.track("name", chat.name, name):
                chat.name = name
        if command.description is not None:
            description = command.description.strip() or None
            if changed.track("description", chat.description, description):
                chat.description = description

        is_private = chat.is_private if command.is_private is None else command.is_private
        mention = await self.uow.mentions.get_by_owner(MentionOwner.CHAT, chat.id)
        if is_private:
            if mention is not None:
                await self.uow.mentions.delete(mention)
        elif mention is None:
            if not command.shortname:
                return Result.fail(
                    validation_error(
                        ErrorCode.REQUIRED_FIELD,
                        "Shortname is required for a public group",
                        property_name="Shortname",
                    )
                )
            claimed = await _claim_shortname(self.uow, command.shortname)
            if claimed.is_failure:
                return claimed.propagate()
            await self.uow.mentions.add(
                Mention(shortname=command.shortname, owner_kind=MentionOwner.CHAT, owner_id=chat.id)
            )
            changed.track("shortname", None, command.shortname)
        elif command.shortname and command.shortname != mention.shortname:
            claimed = await _claim_shortname(self.uow, command.shortname, exclude_id=mention.id)
            if claimed.is_failure:
                return claimed.propagate()
            changed.track("shortname", mention.shortname, command.shortname)
            mention.shortname = command.shortname
            await self.uow.mentions.update(mention)

        if changed.track("is_private", chat.is_private, is_private):
            chat.is_private = is_private
        if not changed.names:
            return fail(ErrorCode.NO_CHANGES_DETECTED, "No changes detected", chat_id=str(chat.id))

        await self.uow.chats.update(chat)
        return Result.ok(tuple(changed.names))


class MakePublicGroupHandler(Handler[MakePublicGroupCommand, None]):
    operation = "group.make_public"
    conflict_code = ErrorCode.USERNAME_ALREADY_TAKEN

    def validate(self, command: MakePublicGroupCommand) -> list[Failure]:
        return validators.validate_make_public_group(command)

    async def _execute(self, command: MakePublicGroupCommand) -> Result[None]:
        loaded = await _load_owned_group(self.uow, command.user_id, command.chat_id)
        if loaded.is_failure:
            return loaded.propagate()
        _, chat = loaded.unwrap()
        if not chat.is_private:
            return fail(ErrorCode.GROUP_ALREADY_PUBLIC, "Group is already public", chat_id=str(chat.id))

        mention = await self.uow.mentions.get_by_owner(MentionOwner.CHAT, chat.id)
        claimed = await _claim_shortname(
            self.uow, command.shortname, exclude_id=mention.id if mention else None
        )
        if claimed.is_failure:
            return claimed.propagate()

        if mention is None:
            await self.uow.mentions.add(
                Mention(shortname=command.shortname, owner_kind=MentionOwner.CHAT, owner_id=chat.id)
            )
        else:
            mention.shortname = command.shortname
            await self.uow.mentions.update(mention)
        chat.is_private = False
        await self.uow.chats.update(chat)
        return Result.ok()


class MakePrivateGroupHandler(Handler[MakePrivateGroupCommand, None]):
    operation = "group.make_private"

    def validate(self, command: MakePrivateGroupCommand) -> list[Failure]:
        return validators.validate_make_private_group(command)

    async def _execute(self, command: MakePrivateGroupCommand) -> Result[None]:
        loaded = await _load_owned_group(self.uow, command.user_id, command.chat_id)
        if loaded.is_failure:
            return loaded.propagate()
        _, chat = loaded.unwrap()
        if chat.is_private:
            return fail(ErrorCode.GROUP_ALREADY_PRIVATE, "Group is already private", chat_id=str(chat.id))

        mention = await self.uow.mentions.get_by_owner(MentionOwner.CHAT, chat.id)
        if mention is not None:
            await self.uow.mentions.delete(mention)
        chat.is_private = True
        await self.uow.chats.update(chat)
        return Result.ok()


class UpdateGroupShortnameHandler(Handler[UpdateGroupShortnameCommand, None]):
    operation = "group.update_shortname"
    conflict_code = ErrorCode.USERNAME_ALREADY_TAKEN

    def validate(self, command: UpdateGroupShortnameCommand) -> list[Failure]:
        return validators.validate_update_group_shortname(command)

    async def _execute(self, command: UpdateGroupShortnameCommand) -> Result[None]:
        loaded = await _load_owned_group(self.uow, command.user_id, command.chat_id)
        if loaded.is_failure:
            return loaded.propagate()
        _, chat = loaded.unwrap()
        if chat.is_private:
            return fail(
                ErrorCode.GROUP_IS_PRIVATE,
                "Private groups have no shortname",
                chat_id=str(chat.id),
            )

        mention = await self.uow.mentions.get_by_owner(MentionOwner.CHAT, chat.id)
        if mention is not None and mention.shortname == command.shortname:
            return fail(
                ErrorCode.USERNAME_UNCHANGED,
                "New shortname matches the current one",
                shortname=command.shortname,
            )
        claimed = await _claim_shortname(
            self.uow, command.shortname, exclude_id=mention.id if mention else None
        )
        if claimed.is_failure:
            return claimed.propagate()

        if mention is None:
            await self.uow.mentions.add(
                Mention(shortname=command.shortname, owner_kind=MentionOwner.CHAT, owner_id=chat.id)
            )
        else:
            mention.shortname = command.shortname
            await self.uow.mentions.update(mention)
        await self.uow.chats.update(chat)
        return Result.ok()


__all__ = [
    "CreateChatHandler",
    "CreateGroupHandler",
    "DeleteGroupHandler",
    "MakePrivateGroupHandler",
    "MakePublicGroupHandler",
    "UpdateGroupHandler",
    "UpdateGroupShortnameHandler",
]
