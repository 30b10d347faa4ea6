"""Account lifecycle and profile command handlers."""

from __future__ import annotations

import secrets
from datetime import timedelta
from uuid import UUID, uuid4

from ...db.models import Chat, ChatMember, Mention, User, utcnow
from ...domain.constants import EMAIL_CONFIRMATION_TOKEN_LENGTH, EMAIL_CONFIRMATION_TOKEN_TTL
from ...domain.enums import ChatType, MentionOwner
from ...domain.errors import ErrorCode, Failure
from ...domain.events import AccountCreated
from ...domain.results import Result
from ...infrastructure.unit_of_work import UnitOfWork
from ...schemas.commands import (
    CompleteAccountCommand,
    ConfirmEmailCommand,
    CreateAccountCommand,
    DeleteAccountCommand,
    UpdateConfirmEmailTokenCommand,
    UpdateShortnameCommand,
    UpdateUserCommand,
)
from ...schemas.views import ChangedFields, ConfirmEmailView, UpdateUserView
from ...security.passwords import PasswordHasher
from ...security.tokens import TokenService
from ...services.email import EmailSender, confirmation_email
from ...services.notifications import NotificationBus
from ...validators import users as validators
from ..base import Handler, fail
from ..guards import load_user


def generate_confirmation_token() -> str:
    """Return a fresh email confirmation code of hex characters."""

    return secrets.token_hex(EMAIL_CONFIRMATION_TOKEN_LENGTH // 2)


def _optional(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


class CreateAccountHandler(Handler[CreateAccountCommand, UUID]):
    """Register an account and email it a confirmation code.

    An address already held by a live account is refused with a code that
    tells the client which registration step that account is stuck at.
    """

    operation = "account.create"
    conflict_code = ErrorCode.EMAIL_ALREADY_USED

    def __init__(
        self,
        uow: UnitOfWork,
        *,
        password_hasher: PasswordHasher,
        email_sender: EmailSender | None = None,
        notifications: NotificationBus | None = None,
        confirmation_ttl: timedelta = EMAIL_CONFIRMATION_TOKEN_TTL,
    ) -> None:
        super().__init__(uow, notifications=notifications, email_sender=email_sender)
        self._password_hasher = password_hasher
        self._confirmation_ttl = confirmation_ttl

    def validate(self, command: CreateAccountCommand) -> list[Failure]:
        return validators.validate_create_account(command)

    async def _execute(self, command: CreateAccountCommand) -> Result[UUID]:
        email = command.email.strip().lower()
        existing = await self.uow.users.get_by_email(email)
        if existing is not None:
            if existing.is_verified:
                return fail(ErrorCode.EMAIL_ALREADY_USED, "Email is already in use", email=email)
            if existing.email_confirmed:
                return fail(
                    ErrorCode.EMAIL_ALREADY_CONFIRMED,
                    "Email is confirmed; finish the account registration",
                    email=email,
                    user_id=str(existing.id),
                )
            return fail(
                ErrorCode.EMAIL_AWAITING_CONFIRMATION,
                "Email is awaiting confirmation",
                email=email,
                user_id=str(existing.id),
            )

        now = utcnow()
        salt = self._password_hasher.generate_salt()
        token = generate_confirmation_token()
        user = User(
            id=uuid4(),
            firstname=command.firstname.strip(),
            lastname=_optional(command.lastname),
            email=email,
            password_salt=salt,
            password_hash=self._password_hasher.hash_password(command.password, salt),
            email_confirmation_token=token,
            email_confirmation_token_expires_at=now + self._confirmation_ttl,
            created_at=now,
        )
        await self.uow.users.add(user)

        self.send_after_commit(email, *confirmation_email(token))
        self.publish_after_commit(AccountCreated(occurred_at=now, user_id=user.id, email=email))
        return Result.ok(user.id)


class ConfirmEmailHandler(Handler[ConfirmEmailCommand, ConfirmEmailView]):
    operation = "account.confirm_email"

    def __init__(
        self,
        uow: UnitOfWork,
        *,
        token_service: TokenService,
        notifications: NotificationBus | None = None,
    ) -> None:
        super().__init__(uow, notifications=notifications)
        self._token_service = token_service

    def validate(self, command: ConfirmEmailCommand) -> list[Failure]:
        return validators.validate_confirm_email(command)

    async def _execute(self, command: ConfirmEmailCommand) -> Result[ConfirmEmailView]:
        loaded = await load_user(self.uow, command.user_id, require_verified=False)
        if loaded.is_failure:
            return loaded.propagate()
        user = loaded.unwrap()
        if user.email_confirmed:
            return fail(ErrorCode.EMAIL_ALREADY_CONFIRMED, "Email is already confirmed")
        if not user.email_confirmation_token:
            return fail(
                ErrorCode.CONFIRMATION_TOKEN_NOT_FOUND,
                "No confirmation code was issued; request a new one",
            )
        expires_at = user.email_confirmation_token_expires_at
        if expires_at is None or expires_at <= utcnow():
            return fail(ErrorCode.CONFIRMATION_CODE_EXPIRED, "Confirmation code has expired")
        if user.email_confirmation_token.lower() != command.code.strip().lower():
            return fail(ErrorCode.INVALID_CONFIRMATION_CODE, "Confirmation code is invalid")

        user.email_confirmed = True
        user.email_confirmation_token = None
        user.email_confirmation_token_expires_at = None
        await self.uow.users.update(user)

        return Result.ok(
            ConfirmEmailView(
                temporary_access_token=self._token_service.generate_temporary_access_token(user)
            )
        )


class UpdateConfirmEmailTokenHandler(Handler[UpdateConfirmEmailTokenCommand, None]):
    """Issue a new confirmation code and send it again."""

    operation = "account.resend_confirmation"

    def __init__(
        self,
        uow: UnitOfWork,
        *,
        email_sender: EmailSender | None = None,
        notifications: NotificationBus | None = None,
        confirmation_ttl: timedelta = EMAIL_CONFIRMATION_TOKEN_TTL,
    ) -> None:
        super().__init__(uow, notifications=notifications, email_sender=email_sender)
        self._confirmation_ttl = confirmation_ttl

    def validate(self, command: UpdateConfirmEmailTokenCommand) -> list[Failure]:
        return validators.validate_update_confirm_email_token(command)

    async def _execute(self, command: UpdateConfirmEmailTokenCommand) -> Result[None]:
        user = await self.uow.users.get_by_email(command.email)
        if user is None:
            return fail(ErrorCode.USER_NOT_FOUND, "User not found", email=command.email)
        if user.email_confirmed:
            return fail(ErrorCode.EMAIL_ALREADY_CONFIRMED, "Email is already confirmed")

        token = generate_confirmation_token()
        user.email_confirmation_token = token
        user.email_confirmation_token_expires_at = utcnow() + self._confirmation_ttl
        await self.uow.users.update(user)

        self.send_after_commit(user.email, *confirmation_email(token))
        return Result.ok()


class CompleteAccountHandler(Handler[CompleteAccountCommand, UUID]):
    """Finish registration: claim the shortname and open the personal chat.

    Returns the id of the personal chat.
    """

    operation = "account.complete"
    conflict_code = ErrorCode.USERNAME_ALREADY_TAKEN

    def validate(self, command: CompleteAccountCommand) -> list[Failure]:
        return validators.validate_complete_account(command)

    async def _execute(self, command: CompleteAccountCommand) -> Result[UUID]:
        loaded = await load_user(self.uow, command.user_id, require_verified=False)
        if loaded.is_failure:
            return loaded.propagate()
        user = loaded.unwrap()
        if not user.email_confirmed:
            return fail(ErrorCode.EMAIL_NOT_CONFIRMED, "Email is not confirmed")
        if user.is_verified:
            return fail(ErrorCode.ACCOUNT_ALREADY_COMPLETED, "Account is already completed")
        if await self.uow.mentions.exists_by_shortname(command.shortname):
            return fail(
                ErrorCode.USERNAME_ALREADY_TAKEN,
                f"Shortname '{command.shortname}' is already taken",
                shortname=command.shortname,
            )

        now = utcnow()
        user.bio = _optional(command.bio)
        user.is_verified = True
        await self.uow.users.update(user)
        await self.uow.mentions.add(
            Mention(shortname=command.shortname, owner_kind=MentionOwner.USER, owner_id=user.id)
        )
        chat = Chat(id=uuid4(), type=ChatType.PERSONAL, created_at=now)
        await self.uow.chats.add(chat)
        await self.uow.chat_members.add(ChatMember(chat_id=chat.id, user_id=user.id, created_at=now))
        return Result.ok(chat.id)


class UpdateShortnameHandler(Handler[UpdateShortnameCommand, None]):
    operation = "user.update_shortname"
    conflict_code = ErrorCode.USERNAME_ALREADY_TAKEN

    def validate(self, command: UpdateShortnameCommand) -> list[Failure]:
        return validators.validate_update_shortname(command)

    async def _execute(self, command: UpdateShortnameCommand) -> Result[None]:
        loaded = await load_user(self.uow, command.user_id)
        if loaded.is_failure:
            return loaded.propagate()
        user = loaded.unwrap()

        mention = await self.uow.mentions.get_by_owner(MentionOwner.USER, user.id)
        if mention is not None and mention.shortname == command.shortname:
            return fail(
                ErrorCode.USERNAME_UNCHANGED,
                "New shortname matches the current one",
                shortname=command.shortname,
            )
        if await self.uow.mentions.exists_by_shortname(
            command.shortname, exclude_id=mention.id if mention else None
        ):
            return fail(
                ErrorCode.USERNAME_ALREADY_TAKEN,
                f"Shortname '{command.shortname}' is already taken",
                shortname=command.shortname,
            )

        if mention is None:
            await self.uow.mentions.add(
                Mention(shortname=command.shortname, owner_kind=MentionOwner.USER, owner_id=user.id)
            )
        else:
            mention.shortname = command.shortname
            await self.uow.mentions.update(mention)
        await self.uow.users.update(user)
        return Result.ok()


class UpdateUserHandler(Handler[UpdateUserCommand, UpdateUserView]):
    operation = "user.update"

    def validate(self, command: UpdateUserCommand) -> list[Failure]:
        return validators.validate_update_user(command)

    async def _execute(self, command: UpdateUserCommand) -> Result[UpdateUserView]:
        loaded = await load_user(self.uow, command.user_id)
        if loaded.is_failure:
            return loaded.propagate()
        user = loaded.unwrap()

        changed = ChangedFields()
        if command.firstname is not None:
            firstname = command.firstname.strip()
            if firstname and changed.track("firstname", user.firstname, firstname):
                user.firstname = firstname
        if command.lastname is not None:
            lastname = _optional(command.lastname)
            if changed.track("lastname", user.lastname, lastname):
                user.lastname = lastname
        if command.bio is not None:
            bio = _optional(command.bio)
            if changed.track("bio", user.bio, bio):
                user.bio = bio
        if not changed.names:
            return fail(ErrorCode.NO_CHANGES_DETECTED, "No changes detected", user_id=str(user.id))

        await self.uow.users.update(user)
        return Result.ok(
            UpdateUserView(
                user_id=user.id,
                firstname=user.firstname,
                lastname=user.lastname,
                bio=user.bio,
                updated_at=user.updated_at or utcnow(),
                changed_fields=tuple(changed.names),
            )
        )


class DeleteAccountHandler(Handler[DeleteAccountCommand, None]):
    """Soft-delete the account, free its shortname and end every session."""

    operation = "account.delete"

    def validate(self, command: DeleteAccountCommand) -> list[Failure]:
        return validators.validate_delete_account(command)

    async def _execute(self, command: DeleteAccountCommand) -> Result[None]:
        loaded = await load_user(self.uow, command.user_id, require_verified=False)
        if loaded.is_failure:
            return loaded.propagate()
        user = loaded.unwrap()

        mention = await self.uow.mentions.get_by_owner(MentionOwner.USER, user.id)
        if mention is not None:
            await self.uow.mentions.delete(mention)
        await self.uow.users.delete(user)
        await self.uow.refresh_tokens.revoke_all_user_tokens(user.id)
        return Result.ok()


__all__ = [
    "CompleteAccountHandler",
    "ConfirmEmailHandler",
    "CreateAccountHandler",
    "DeleteAccountHandler",
    "UpdateConfirmEmailTokenHandler",
    "UpdateShortnameHandler",
    "UpdateUserHandler",
    "generate_confirmation_token",
]
