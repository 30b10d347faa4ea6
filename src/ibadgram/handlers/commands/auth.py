"""Session handlers: login, logout and refresh token rotation."""

from __future__ import annotations

from ...db.models import User, utcnow
from ...domain.enums import MentionOwner, UserStatus
from ...domain.errors import ErrorCode, Failure
from ...domain.events import UserLoggedIn, UserLoggedOut
from ...domain.results import Result
from ...infrastructure.unit_of_work import UnitOfWork
from ...schemas.commands import LoginCommand, LogoutCommand, RefreshTokenCommand
from ...schemas.views import TokenPair
from ...security.passwords import PasswordHasher
from ...security.tokens import TokenService
from ...services.notifications import NotificationBus
from ...validators import users as validators
from ..base import CommandT, Handler, ResultT, fail


class _TokenHandler(Handler[CommandT, ResultT]):
    def __init__(
        self,
        uow: UnitOfWork,
        *,
        token_service: TokenService,
        notifications: NotificationBus | None = None,
    ) -> None:
        super().__init__(uow, notifications=notifications)
        self._token_service = token_service

    async def _access_token(self, user: User) -> str:
        mention = await self.uow.mentions.get_by_owner(MentionOwner.USER, user.id)
        return self._token_service.generate_access_token(
            user, mention.shortname if mention else None
        )

    def _pair(self, access_token: str, refresh_token: str) -> TokenPair:
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=int(self._token_service.access_token_ttl.total_seconds()),
        )


class LoginHandler(_TokenHandler[LoginCommand, TokenPair]):
    """Exchange credentials for an access and refresh token pair.

    Unknown addresses and wrong passwords both report
    ``INVALID_CREDENTIALS``.
    """

    operation = "auth.login"

    def __init__(
        self,
        uow: UnitOfWork,
        *,
        password_hasher: PasswordHasher,
        token_service: TokenService,
        notifications: NotificationBus | None = None,
    ) -> None:
        super().__init__(uow, token_service=token_service, notifications=notifications)
        self._password_hasher = password_hasher

    def validate(self, command: LoginCommand) -> list[Failure]:
        return validators.validate_login(command)

    async def _execute(self, command: LoginCommand) -> Result[TokenPair]:
        user = await self.uow.users.get_by_email(command.email, include_deleted=True)
        if user is None or not self._password_hasher.verify_password(
            command.password, user.password_salt, user.password_hash
        ):
            return fail(ErrorCode.INVALID_CREDENTIALS, "Invalid email or password")
        if user.is_deleted:
            return fail(ErrorCode.USER_DELETED, "User account has been deleted")
        if not user.is_verified:
            return fail(
                ErrorCode.USER_NOT_VERIFIED,
                "User account is not verified",
                user_id=str(user.id),
            )

        access_token = await self._access_token(user)
        refresh_token = self._token_service.generate_refresh_token(
            user,
            access_token,
            user_agent=command.user_agent,
            device_id=command.device_id,
        )
        await self.uow.refresh_tokens.add(refresh_token)

        now = utcnow()
        user.status = UserStatus.ONLINE
        user.last_seen_at = now
        await self.uow.users.update(user)

        self.publish_after_commit(
            UserLoggedIn(occurred_at=now, user_id=user.id, device_id=command.device_id)
        )
        return Result.ok(self._pair(access_token, refresh_token.token))


class LogoutHandler(Handler[LogoutCommand, None]):
    operation = "auth.logout"

    def validate(self, command: LogoutCommand) -> list[Failure]:
        return validators.validate_logout(command)

    async def _execute(self, command: LogoutCommand) -> Result[None]:
        record = await self.uow.refresh_tokens.get_by_token(command.refresh_token)
        if record is None:
            return fail(ErrorCode.REFRESH_TOKEN_NOT_FOUND, "Refresh token not found")
        if record.is_revoked:
            return fail(ErrorCode.REFRESH_TOKEN_REVOKED, "Refresh token has been revoked")

        now = utcnow()
        await self.uow.refresh_tokens.revoke_token(command.refresh_token)
        user = await self.uow.users.get_by_id(record.user_id)
        if user is not None:
            user.status = UserStatus.OFFLINE
            user.last_seen_at = now
            await self.uow.users.update(user)

        self.publish_after_commit(UserLoggedOut(occurred_at=now, user_id=record.user_id))
        return Result.ok()


class RefreshTokenHandler(_TokenHandler[RefreshTokenCommand, TokenPair]):
    """Rotate a refresh token; the presented value stops working afterwards."""

    operation = "auth.refresh"

    def validate(self, command: RefreshTokenCommand) -> list[Failure]:
        return validators.validate_refresh_token(command)

    async def _execute(self, command: RefreshTokenCommand) -> Result[TokenPair]:
        record = await self.uow.refresh_tokens.get_by_token(command.refresh_token)
        if record is None:
            return fail(ErrorCode.REFRESH_TOKEN_NOT_FOUND, "Refresh token not found")
        user = await self.uow.users.get_by_id(record.user_id, include_deleted=True)
        if user is None:
            return fail(ErrorCode.USER_NOT_FOUND, "User not found", user_id=str(record.user_id))
        if user.is_deleted:
            return fail(ErrorCode.USER_DELETED, "User account has been deleted")
        if record.is_revoked:
            return fail(ErrorCode.REFRESH_TOKEN_REVOKED, "Refresh token has been revoked")
        if record.expires_at <= utcnow():
            return fail(ErrorCode.REFRESH_TOKEN_EXPIRED, "Refresh token has expired")

        access_token = await self._access_token(user)
        self._token_service.update_refresh_token(record, access_token)
        await self.uow.refresh_tokens.update(record)
        return Result.ok(self._pair(access_token, record.token))


__all__ = ["LoginHandler", "LogoutHandler", "RefreshTokenHandler"]
