"""Structural checks for account, session and profile commands."""

from __future__ import annotations

from ..domain.errors import Failure
from ..schemas.commands import (
    CompleteAccountCommand,
    ConfirmEmailCommand,
    CreateAccountCommand,
    DeleteAccountCommand,
    GetUserMembershipsQuery,
    GetUserQuery,
    LoginCommand,
    LogoutCommand,
    RefreshTokenCommand,
    UpdateConfirmEmailTokenCommand,
    UpdateShortnameCommand,
    UpdateUserCommand,
)
from . import rules


def validate_create_account(command: CreateAccountCommand) -> list[Failure]:
    return rules.collect(
        rules.firstname(command.firstname),
        rules.lastname(command.lastname),
        rules.email(command.email),
        rules.password(command.password),
    )


def validate_confirm_email(command: ConfirmEmailCommand) -> list[Failure]:
    return rules.collect(
        rules.required_id("UserId", command.user_id),
        rules.confirmation_code(command.code),
    )


def validate_update_confirm_email_token(command: UpdateConfirmEmailTokenCommand) -> list[Failure]:
    return rules.collect(rules.email(command.email))


def validate_complete_account(command: CompleteAccountCommand) -> list[Failure]:
    return rules.collect(
        rules.required_id("UserId", command.user_id),
        rules.shortname(command.shortname),
        rules.bio(command.bio),
    )


def validate_login(command: LoginCommand) -> list[Failure]:
    return rules.collect(
        rules.required_text("Email", command.email),
        rules.password(command.password),
    )


def validate_logout(command: LogoutCommand) -> list[Failure]:
    return rules.collect(rules.required_text("RefreshToken", command.refresh_token))


def validate_refresh_token(command: RefreshTokenCommand) -> list[Failure]:
    return rules.collect(rules.required_text("RefreshToken", command.refresh_token))


def validate_update_shortname(command: UpdateShortnameCommand) -> list[Failure]:
    return rules.collect(
        rules.required_id("UserId", command.user_id),
        rules.shortname(command.shortname),
    )


def validate_update_user(command: UpdateUserCommand) -> list[Failure]:
    return rules.collect(
        rules.required_id("UserId", command.user_id),
        rules.firstname(command.firstname, required=False),
        rules.lastname(command.lastname),
        rules.bio(command.bio),
        rules.any_provided((command.firstname, command.lastname, command.bio)),
    )


def validate_delete_account(command: DeleteAccountCommand) -> list[Failure]:
    return rules.collect(rules.required_id("UserId", command.user_id))


def validate_get_user(query: GetUserQuery) -> list[Failure]:
    return rules.collect(rules.required_id("UserId", query.user_id))


def validate_get_user_memberships(query: GetUserMembershipsQuery) -> list[Failure]:
    return rules.collect(rules.required_id("UserId", query.user_id))

