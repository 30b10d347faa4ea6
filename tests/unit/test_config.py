from __future__ import annotations

from datetime import timedelta

import pytest

from ibadgram.config import Settings, load_config
from ibadgram.db.session import async_database_url
from ibadgram.handlers.commands import CreateAccountHandler, LoginHandler, UpdateConfirmEmailTokenHandler
from ibadgram.infrastructure.unit_of_work import SQLAlchemyUnitOfWork
from ibadgram.services.email import HttpEmailSender, LoggingEmailSender

pytestmark = pytest.mark.unit


def test_settings_read_prefixed_environment(monkeypatch) -> None:
    monkeypatch.setenv("IBADGRAM_ACCESS_TOKEN_TTL_MINUTES", "30")
    monkeypatch.setenv("IBADGRAM_EMAIL_CONFIRMATION_TTL_MINUTES", "10")
    monkeypatch.setenv("IBADGRAM_LOG_LEVEL", "DEBUG")

    settings = Settings()

    assert settings.access_token_ttl_minutes == 30
    assert settings.email_confirmation_ttl_minutes == 10
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("postgresql://u:p@db:5432/app", "postgresql+psycopg://u:p@db:5432/app"),
        ("sqlite:///./local.db", "sqlite+aiosqlite:///./local.db"),
        ("sqlite+aiosqlite:///./local.db", "sqlite+aiosqlite:///./local.db"),
    ],
)
def test_async_database_url(raw: str, expected: str) -> None:
    assert async_database_url(raw) == expected


async def test_load_config_builds_services() -> None:
    settings = Settings(
        database_url="sqlite:///:memory:",
        jwt_signing_key="configured-signing-key-0123456789abcdef0123456789abcdef",
        refresh_token_ttl_days=7,
        email_confirmation_ttl_minutes=3,
    )

    config = load_config(settings)
    try:
        assert isinstance(config.email_sender, LoggingEmailSender)
        assert config.token_service.refresh_token_ttl == timedelta(days=7)
        assert config.email_confirmation_ttl == timedelta(minutes=3)
        assert config.password_hasher.iterations == settings.password_hash_iterations
        assert isinstance(config.unit_of_work(), SQLAlchemyUnitOfWork)
        assert config.unit_of_work() is not config.unit_of_work()
    finally:
        await config.engine.dispose()


async def test_load_config_uses_http_sender_when_configured() -> None:
    settings = Settings(
        database_url="sqlite:///:memory:",
        email_api_url="https://mail.test/send",
        email_api_key="key",
    )

    config = load_config(settings)
    try:
        assert isinstance(config.email_sender, HttpEmailSender)
        assert config.email_sender.api_url == "https://mail.test/send"
    finally:
        await config.engine.dispose()


async def test_handler_factory_injects_configured_services() -> None:
    settings = Settings(
        database_url="sqlite:///:memory:",
        jwt_signing_key="configured-signing-key-0123456789abcdef0123456789abcdef",
        email_confirmation_ttl_minutes=3,
    )

    config = load_config(settings)
    uow = config.unit_of_work()
    try:
        register = config.handler(CreateAccountHandler, uow)
        resend = config.handler(UpdateConfirmEmailTokenHandler, uow)
        login = config.handler(LoginHandler, uow)

        assert register.uow is uow
        assert register._confirmation_ttl == timedelta(minutes=3)
        assert register._password_hasher is config.password_hasher
        assert register._email_sender is config.email_sender
        assert resend._confirmation_ttl == timedelta(minutes=3)
        assert login._token_service is config.token_service
        assert login._notifications is config.notifications
    finally:
        await uow.dispose()
        await config.engine.dispose()
