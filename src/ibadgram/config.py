"""Application configuration builder.

Settings come from ``IBADGRAM_*`` environment variables (and an optional
``.env``). :func:`load_config` turns them into live objects: the async
engine, the session factory and the services handlers depend on.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, TypeVar

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from .db.session import create_engine, create_session_factory
from .handlers.base import Handler
from .infrastructure.unit_of_work import SQLAlchemyUnitOfWork, UnitOfWork
from .security.passwords import DEFAULT_ITERATIONS, PasswordHasher
from .security.tokens import TokenService
from .services.email import EmailSender, HttpEmailSender, LoggingEmailSender
from .services.notifications import LocalNotificationBus

HandlerT = TypeVar("HandlerT", bound=Handler[Any, Any])


class Settings(BaseSettings):
    """Pydantic settings container for the messaging core."""

    model_config = SettingsConfigDict(env_prefix="IBADGRAM_", env_file=".env", extra="ignore")

    database_url: str = Field(
        default="postgresql+psycopg://localhost:5432/ibadgram",
        description="SQLAlchemy URL of the primary relational store.",
    )
    database_echo: bool = False
    jwt_signing_key: str = Field(default="change-me", min_length=1)
    jwt_issuer: str = "ibadgram"
    jwt_audience: str = "ibadgram-clients"
    access_token_ttl_minutes: int = Field(default=15, ge=1)
    refresh_token_ttl_days: int = Field(default=3, ge=1)
    email_confirmation_ttl_minutes: int = Field(default=5, ge=1)
    password_hash_iterations: int = Field(default=DEFAULT_ITERATIONS, ge=1_000)
    email_api_url: str | None = Field(
        default=None,
        description="Mail API endpoint; emails are only logged when unset.",
    )
    email_api_key: str = ""
    email_sender: str = "no-reply@ibadgram.local"
    log_level: str = "INFO"


@dataclass(slots=True)
class AppConfig:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    password_hasher: PasswordHasher
    token_service: TokenService
    email_sender: EmailSender
    notifications: LocalNotificationBus
    email_confirmation_ttl: timedelta = timedelta(minutes=5)

    def unit_of_work(self) -> SQLAlchemyUnitOfWork:
        """Return a fresh unit of work; one per request."""

        return SQLAlchemyUnitOfWork(self.session_factory)

    def handler(self, handler_cls: type[HandlerT], uow: UnitOfWork) -> HandlerT:
        """Build ``handler_cls`` over ``uow`` with the configured services it accepts."""

        services: dict[str, Any] = {
            "password_hasher": self.password_hasher,
            "token_service": self.token_service,
            "email_sender": self.email_sender,
            "notifications": self.notifications,
            "confirmation_ttl": self.email_confirmation_ttl,
        }
        accepted = inspect.signature(handler_cls).parameters
        return handler_cls(uow, **{name: value for name, value in services.items() if name in accepted})


def _build_email_sender(settings: Settings) -> EmailSender:
    if settings.email_api_url:
        return HttpEmailSender(
            api_url=settings.email_api_url,
            api_key=settings.email_api_key,
            sender=settings.email_sender,
        )
    return LoggingEmailSender()


def load_config(settings: Settings | None = None) -> AppConfig:
    """Load configuration from environment."""
    settings = settings or Settings()
    engine = create_engine(settings.database_url, echo=settings.database_echo)
    token_service = TokenService(
        signing_key=settings.jwt_signing_key,
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
        access_token_ttl=timedelta(minutes=settings.access_token_ttl_minutes),
        refresh_token_ttl=timedelta(days=settings.refresh_token_ttl_days),
    )
    return AppConfig(
        settings=settings,
        engine=engine,
        session_factory=create_session_factory(engine),
        password_hasher=PasswordHasher(iterations=settings.password_hash_iterations),
        token_service=token_service,
        email_sender=_build_email_sender(settings),
        notifications=LocalNotificationBus(),
        email_confirmation_ttl=timedelta(minutes=settings.email_confirmation_ttl_minutes),
    )


__all__ = ["AppConfig", "Settings", "load_config"]
