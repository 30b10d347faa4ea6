"""Transactional boundary shared by repositories and handlers.

One :class:`SQLAlchemyUnitOfWork` owns one session and at most one active
transaction. Construct a fresh instance per request; instances are not safe
to share between concurrent tasks.
"""

from __future__ import annotations

from types import TracebackType
from typing import Any, Protocol, TypeVar

import structlog
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction, async_sessionmaker

from ..domain.enums import IsolationLevel
from ..exceptions import InvalidTransactionStateError, handle_sqlalchemy_errors
from ..repositories.interfaces import (
    ChatMemberRepository,
    ChatRepository,
    MentionRepository,
    MessageRepository,
    RefreshTokenRepository,
    UserRepository,
)
from ..repositories.sqlalchemy import (
    SQLAlchemyChatMemberRepository,
    SQLAlchemyChatRepository,
    SQLAlchemyMentionRepository,
    SQLAlchemyMessageRepository,
    SQLAlchemyRefreshTokenRepository,
    SQLAlchemyRepository,
    SQLAlchemyUserRepository,
)

logger = structlog.get_logger(__name__)

RepoT = TypeVar("RepoT", bound=SQLAlchemyRepository[Any])


class UnitOfWork(Protocol):
    """Represents an atomic transactional boundary."""

    @property
    def is_active(self) -> bool: ...

    @property
    def users(self) -> UserRepository: ...

    @property
    def chats(self) -> ChatRepository: ...

    @property
    def chat_members(self) -> ChatMemberRepository: ...

    @property
    def mentions(self) -> MentionRepository: ...

    @property
    def messages(self) -> MessageRepository: ...

    @property
    def refresh_tokens(self) -> RefreshTokenRepository: ...

    async def begin_transaction(self, isolation_level: IsolationLevel | None = None) -> None:
        """Open a transaction; fails when one is already active."""

    async def save_changes(self) -> int:
        """Flush staged changes and return how many entities were written."""

    async def commit_transaction(self) -> None:
        """Save and commit; rolls back and re-raises on any failure."""

    async def rollback_transaction(self) -> None:
        """Roll back the active transaction, if any."""

    async def dispose(self) -> None:
        """Release the transaction and the connection. Idempotent."""


class SQLAlchemyUnitOfWork:
    """Unit of work over one :class:`AsyncSession`."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: AsyncSession | None = None
        self._transaction: AsyncSessionTransaction | None = None
        self._repositories: dict[type[Any], Any] = {}
        self._disposed = False

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.dispose()

    @property
    def is_active(self) -> bool:
        return self._transaction is not None

    @property
    def session(self) -> AsyncSession:
        if self._disposed:
            raise InvalidTransactionStateError("unit of work has been disposed")
        if self._session is None:
            self._session = self._session_factory()
        return self._session

    def _repository(self, repository_cls: type[RepoT]) -> RepoT:
        repository = self._repositories.get(repository_cls)
        if repository is None:
            repository = repository_cls(self.session)
            self._repositories[repository_cls] = repository
        return repository

    @property
    def users(self) -> SQLAlchemyUserRepository:
        return self._repository(SQLAlchemyUserRepository)

    @property
    def chats(self) -> SQLAlchemyChatRepository:
        return self._repository(SQLAlchemyChatRepository)

    @property
    def chat_members(self) -> SQLAlchemyChatMemberRepository:
        return self._repository(SQLAlchemyChatMemberRepository)

    @property
    def mentions(self) -> SQLAlchemyMentionRepository:
        return self._repository(SQLAlchemyMentionRepository)

    @property
    def messages(self) -> SQLAlchemyMessageRepository:
        return self._repository(SQLAlchemyMessageRepository)

    @property
    def refresh_tokens(self) -> SQLAlchemyRefreshTokenRepository:
        return self._repository(SQLAlchemyRefreshTokenRepository)

    async def begin_transaction(self, isolation_level: IsolationLevel | None = None) -> None:
        if self._transaction is not None:
            raise InvalidTransactionStateError("a transaction is already active")
        session = self.session
        if session.in_transaction():
            raise InvalidTransactionStateError("session was used outside a transaction")
        with handle_sqlalchemy_errors(entity="transaction"):
            transaction = await session.begin()
            try:
                if isolation_level is not None:
                    await session.connection(
                        execution_options={"isolation_level": isolation_level.value}
                    )
            except BaseException:
                await transaction.rollback()
                raise
        self._transaction = transaction
        logger.debug(
            "uow.transaction.begin",
            isolation_level=isolation_level.value if isolation_level else "default",
        )

    async def save_changes(self) -> int:
        if self._transaction is None:
            raise InvalidTransactionStateError("no active transaction to save")
        session = self.session
        staged = len(session.new) + len(session.dirty) + len(session.deleted)
        with handle_sqlalchemy_errors(entity="transaction"):
            await session.flush()
        return staged

    async def commit_transaction(self) -> None:
        if self._transaction is None:
            raise InvalidTransactionStateError("no active transaction to commit")
        try:
            saved = await self.save_changes()
            with handle_sqlalchemy_errors(entity="transaction"):
                await self._transaction.commit()
        except BaseException:
            await self.rollback_transaction()
            raise
        finally:
            self._transaction = None
        logger.debug("uow.transaction.commit", saved=saved)

    async def rollback_transaction(self) -> None:
        transaction = self._transaction
        if transaction is None:
            return
        self._transaction = None
        try:
            await transaction.rollback()
        except sa_exc.SQLAlchemyError:
            logger.error("uow.rollback.failed", exc_info=True)
            return
        logger.debug("uow.transaction.rollback")

    async def dispose(self) -> None:
        if self._disposed:
            return
        await self.rollback_transaction()
        if self._session is not None:
            try:
                await self._session.close()
            except sa_exc.SQLAlchemyError:
                logger.error("uow.dispose.failed", exc_info=True)
        self._session = None
        self._repositories.clear()
        self._disposed = True


__all__ = ["SQLAlchemyUnitOfWork", "UnitOfWork"]
