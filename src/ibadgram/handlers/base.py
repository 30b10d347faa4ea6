"""Transaction discipline shared by every use-case handler.

A handler validates its input without touching the database, opens one
transaction on its unit of work, runs :meth:`Handler._execute` and either
commits or rolls back. Domain events and emails staged during execution are
only dispatched once the commit has succeeded, and their failures are logged
without changing the result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

import structlog
from sqlalchemy import exc as sa_exc

from ..domain.enums import IsolationLevel
from ..domain.errors import ErrorCode, ErrorKind, Failure, business_error
from ..domain.events import DomainEvent
from ..domain.results import Result
from ..exceptions import AppError, ConflictError, EmailDeliveryError
from ..infrastructure.unit_of_work import UnitOfWork
from ..logging import request_context
from ..services.email import EmailSender
from ..services.notifications import NotificationBus, NullNotificationBus

logger = structlog.get_logger(__name__)

CommandT = TypeVar("CommandT")
ResultT = TypeVar("ResultT")


@dataclass(slots=True)
class _OutgoingEmail:
    address: str
    subject: str
    body: str


class Handler(Generic[CommandT, ResultT]):
    """Base class for command handlers.

    Subclasses set ``operation`` (used as the log event prefix), optionally
    ``conflict_code`` (returned when the store reports a uniqueness or
    concurrency conflict), and implement :meth:`validate` and
    :meth:`_execute`.
    """

    operation: ClassVar[str] = "handler"
    conflict_code: ClassVar[ErrorCode] = ErrorCode.CONFLICT
    isolation_level: ClassVar[IsolationLevel | None] = None
    read_only: ClassVar[bool] = False

    def __init__(
        self,
        uow: UnitOfWork,
        *,
        notifications: NotificationBus | None = None,
        email_sender: EmailSender | None = None,
    ) -> None:
        if uow is None:
            raise TypeError(f"{type(self).__name__} requires a unit of work")
        self._uow = uow
        self._notifications = notifications or NullNotificationBus()
        self._email_sender = email_sender
        self._events: list[DomainEvent] = []
        self._emails: list[_OutgoingEmail] = []

    @property
    def uow(self) -> UnitOfWork:
        return self._uow

    def validate(self, command: CommandT) -> list[Failure]:
        return []

    async def _execute(self, command: CommandT) -> Result[ResultT]:
        raise NotImplementedError

    def publish_after_commit(self, event: DomainEvent) -> None:
        self._events.append(event)

    def send_after_commit(self, address: str, subject: str, body: str) -> None:
        self._emails.append(_OutgoingEmail(address, subject, body))

    async def handle(self, command: CommandT) -> Result[ResultT]:
        with request_context(operation=self.operation):
            return await self._handle(command)

    async def _handle(self, command: CommandT) -> Result[ResultT]:
        failures = self.validate(command)
        if failures:
            logger.info(
                f"{self.operation}.invalid",
                errors=[failure.code.value for failure in failures],
            )
            return Result.fail(*failures)

        self._events = []
        self._emails = []
        logger.debug(f"{self.operation}.started")
        try:
            await self._uow.begin_transaction(self.isolation_level)
            result = await self._execute(command)
            if result.is_failure:
                await self._uow.rollback_transaction()
                logger.warning(f"{self.operation}.rejected", code=result.error.code.value)
                return result
            if self.read_only:
                await self._uow.rollback_transaction()
            else:
                await self._uow.commit_transaction()
        except ConflictError as exc:
            await self._uow.rollback_transaction()
            logger.warning(f"{self.operation}.conflict", error=str(exc))
            return Result.fail(
                Failure(
                    code=self.conflict_code,
                    message="The request conflicts with a concurrent change",
                    kind=ErrorKind.STATE_CONFLICT,
                )
            )
        except (AppError, sa_exc.SQLAlchemyError):
            logger.error(f"{self.operation}.failed", exc_info=True)
            await self._uow.rollback_transaction()
            return Result.fail(
                business_error(ErrorCode.DATABASE_ERROR, "An error occurred while saving changes")
            )
        except BaseException:
            await self._uow.rollback_transaction()
            raise

        await self._dispatch_side_effects()
        logger.info(f"{self.operation}.succeeded")
        return result

    async def _dispatch_side_effects(self) -> None:
        events, self._events = self._events, []
        emails, self._emails = self._emails, []
        for event in events:
            try:
                await self._notifications.publish(event)
            except Exception:
                logger.error(f"{self.operation}.notify.failed", event=event.name, exc_info=True)
        if self._email_sender is None:
            if emails:
                logger.warning(f"{self.operation}.email.skipped", count=len(emails))
            return
        for email in emails:
            try:
                await self._email_sender.send_email(email.address, email.subject, email.body)
            except EmailDeliveryError as exc:
                logger.warning(f"{self.operation}.email.failed", error=str(exc))


class QueryHandler(Handler[CommandT, ResultT]):
    """Handler whose transaction is always rolled back."""

    read_only = True


def fail(code: ErrorCode, message: str, **context: Any) -> Result[Any]:
    """Shorthand for a failed result carrying one business failure."""

    return Result.fail(business_error(code, message, **context))


__all__ = ["Handler", "QueryHandler", "fail"]
