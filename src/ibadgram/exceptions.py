"""Infrastructure exceptions and helpers for repository layers.

These never cross the handler boundary: handlers catch them and turn them
into :class:`~ibadgram.domain.errors.Failure` values.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import exc as orm_exc

__all__ = [
    "AppError",
    "RepositoryError",
    "PersistenceError",
    "ConflictError",
    "ConcurrencyConflictError",
    "DatabaseOperationError",
    "InvalidTransactionStateError",
    "EmailDeliveryError",
    "TokenValidationError",
    "handle_sqlalchemy_errors",
]


class AppError(Exception):
    """Base class for application specific errors."""


class RepositoryError(AppError):
    """Base class for persistence layer failures."""


class PersistenceError(RepositoryError):
    """Raised when staging, flushing or committing changes fails."""


class ConflictError(PersistenceError):
    """Raised when a uniqueness or integrity constraint is violated."""


class ConcurrencyConflictError(ConflictError):
    """Raised when a row changed or vanished under a concurrent transaction."""


class DatabaseOperationError(PersistenceError):
    """Raised for unexpected database errors."""


class InvalidTransactionStateError(AppError):
    """Raised when the unit of work is driven out of order."""


class EmailDeliveryError(AppError):
    """Raised when an outgoing email could not be handed to the transport."""


class TokenValidationError(AppError):
    """Raised when an access token cannot be decoded or has expired."""


@dataclass(slots=True)
class _EntityContext:
    """Internal helper describing the entity for error messages."""

    entity: str | None = None

    def format(self, message: str) -> str:
        if self.entity:
            return f"{self.entity}: {message}"
        return message


def _translate_sqlalchemy_error(exc: Exception, *, context: _EntityContext) -> RepositoryError:
    if isinstance(exc, sa_exc.IntegrityError):
        return ConflictError(context.format("integrity constraint violated"))
    if isinstance(exc, orm_exc.StaleDataError):
        return ConcurrencyConflictError(context.format("row was modified concurrently"))
    if isinstance(exc, sa_exc.DBAPIError):
        return DatabaseOperationError(context.format("database operation failed"))
    return PersistenceError(context.format(str(exc)))


@contextmanager
def handle_sqlalchemy_errors(*, entity: str | None = None) -> Iterator[None]:
    """Translate SQLAlchemy errors into domain specific ones."""

    context = _EntityContext(entity)
    try:
        yield
    except (sa_exc.SQLAlchemyError, orm_exc.StaleDataError) as exc:
        raise _translate_sqlalchemy_error(exc, context=context) from exc
