"""Explicit success/failure values returned across the handler boundary."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .errors import ErrorKind, Failure

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    """Either a value or one or more :class:`Failure` entries."""

    value: T | None = None
    errors: tuple[Failure, ...] = ()

    @classmethod
    def ok(cls, value: T | None = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, *errors: Failure) -> "Result[T]":
        if not errors:
            raise ValueError("a failed result needs at least one error")
        return cls(errors=tuple(errors))

    @property
    def is_success(self) -> bool:
        return not self.errors

    @property
    def is_failure(self) -> bool:
        return bool(self.errors)

    @property
    def error(self) -> Failure:
        """First failure; only valid on a failed result."""

        if not self.errors:
            raise ValueError("result is successful")
        return self.errors[0]

    @property
    def kind(self) -> ErrorKind | None:
        return self.errors[0].kind if self.errors else None

    def unwrap(self) -> T:
        if self.errors:
            raise ValueError(f"result failed with {self.errors[0].code.value}")
        return self.value  # type: ignore[return-value]

    def propagate(self) -> "Result[Any]":
        """Re-type a failed result so it can be returned from another handler."""

        return Result(errors=self.errors)


__all__ = ["Result"]
