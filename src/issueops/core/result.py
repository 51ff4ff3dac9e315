"""Minimal result type for explicit success/failure propagation.

Reducers and the registry return ``Ok(value)`` or ``Err(error)`` instead of
unwinding with exceptions for expected failures::

    result = registry.execute_action(action, state, ctx)
    if result.is_ok:
        state = result.value
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self):
        """Raise the wrapped error if it is an exception, else ValueError."""
        if isinstance(self.error, BaseException):
            raise self.error
        raise ValueError(f"unwrap() called on Err: {self.error!r}")


Result = Union[Ok[T], Err[E]]
