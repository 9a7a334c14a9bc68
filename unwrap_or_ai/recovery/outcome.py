"""Recoverable outcomes: the two failure shapes recovery understands.

Result family: ``Success(value)`` / ``Failure(reason)``.
Option family: ``Present(value)`` / ``Absent()``.

All variants are immutable and expose the same capability set
(``has_value``, ``value_or``, ``reason``, ``family``, ``recovered``), so the
resolver never branches on the concrete type. ``Result[T, E]`` and
``Option[T]`` are the matching annotations for callables that return
outcomes explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")

RESULT_FAMILY = "result"
OPTION_FAMILY = "option"


class Outcome(Generic[T]):
    """Common capability interface of every outcome variant."""

    family: ClassVar[str]

    def has_value(self) -> bool:
        raise NotImplementedError

    def value_or(self, fallback: T) -> T:
        raise NotImplementedError

    def recovered(self, value: T) -> "Outcome[T]":
        """Return the success variant of this outcome's family carrying ``value``."""
        raise NotImplementedError


@dataclass(frozen=True)
class Success(Outcome[T]):
    value: T
    family: ClassVar[str] = RESULT_FAMILY

    @property
    def reason(self) -> None:
        return None

    def has_value(self) -> bool:
        return True

    def value_or(self, fallback: T) -> T:
        return self.value

    def recovered(self, value: T) -> "Success[T]":
        return Success(value)


@dataclass(frozen=True)
class Failure(Outcome[Any], Generic[E]):
    reason: E
    family: ClassVar[str] = RESULT_FAMILY

    def has_value(self) -> bool:
        return False

    def value_or(self, fallback: T) -> T:
        return fallback

    def recovered(self, value: T) -> Success[T]:
        return Success(value)


@dataclass(frozen=True)
class Present(Outcome[T]):
    value: T
    family: ClassVar[str] = OPTION_FAMILY

    @property
    def reason(self) -> None:
        return None

    def has_value(self) -> bool:
        return True

    def value_or(self, fallback: T) -> T:
        return self.value

    def recovered(self, value: T) -> "Present[T]":
        return Present(value)


@dataclass(frozen=True)
class Absent(Outcome[Any]):
    family: ClassVar[str] = OPTION_FAMILY

    @property
    def reason(self) -> None:
        return None

    def has_value(self) -> bool:
        return False

    def value_or(self, fallback: T) -> T:
        return fallback

    def recovered(self, value: T) -> Present[T]:
        return Present(value)


Result = Union[Success[T], Failure[E]]
Option = Union[Present[T], Absent]


def as_outcome(raw: Any) -> Outcome[Any]:
    """Normalize a plain return value into an outcome.

    Outcomes pass through, ``None`` becomes ``Absent()`` and anything else
    becomes ``Present(raw)``. Exceptions are handled by the caller, which
    turns them into ``Failure(exc)``.
    """
    if isinstance(raw, Outcome):
        return raw
    if raw is None:
        return Absent()
    return Present(raw)


__all__ = [
    "Outcome",
    "Success",
    "Failure",
    "Present",
    "Absent",
    "Result",
    "Option",
    "as_outcome",
    "RESULT_FAMILY",
    "OPTION_FAMILY",
]
