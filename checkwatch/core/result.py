"""Explicit success/failure values for collaborator calls."""

from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: Exception

    @property
    def reason(self) -> str:
        return f"{type(self.error).__name__}: {self.error}"


Result = Union[Ok[T], Err]


async def attempt(awaitable: Awaitable[T]) -> Result[T]:
    """Await *awaitable*, turning a raised exception into an ``Err``."""
    try:
        return Ok(await awaitable)
    except Exception as exc:
        return Err(exc)
