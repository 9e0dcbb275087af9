"""Explicit success/failure results for codec calls.

Codec constructors raise on invalid input. Callers that would rather branch
on the result than catch exceptions wrap the call with :func:`attempt`::

    outcome = attempt(Message.parse, raw_text)
    if not outcome.ok:
        report(outcome.error)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from mua_codec.exceptions import MuaCodecError

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Either a value or the codec error that prevented building it."""

    value: T | None = None
    error: MuaCodecError | None = None

    @classmethod
    def success(cls, value: T) -> Outcome[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: MuaCodecError) -> Outcome[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, re-raising the stored error on failure."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


def attempt(factory: Callable[..., T], *args: Any, **kwargs: Any) -> Outcome[T]:
    """Call ``factory`` and capture codec errors in an Outcome.

    Only :class:`MuaCodecError` is captured; anything else propagates.
    """
    try:
        return Outcome.success(factory(*args, **kwargs))
    except MuaCodecError as e:
        return Outcome.failure(e)
