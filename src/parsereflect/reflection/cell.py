"""Once-computed value holder for lazily derived reflection fields."""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class Cell(Generic[T]):
    """Holds a value computed on first access and never recomputed.

    Unlike an ``is None`` check, a computed ``None``/``False`` result is
    cached as well, so "no parent" and "not yet looked up" stay distinct.
    """

    __slots__ = ("_computed", "_value")

    def __init__(self) -> None:
        self._computed = False
        self._value: T | None = None

    @property
    def is_computed(self) -> bool:
        return self._computed

    def get_or_compute(self, compute: Callable[[], T]) -> T:
        if not self._computed:
            self._value = compute()
            self._computed = True
        return self._value  # type: ignore[return-value]
