"""A list with a fixed maximum length."""

from __future__ import annotations

from functools import total_ordering
from typing import Any, Generic, Iterable, Iterator, TypeVar

T = TypeVar("T")


@total_ordering
class StaticVector(Generic[T]):
    """A sequence that never holds more than a fixed number of elements.

    Growing past the capacity raises IndexError. Equality and ordering
    compare elements lexicographically and ignore the capacity.
    """

    __slots__ = ("_capacity", "_items")

    def __init__(self, capacity: int, items: Iterable[T] = ()) -> None:
        if capacity < 0:
            raise ValueError(f"capacity must not be negative: {capacity}")
        self._capacity = capacity
        self._items: list[T] = []
        self.extend(items)

    def capacity(self) -> int:
        """The maximum number of elements."""
        return self._capacity

    def _check_room(self, count: int) -> None:
        if len(self._items) + count > self._capacity:
            raise IndexError(
                f"capacity {self._capacity} exceeded: "
                f"{len(self._items)} + {count} elements"
            )

    def append(self, value: T) -> None:
        """Add one element at the end."""
        self._check_room(1)
        self._items.append(value)

    def extend(self, other: Iterable[T]) -> None:
        """Add every element of other at the end; nothing is added if they do not fit."""
        incoming = list(other)
        self._check_room(len(incoming))
        self._items.extend(incoming)

    def pop(self) -> T:
        """Remove and return the last element."""
        if not self._items:
            raise IndexError("pop from empty StaticVector")
        return self._items.pop()

    def clear(self) -> None:
        self._items.clear()

    def resize(self, new_size: int, value: Any = None) -> None:
        """Shrink by dropping trailing elements, or grow by appending copies of value."""
        if not 0 <= new_size <= self._capacity:
            raise IndexError(f"size {new_size} outside [0, {self._capacity}]")
        if new_size <= len(self._items):
            del self._items[new_size:]
        else:
            self._items.extend([value] * (new_size - len(self._items)))

    def back(self) -> T:
        """The last element."""
        if not self._items:
            raise IndexError("back of empty StaticVector")
        return self._items[-1]

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> T:
        return self._items[index]

    def __setitem__(self, index: int, value: T) -> None:
        self._items[index] = value

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StaticVector):
            return NotImplemented
        return self._items == other._items

    def __lt__(self, other: StaticVector[T]) -> bool:
        if not isinstance(other, StaticVector):
            return NotImplemented
        return self._items < other._items

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"StaticVector({self._capacity}, {self._items!r})"