"""Sort specifications for document queries."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum


class Direction(Enum):
    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def from_string(cls, value: str) -> Direction:
        try:
            return cls(value.upper())
        except ValueError:
            raise ValueError(f"Invalid sort direction: {value!r}") from None


@dataclass(frozen=True)
class Order:
    """Ordering on a single attribute."""

    property: str
    direction: Direction = Direction.ASC
    ignore_case: bool = False

    @classmethod
    def asc(cls, property: str) -> Order:
        return cls(property, Direction.ASC)

    @classmethod
    def desc(cls, property: str) -> Order:
        return cls(property, Direction.DESC)

    @property
    def is_ascending(self) -> bool:
        return self.direction is Direction.ASC


@dataclass(frozen=True)
class Sort:
    """An ordered, immutable collection of Order instances.

    An empty Sort means unsorted and is falsy.
    """

    orders: tuple[Order, ...] = ()

    @classmethod
    def by(cls, *properties: str, direction: Direction = Direction.ASC) -> Sort:
        return cls(tuple(Order(p, direction) for p in properties))

    @classmethod
    def by_orders(cls, *orders: Order) -> Sort:
        return cls(tuple(orders))

    @classmethod
    def unsorted(cls) -> Sort:
        return cls()

    @property
    def is_sorted(self) -> bool:
        return bool(self.orders)

    def and_(self, other: Sort | None) -> Sort:
        if not other:
            return self
        return Sort(self.orders + other.orders)

    def __iter__(self) -> Iterator[Order]:
        return iter(self.orders)

    def __len__(self) -> int:
        return len(self.orders)

    def __bool__(self) -> bool:
        return self.is_sorted
