"""
Query criteria and document queries.

A Criteria is an immutable expression tree of (type, subject, values) leaves
joined by AND / OR nodes. Subjects are entity attribute names; the SQL
generator maps them to document properties.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from .sort import Sort


class CriteriaType(Enum):
    ALL = "ALL"
    AND = "AND"
    OR = "OR"
    IS_EQUAL = "IS_EQUAL"
    NOT = "NOT"
    BEFORE = "BEFORE"
    AFTER = "AFTER"
    IN = "IN"
    NOT_IN = "NOT_IN"
    IS_NULL = "IS_NULL"
    IS_NOT_NULL = "IS_NOT_NULL"
    LESS_THAN = "LESS_THAN"
    LESS_THAN_EQUAL = "LESS_THAN_EQUAL"
    GREATER_THAN = "GREATER_THAN"
    GREATER_THAN_EQUAL = "GREATER_THAN_EQUAL"
    CONTAINING = "CONTAINING"
    ENDS_WITH = "ENDS_WITH"
    STARTS_WITH = "STARTS_WITH"
    TRUE = "TRUE"
    FALSE = "FALSE"
    BETWEEN = "BETWEEN"
    ARRAY_CONTAINS = "ARRAY_CONTAINS"

    @property
    def is_composite(self) -> bool:
        return self in (CriteriaType.AND, CriteriaType.OR)

    @property
    def arity(self) -> int:
        """Number of values a leaf of this type binds."""
        if self in _NO_VALUE_TYPES:
            return 0
        if self is CriteriaType.BETWEEN:
            return 2
        return 1


_NO_VALUE_TYPES = frozenset(
    {
        CriteriaType.ALL,
        CriteriaType.AND,
        CriteriaType.OR,
        CriteriaType.IS_NULL,
        CriteriaType.IS_NOT_NULL,
        CriteriaType.TRUE,
        CriteriaType.FALSE,
    }
)


@dataclass(frozen=True)
class Criteria:
    type: CriteriaType
    subject: str | None = None
    values: tuple[Any, ...] = ()
    sub_criteria: tuple[Criteria, ...] = ()

    @classmethod
    def all(cls) -> Criteria:
        return cls(CriteriaType.ALL)

    @classmethod
    def where(cls, subject: str, type: CriteriaType, *values: Any) -> Criteria:
        """Build a leaf criteria, checking the value count against the type."""
        if type.is_composite or type is CriteriaType.ALL:
            raise ValueError(f"{type.name} is not a leaf criteria type")
        if len(values) != type.arity:
            raise ValueError(
                f"{type.name} on {subject!r} expects {type.arity} value(s), got {len(values)}"
            )
        if type in (CriteriaType.IN, CriteriaType.NOT_IN):
            if isinstance(values[0], (str, bytes)) or not isinstance(values[0], Iterable):
                raise ValueError(f"{type.name} on {subject!r} expects a collection of values")
            values = (tuple(values[0]),)
        return cls(type, subject, tuple(values))

    @classmethod
    def is_equal(cls, subject: str, value: Any) -> Criteria:
        return cls.where(subject, CriteriaType.IS_EQUAL, value)

    def and_(self, other: Criteria) -> Criteria:
        if self.type is CriteriaType.ALL:
            return other
        if other.type is CriteriaType.ALL:
            return self
        return Criteria(CriteriaType.AND, sub_criteria=(self, other))

    def or_(self, other: Criteria) -> Criteria:
        if self.type is CriteriaType.ALL or other.type is CriteriaType.ALL:
            return Criteria.all()
        return Criteria(CriteriaType.OR, sub_criteria=(self, other))

    __and__ = and_
    __or__ = or_

    def equality_value(self, subject: str) -> tuple[bool, Any]:
        """Find an equality on `subject` that every matching document satisfies.

        Only AND branches are followed; an OR anywhere on the path means no
        single value is pinned.
        """
        if self.type is CriteriaType.IS_EQUAL and self.subject == subject:
            return True, self.values[0]
        if self.type is CriteriaType.AND:
            for sub in self.sub_criteria:
                found, value = sub.equality_value(subject)
                if found:
                    return True, value
        return False, None


@dataclass(frozen=True)
class DocumentQuery:
    """Criteria plus sort order and an optional OFFSET/LIMIT window."""

    criteria: Criteria = field(default_factory=Criteria.all)
    sort: Sort = field(default_factory=Sort)
    offset: int | None = None
    limit: int | None = None

    def with_sort(self, sort: Sort | None) -> DocumentQuery:
        if not sort:
            return self
        return replace(self, sort=self.sort.and_(sort))

    def with_offset_limit(self, offset: int, limit: int) -> DocumentQuery:
        if offset < 0:
            raise ValueError("offset must not be negative")
        if limit < 1:
            raise ValueError("limit must be at least 1")
        return replace(self, offset=offset, limit=limit)

    def partition_key_value(self, partition_key_attribute: str | None) -> Any:
        """Partition key value pinned by the criteria, or None for cross-partition."""
        if partition_key_attribute is None:
            return None
        found, value = self.criteria.equality_value(partition_key_attribute)
        return value if found else None
