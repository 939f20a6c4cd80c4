"""
Query derivation from repository method names.

    find_by_title(title)                          -> WHERE r.title = @title0
    find_one_by_title_and_age_greater_than(t, a)  -> single result
    count_by_tags_array_contains(tag)             -> SELECT VALUE COUNT(1) ...
    find_by_age_between_order_by_name_desc(a, b)  -> ... ORDER BY r.name DESC

Parts are separated by ``_and_`` (or ``_or_`` for alternatives); each part is
an entity attribute optionally followed by an operator keyword.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..exceptions import InvalidQueryMethodError
from ..mapping.entity_information import get_entity_information
from .criteria import Criteria, CriteriaType, DocumentQuery
from .sort import Direction, Order, Sort


class QueryKind(Enum):
    """What a derived query method returns."""

    COLLECTION = "collection"
    SINGLE = "single"
    COUNT = "count"
    EXISTS = "exists"
    DELETE = "delete"


_PREFIXES = (
    ("find_all_by_", QueryKind.COLLECTION),
    ("find_one_by_", QueryKind.SINGLE),
    ("find_by_", QueryKind.COLLECTION),
    ("count_by_", QueryKind.COUNT),
    ("exists_by_", QueryKind.EXISTS),
    ("delete_by_", QueryKind.DELETE),
)

_KEYWORDS = {
    "is": CriteriaType.IS_EQUAL,
    "equals": CriteriaType.IS_EQUAL,
    "not": CriteriaType.NOT,
    "is_not": CriteriaType.NOT,
    "before": CriteriaType.BEFORE,
    "after": CriteriaType.AFTER,
    "in": CriteriaType.IN,
    "is_in": CriteriaType.IN,
    "not_in": CriteriaType.NOT_IN,
    "is_not_in": CriteriaType.NOT_IN,
    "is_null": CriteriaType.IS_NULL,
    "null": CriteriaType.IS_NULL,
    "is_not_null": CriteriaType.IS_NOT_NULL,
    "not_null": CriteriaType.IS_NOT_NULL,
    "less_than": CriteriaType.LESS_THAN,
    "less_than_equal": CriteriaType.LESS_THAN_EQUAL,
    "greater_than": CriteriaType.GREATER_THAN,
    "greater_than_equal": CriteriaType.GREATER_THAN_EQUAL,
    "containing": CriteriaType.CONTAINING,
    "contains": CriteriaType.CONTAINING,
    "starting_with": CriteriaType.STARTS_WITH,
    "starts_with": CriteriaType.STARTS_WITH,
    "ending_with": CriteriaType.ENDS_WITH,
    "ends_with": CriteriaType.ENDS_WITH,
    "true": CriteriaType.TRUE,
    "is_true": CriteriaType.TRUE,
    "false": CriteriaType.FALSE,
    "is_false": CriteriaType.FALSE,
    "between": CriteriaType.BETWEEN,
    "array_contains": CriteriaType.ARRAY_CONTAINS,
}

_ORDER_BY = "_order_by_"
_AND = "_and_"
_OR = "_or_"

_KEYWORDS_LONGEST_FIRST = sorted(_KEYWORDS, key=len, reverse=True)
_DIRECTION_SUFFIXES = (("_asc", Direction.ASC), ("_desc", Direction.DESC), ("", Direction.ASC))


def is_query_method_name(name: str) -> bool:
    return any(name.startswith(prefix) for prefix, _ in _PREFIXES)


@dataclass(frozen=True)
class Part:
    """One predicate of a derived query: attribute plus operator."""

    attribute: str
    type: CriteriaType

    @property
    def arity(self) -> int:
        return self.type.arity

    def to_criteria(self, values: tuple[Any, ...]) -> Criteria:
        return Criteria.where(self.attribute, self.type, *values)


@dataclass(frozen=True)
class PartTree:
    """Parsed form of a derived query method name.

    `or_groups` holds alternatives; parts inside a group are ANDed.
    """

    method_name: str
    kind: QueryKind
    or_groups: tuple[tuple[Part, ...], ...]
    sort: Sort

    @classmethod
    def parse(cls, method_name: str, domain_class: type) -> PartTree:
        info = get_entity_information(domain_class)
        attributes = sorted((f.name for f in info.fields), key=len, reverse=True)

        for prefix, kind in _PREFIXES:
            if method_name.startswith(prefix):
                body = method_name[len(prefix):]
                break
        else:
            raise InvalidQueryMethodError(method_name, "unknown query method prefix")

        sort = Sort()
        if _ORDER_BY in body:
            body, order_clause = body.split(_ORDER_BY, 1)
            sort = _parse_order_by(method_name, order_clause, attributes)
        if not body:
            raise InvalidQueryMethodError(method_name, "no criteria after the prefix")

        or_groups = _parse_criteria(body, attributes)
        if or_groups is None:
            raise InvalidQueryMethodError(
                method_name, f"cannot resolve {body!r} to attributes and keywords"
            )
        return cls(method_name, kind, or_groups, sort)

    @property
    def parameter_count(self) -> int:
        return sum(part.arity for group in self.or_groups for part in group)

    def create_query(self, args: tuple[Any, ...], sort: Sort | None = None) -> DocumentQuery:
        """Bind positional arguments to the parts, in declaration order."""
        if len(args) != self.parameter_count:
            raise InvalidQueryMethodError(
                self.method_name,
                f"expected {self.parameter_count} argument(s), got {len(args)}",
            )
        remaining = list(args)
        criteria: Criteria | None = None
        for group in self.or_groups:
            group_criteria = Criteria.all()
            for part in group:
                values = tuple(remaining[: part.arity])
                del remaining[: part.arity]
                try:
                    group_criteria = group_criteria.and_(part.to_criteria(values))
                except ValueError as e:
                    raise InvalidQueryMethodError(self.method_name, str(e)) from e
            criteria = group_criteria if criteria is None else criteria.or_(group_criteria)

        query = DocumentQuery(criteria or Criteria.all(), self.sort)
        return query.with_sort(sort)


def _parse_criteria(text: str, attributes: list[str]) -> tuple[tuple[Part, ...], ...] | None:
    """Split ``text`` into OR groups of ANDed parts.

    Attributes are matched (longest first) before separators, so names such
    as ``terms_and_conditions`` are not cut at ``_and_``. Returns None when
    no reading of the text resolves.
    """
    for attribute in attributes:
        if not text.startswith(attribute):
            continue
        rest = text[len(attribute):]
        candidates = [
            (_KEYWORDS[keyword], rest[len(keyword) + 1:])
            for keyword in _KEYWORDS_LONGEST_FIRST
            if rest.startswith("_" + keyword)
        ]
        candidates.append((CriteriaType.IS_EQUAL, rest))
        for criteria_type, tail in candidates:
            part = Part(attribute, criteria_type)
            if not tail:
                return ((part,),)
            if tail.startswith(_AND):
                following = _parse_criteria(tail[len(_AND):], attributes)
                if following is not None:
                    return ((part, *following[0]), *following[1:])
            if tail.startswith(_OR):
                following = _parse_criteria(tail[len(_OR):], attributes)
                if following is not None:
                    return ((part,), *following)
    return None


def _parse_orders(text: str, attributes: list[str]) -> list[Order] | None:
    for attribute in attributes:
        if not text.startswith(attribute):
            continue
        rest = text[len(attribute):]
        for suffix, direction in _DIRECTION_SUFFIXES:
            if not rest.startswith(suffix):
                continue
            tail = rest[len(suffix):]
            order = Order(attribute, direction)
            if not tail:
                return [order]
            if tail.startswith(_AND):
                following = _parse_orders(tail[len(_AND):], attributes)
                if following is not None:
                    return [order, *following]
    return None


def _parse_order_by(method_name: str, clause: str, attributes: list[str]) -> Sort:
    orders = _parse_orders(clause, attributes)
    if orders is None:
        raise InvalidQueryMethodError(method_name, f"cannot order by {clause!r}")
    return Sort(tuple(orders))


@functools.lru_cache(maxsize=None)
def parse_query_method(domain_class: type, method_name: str) -> PartTree:
    """Parse (and memoize) a derived query method for a domain class."""
    return PartTree.parse(method_name, domain_class)
