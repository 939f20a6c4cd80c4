"""
Cosmos DB SQL generation for DocumentQuery.

Translates DocumentQuery objects into parameterized Cosmos SQL:

    SELECT * FROM r WHERE r.title = @title0 ORDER BY r.name ASC OFFSET 0 LIMIT 10

Criteria subjects are entity attribute names and are mapped to document
properties through the entity information (the id field becomes ``r.id``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from ..exceptions import ValidationError
from ..mapping.converter import to_json_value
from ..mapping.entity_information import CosmosEntityInformation
from .criteria import Criteria, CriteriaType, DocumentQuery
from .sort import Sort

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_BINARY_OPERATORS = {
    CriteriaType.IS_EQUAL: "=",
    CriteriaType.NOT: "<>",
    CriteriaType.BEFORE: "<",
    CriteriaType.AFTER: ">",
    CriteriaType.LESS_THAN: "<",
    CriteriaType.LESS_THAN_EQUAL: "<=",
    CriteriaType.GREATER_THAN: ">",
    CriteriaType.GREATER_THAN_EQUAL: ">=",
}

_STRING_FUNCTIONS = {
    CriteriaType.CONTAINING: "CONTAINS",
    CriteriaType.STARTS_WITH: "STARTSWITH",
    CriteriaType.ENDS_WITH: "ENDSWITH",
}


@dataclass
class CosmosQuery:
    """A parameterized Cosmos DB query.

    Attributes:
        sql: The SQL query string with @parameter placeholders
        parameters: List of parameter dictionaries for the query
        is_count_query: Whether this is a COUNT query
    """

    sql: str
    parameters: list[dict[str, Any]] = field(default_factory=list)
    is_count_query: bool = False

    def __str__(self) -> str:
        """Return formatted query for debugging."""
        param_str = ", ".join(f"{p['name']}={p['value']!r}" for p in self.parameters)
        return f"{self.sql}\nParameters: {param_str}"


class QuerySpecGenerator:
    """Builds Cosmos SQL queries from DocumentQuery objects.

    Usage:
        generator = QuerySpecGenerator(get_entity_information(Contact))
        query = generator.generate_find(document_query)
        # Execute: container.query_items(query.sql, parameters=query.parameters)
    """

    def __init__(self, entity_information: CosmosEntityInformation, alias: str = "r") -> None:
        self.entity_information = entity_information
        self.alias = alias
        self._param_counter = 0

    def _next_param(self, subject: str) -> str:
        """Generate a unique parameter name derived from the subject."""
        name = f"@{re.sub(r'[^A-Za-z0-9_]', '_', subject)}{self._param_counter}"
        self._param_counter += 1
        return name

    def _reset_params(self) -> None:
        self._param_counter = 0

    def property_path(self, attribute: str) -> str:
        """Document path of an attribute, e.g. ``r.title`` or ``r["first-name"]``."""
        head, *rest = attribute.split(".")
        segments = [self.entity_information.property_name(head), *rest]
        path = self.alias
        for segment in segments:
            path += f".{segment}" if _IDENTIFIER.match(segment) else f'["{segment}"]'
        return path

    def _query_value(self, subject: str, value: Any) -> Any:
        # Document ids are always strings
        if subject == self.entity_information.id_attribute and value is not None:
            if isinstance(value, (list, tuple)):
                return [str(v) for v in value]
            return str(value)
        return to_json_value(value)

    def generate_find(self, query: DocumentQuery) -> CosmosQuery:
        """Build a SELECT query including sort order and OFFSET/LIMIT."""
        self._reset_params()
        parameters: list[dict[str, Any]] = []
        sql = f"SELECT * FROM {self.alias}"

        where = self._generate_criteria(query.criteria, parameters)
        if where:
            sql += f" WHERE {where}"

        order = self._generate_sort(query.sort)
        if order:
            sql += f" {order}"

        if query.limit is not None:
            sql += f" OFFSET {query.offset or 0} LIMIT {query.limit}"

        return CosmosQuery(sql=sql, parameters=parameters)

    def generate_count(self, query: DocumentQuery) -> CosmosQuery:
        """Build a COUNT query; sort order and paging window are ignored."""
        self._reset_params()
        parameters: list[dict[str, Any]] = []
        sql = f"SELECT VALUE COUNT(1) FROM {self.alias}"

        where = self._generate_criteria(query.criteria, parameters)
        if where:
            sql += f" WHERE {where}"

        return CosmosQuery(sql=sql, parameters=parameters, is_count_query=True)

    def _generate_criteria(self, criteria: Criteria, parameters: list[dict[str, Any]]) -> str:
        if criteria.type is CriteriaType.ALL:
            return ""
        if criteria.type is CriteriaType.AND:
            parts = [self._generate_criteria(c, parameters) for c in criteria.sub_criteria]
            return " AND ".join(p for p in parts if p)
        if criteria.type is CriteriaType.OR:
            parts = [self._generate_criteria(c, parameters) for c in criteria.sub_criteria]
            return "(" + " OR ".join(p for p in parts if p) + ")"
        return self._generate_leaf(criteria, parameters)

    def _bind(self, subject: str, value: Any, parameters: list[dict[str, Any]]) -> str:
        name = self._next_param(subject)
        parameters.append({"name": name, "value": self._query_value(subject, value)})
        return name

    def _generate_leaf(self, criteria: Criteria, parameters: list[dict[str, Any]]) -> str:
        subject = criteria.subject or ""
        path = self.property_path(subject)
        ctype = criteria.type

        if ctype in _BINARY_OPERATORS:
            param = self._bind(subject, criteria.values[0], parameters)
            return f"{path} {_BINARY_OPERATORS[ctype]} {param}"
        if ctype in _STRING_FUNCTIONS:
            param = self._bind(subject, criteria.values[0], parameters)
            return f"{_STRING_FUNCTIONS[ctype]}({path}, {param})"
        if ctype is CriteriaType.IN:
            param = self._bind(subject, list(criteria.values[0]), parameters)
            return f"ARRAY_CONTAINS({param}, {path})"
        if ctype is CriteriaType.NOT_IN:
            param = self._bind(subject, list(criteria.values[0]), parameters)
            return f"NOT ARRAY_CONTAINS({param}, {path})"
        if ctype is CriteriaType.ARRAY_CONTAINS:
            param = self._bind(subject, criteria.values[0], parameters)
            return f"ARRAY_CONTAINS({path}, {param})"
        if ctype is CriteriaType.BETWEEN:
            low = self._bind(subject, criteria.values[0], parameters)
            high = self._bind(subject, criteria.values[1], parameters)
            return f"({path} BETWEEN {low} AND {high})"
        if ctype is CriteriaType.IS_NULL:
            return f"IS_NULL({path})"
        if ctype is CriteriaType.IS_NOT_NULL:
            return f"NOT IS_NULL({path})"
        if ctype is CriteriaType.TRUE:
            return f"{path} = true"
        if ctype is CriteriaType.FALSE:
            return f"{path} = false"
        raise ValueError(f"Unsupported criteria type: {ctype.name}")

    def _generate_sort(self, sort: Sort) -> str:
        if not sort:
            return ""
        clauses = []
        for order in sort:
            if order.ignore_case:
                raise ValidationError(
                    "sort", "ignore case ordering is not supported by Cosmos DB", order.property
                )
            clauses.append(f"{self.property_path(order.property)} {order.direction.value}")
        return "ORDER BY " + ", ".join(clauses)
