"""
Query model: criteria, sorting, paging, SQL generation and method-name derivation.
"""

from .criteria import Criteria, CriteriaType, DocumentQuery
from .derivation import PartTree, QueryKind, is_query_method_name, parse_query_method
from .pageable import CosmosPageRequest, Page
from .sort import Direction, Order, Sort
from .sql import CosmosQuery, QuerySpecGenerator

__all__ = [
    "CosmosPageRequest",
    "CosmosQuery",
    "Criteria",
    "CriteriaType",
    "Direction",
    "DocumentQuery",
    "Order",
    "Page",
    "PartTree",
    "QueryKind",
    "QuerySpecGenerator",
    "Sort",
    "is_query_method_name",
    "parse_query_method",
]
