"""
Continuation-token based paging.

Cosmos DB pages are addressed by an opaque continuation token rather than an
offset. A CosmosPageRequest carries the token to resume from; the Page returned
for it carries a request holding the token for the page after it.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from .sort import Sort

T = TypeVar("T")


@dataclass(frozen=True)
class CosmosPageRequest:
    """Page index, page size and the continuation token to resume from.

    Attributes:
        page: Zero-based page index (informational, Cosmos pages by token)
        size: Maximum number of items per page
        request_continuation: Opaque continuation token, None for the first page
        sort: Sort order applied to the paged query
    """

    page: int
    size: int
    request_continuation: str | None = None
    sort: Sort = field(default_factory=Sort)

    def __post_init__(self) -> None:
        if self.page < 0:
            raise ValueError("Page index must not be less than zero")
        if self.size < 1:
            raise ValueError("Page size must not be less than one")

    @classmethod
    def of(
        cls,
        page: int,
        size: int,
        request_continuation: str | None = None,
        sort: Sort | None = None,
    ) -> CosmosPageRequest:
        return cls(page, size, request_continuation, sort or Sort())

    @property
    def offset(self) -> int:
        return self.page * self.size

    def next(self) -> CosmosPageRequest:
        return CosmosPageRequest(self.page + 1, self.size, self.request_continuation, self.sort)

    def first(self) -> CosmosPageRequest:
        return CosmosPageRequest(0, self.size, None, self.sort)


@dataclass
class Page(Generic[T]):
    """One page of results.

    `pageable` is the request for this page with its continuation token replaced
    by the one returned by Cosmos DB; it is what next_pageable() advances.
    """

    content: list[T]
    pageable: CosmosPageRequest
    total_elements: int

    @property
    def number(self) -> int:
        return self.pageable.page

    @property
    def size(self) -> int:
        return self.pageable.size

    @property
    def number_of_elements(self) -> int:
        return len(self.content)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.pageable.size) if self.total_elements else 0

    @property
    def continuation_token(self) -> str | None:
        return self.pageable.request_continuation

    @property
    def has_next(self) -> bool:
        return self.pageable.request_continuation is not None

    @property
    def is_last(self) -> bool:
        return not self.has_next

    def next_pageable(self) -> CosmosPageRequest | None:
        """Request for the following page, None at end of stream."""
        if not self.has_next:
            return None
        return self.pageable.next()

    def __iter__(self) -> Iterator[T]:
        return iter(self.content)

    def __len__(self) -> int:
        return len(self.content)
