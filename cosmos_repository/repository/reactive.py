"""
Async repository.

Single values are coroutines, result streams are async iterators that fetch
lazily from Cosmos DB and can be abandoned with ``aclose()``.

    class CourseRepository(ReactiveCosmosRepository[Course, str]):
        pass

    courses = CourseRepository(template)
    await courses.save(Course("1", "Course 1", "Department 1"))
    course = await courses.find_one_by_name("Course 1")
    async for course in courses.find_by_department("Department 1"):
        ...
"""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator, Iterable
from typing import Any, Callable

from ..exceptions import UnsupportedOperationError, ValidationError
from ..query.criteria import DocumentQuery
from ..query.derivation import PartTree, QueryKind
from ..query.pageable import CosmosPageRequest, Page
from ..query.sort import Sort
from .base import ID, RepositoryBase, T


async def _iterate(items: Iterable[Any] | AsyncIterable[Any]) -> AsyncIterator[Any]:
    if isinstance(items, AsyncIterable):
        async for item in items:
            yield item
    else:
        for item in items:
            yield item


class ReactiveCosmosRepository(RepositoryBase[T, ID]):
    """Async CRUD, sorting, paging and derived queries for one domain class.

    The container is created on first use when auto-create is enabled.
    """

    async def save(self, entity: T) -> T:
        """Insert a new entity or upsert an existing one."""
        return await self._save(entity)

    async def save_all(self, entities: Iterable[T] | AsyncIterable[T]) -> AsyncIterator[T]:
        if entities is None:
            raise ValidationError("entities", "must not be None")
        async for entity in _iterate(entities):
            yield await self._save(entity)

    async def find_by_id(self, id: ID, partition_key: Any = None) -> T | None:
        return await self.template.find_by_id(self.entity_information, id, partition_key)

    async def exists_by_id(self, id: ID, partition_key: Any = None) -> bool:
        return await self.template.exists_by_id(self.entity_information, id, partition_key)

    def find_all(self, sort: Sort | None = None) -> AsyncIterator[T]:
        return self.template.find_all(self.entity_information, sort)

    async def find_page(self, pageable: CosmosPageRequest) -> Page[T]:
        if pageable is None:
            raise ValidationError("pageable", "must not be None")
        return await self.template.paginate_query(
            self.entity_information, DocumentQuery(), pageable
        )

    def find_all_by_id(self, ids: Iterable[ID] | AsyncIterable[ID]) -> AsyncIterator[T]:
        if ids is None:
            raise ValidationError("ids", "must not be None")
        raise UnsupportedOperationError("find_all_by_id")

    async def count(self) -> int:
        return await self.template.count(self.entity_information)

    async def delete_by_id(self, id: ID, partition_key: Any = None) -> None:
        await self.template.delete_by_id(self.entity_information, id, partition_key)

    async def delete(self, entity: T) -> None:
        await self._delete_entity(entity)

    async def delete_all(self, entities: Iterable[T] | AsyncIterable[T] | None = None) -> None:
        """Delete the given entities, or every document in the container."""
        if entities is None:
            await self.template.delete_all(self.entity_information)
            return
        async for entity in _iterate(entities):
            await self._delete_entity(entity)

    def _query_method(self, tree: PartTree) -> Callable[..., Any]:
        def execute(
            *args: Any, sort: Sort | None = None, pageable: CosmosPageRequest | None = None
        ) -> Any:
            query = tree.create_query(args, sort)
            if tree.kind is QueryKind.COLLECTION and pageable is None:
                return self.template.find(self.entity_information, query)
            return self._execute(tree, query, pageable)

        execute.__name__ = tree.method_name
        return execute
