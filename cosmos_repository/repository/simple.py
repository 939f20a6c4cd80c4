"""
Blocking repository.

Every call runs the corresponding async template operation on a background
event loop and waits for it, so the repository can be used from plain
synchronous code:

    class ContactRepository(CosmosRepository[Contact, str]):
        pass

    contacts = ContactRepository(template)
    contacts.save(Contact("1", "Alice"))
    contacts.find_by_name("Alice")
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Callable

from ..core.template import CosmosTemplate
from ..exceptions import ValidationError
from ..query.criteria import DocumentQuery
from ..query.derivation import PartTree, QueryKind
from ..query.pageable import CosmosPageRequest, Page
from ..query.sort import Sort
from .base import ID, RepositoryBase, T
from .loop import EventLoopThread, get_default_loop_thread


class CosmosRepository(RepositoryBase[T, ID]):
    """Blocking CRUD, sorting, paging and derived queries for one domain class.

    The container is created at construction when auto-create is enabled.
    """

    def __init__(
        self,
        template: CosmosTemplate,
        domain_class: type[T] | None = None,
        loop_thread: EventLoopThread | None = None,
    ):
        super().__init__(template, domain_class)
        self.loop_thread = loop_thread or get_default_loop_thread()
        if self.entity_information.is_auto_create_container:
            self.loop_thread.run(
                self.template.create_container_if_not_exists(self.entity_information)
            )

    def _run(self, coro: Any) -> Any:
        return self.loop_thread.run(coro)

    def save(self, entity: T) -> T:
        """Insert a new entity or upsert an existing one."""
        return self._run(self._save(entity))

    def save_all(self, entities: Iterable[T]) -> list[T]:
        if entities is None:
            raise ValidationError("entities", "must not be None")
        return [self.save(entity) for entity in entities]

    def find_by_id(self, id: ID, partition_key: Any = None) -> T | None:
        return self._run(self.template.find_by_id(self.entity_information, id, partition_key))

    def exists_by_id(self, id: ID, partition_key: Any = None) -> bool:
        return self._run(self.template.exists_by_id(self.entity_information, id, partition_key))

    def find_all(self, sort: Sort | None = None) -> list[T]:
        return self.loop_thread.collect(self.template.find_all(self.entity_information, sort))

    def find_page(self, pageable: CosmosPageRequest) -> Page[T]:
        """Fetch one page; pass ``page.next_pageable()`` to get the following one."""
        if pageable is None:
            raise ValidationError("pageable", "must not be None")
        return self._run(
            self.template.paginate_query(self.entity_information, DocumentQuery(), pageable)
        )

    def find_all_by_id(self, ids: Iterable[ID]) -> list[T]:
        if ids is None:
            raise ValidationError("ids", "must not be None")
        return self._run(self.template.find_by_ids(self.entity_information, ids))

    def count(self) -> int:
        return self._run(self.template.count(self.entity_information))

    def delete_by_id(self, id: ID, partition_key: Any = None) -> None:
        self._run(self.template.delete_by_id(self.entity_information, id, partition_key))

    def delete(self, entity: T) -> None:
        self._run(self._delete_entity(entity))

    def delete_all(self, entities: Iterable[T] | None = None) -> None:
        """Delete the given entities, or every document in the container."""
        if entities is None:
            self._run(self.template.delete_all(self.entity_information))
            return
        for entity in entities:
            self.delete(entity)

    def _query_method(self, tree: PartTree) -> Callable[..., Any]:
        def execute(
            *args: Any, sort: Sort | None = None, pageable: CosmosPageRequest | None = None
        ) -> Any:
            query = tree.create_query(args, sort)
            if tree.kind is QueryKind.COLLECTION and pageable is None:
                return self.loop_thread.collect(self.template.find(self.entity_information, query))
            return self._run(self._execute(tree, query, pageable))

        execute.__name__ = tree.method_name
        return execute
