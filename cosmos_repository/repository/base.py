"""
Shared plumbing for blocking and async repositories.

Resolves the domain class (from the generic base or an explicit argument),
looks up its entity information and turns ``find_by_*`` style attribute
access into derived query methods.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, TypeVar, get_args, get_origin

from ..core.template import CosmosTemplate
from ..exceptions import InvalidQueryMethodError, QueryMethodNotFoundError, ValidationError
from ..logging_utils import RepositoryLoggerAdapter
from ..mapping.entity_information import CosmosEntityInformation, get_entity_information
from ..query.criteria import DocumentQuery
from ..query.derivation import PartTree, QueryKind, is_query_method_name, parse_query_method
from ..query.pageable import CosmosPageRequest

logger = logging.getLogger(__name__)

T = TypeVar("T")
ID = TypeVar("ID")


def resolve_domain_class(repository_class: type) -> type | None:
    """Find T in ``class XRepository(CosmosRepository[T, ID])``."""
    for klass in repository_class.__mro__:
        for base in getattr(klass, "__orig_bases__", ()):
            origin = get_origin(base)
            if isinstance(origin, type) and issubclass(origin, RepositoryBase):
                args = get_args(base)
                if args and isinstance(args[0], type):
                    return args[0]
    return None


class RepositoryBase(Generic[T, ID]):
    """Common state of CosmosRepository and ReactiveCosmosRepository.

    The domain class comes from the ``domain_class`` argument, a
    ``domain_class`` class attribute, or the first generic argument.
    """

    domain_class: type | None = None

    def __init__(self, template: CosmosTemplate, domain_class: type[T] | None = None):
        domain_class = domain_class or type(self).domain_class or resolve_domain_class(type(self))
        if domain_class is None:
            raise ValidationError(
                "domain_class", f"cannot determine the domain class of {type(self).__name__}"
            )
        self.template = template
        self.entity_information: CosmosEntityInformation[T, ID] = get_entity_information(
            domain_class
        )
        self.domain_class = domain_class
        self.log = RepositoryLoggerAdapter(logger, self.entity_information)

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails
        if name.startswith("_") or "entity_information" not in self.__dict__:
            raise AttributeError(name)
        if not is_query_method_name(name):
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        try:
            tree = parse_query_method(self.entity_information.domain_class, name)
        except InvalidQueryMethodError as e:
            raise QueryMethodNotFoundError(name, e.reason) from e
        return self._query_method(tree)

    def _query_method(self, tree: PartTree) -> Callable[..., Any]:
        raise NotImplementedError

    async def _save(self, entity: T) -> T:
        if entity is None:
            raise ValidationError("entity", "must not be None")
        if self.entity_information.is_new(entity):
            return await self.template.insert(self.entity_information, entity)
        return await self.template.upsert(self.entity_information, entity)

    async def _delete_entity(self, entity: T) -> None:
        if entity is None:
            raise ValidationError("entity", "must not be None")
        info = self.entity_information
        await self.template.delete_by_id(
            info, info.get_id(entity), info.get_partition_key_field_value(entity)
        )

    async def _execute(
        self, tree: PartTree, query: DocumentQuery, pageable: CosmosPageRequest | None
    ) -> Any:
        """Run a derived query and shape the result by the method's kind."""
        info = self.entity_information
        self.log.debug(
            f"Executing derived query {tree.method_name}", extra={"operation": tree.kind.value}
        )
        if pageable is not None:
            if tree.kind is not QueryKind.COLLECTION:
                raise InvalidQueryMethodError(
                    tree.method_name, "paging applies to collection queries only"
                )
            return await self.template.paginate_query(info, query, pageable)
        if tree.kind is QueryKind.COLLECTION:
            return [entity async for entity in self.template.find(info, query)]
        if tree.kind is QueryKind.SINGLE:
            return await self.template.find_one(info, query)
        if tree.kind is QueryKind.COUNT:
            return await self.template.count(info, query)
        if tree.kind is QueryKind.EXISTS:
            return await self.template.exists(info, query)
        return await self.template.delete(info, query)
