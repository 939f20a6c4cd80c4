"""
Async data access operations over Cosmos DB containers.

CosmosTemplate is what every repository delegates to. It converts entities to
documents, routes point operations to the right partition, generates SQL for
document queries and pages through results with continuation tokens. Errors
raised by the SDK propagate unchanged.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator, Iterable, Mapping
from typing import Any, TypeVar

from azure.core import MatchConditions
from azure.cosmos.aio import ContainerProxy
from azure.cosmos.exceptions import CosmosResourceNotFoundError

from ..exceptions import IncorrectResultSizeError, ValidationError
from ..mapping.converter import MappingCosmosConverter
from ..mapping.entity_information import CosmosEntityInformation
from ..query.criteria import Criteria, CriteriaType, DocumentQuery
from ..query.pageable import CosmosPageRequest, Page
from ..query.sort import Sort
from ..query.sql import CosmosQuery, QuerySpecGenerator
from .client import CosmosClientWrapper
from .diagnostics import ResponseDiagnostics, ResponseDiagnosticsProcessor

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CosmosTemplate:
    """Async operations on the containers described by entity information."""

    def __init__(
        self,
        client: CosmosClientWrapper,
        converter: MappingCosmosConverter | None = None,
        response_diagnostics_processor: ResponseDiagnosticsProcessor | None = None,
    ):
        self.client = client
        self.converter = converter or MappingCosmosConverter()
        self.response_diagnostics_processor = response_diagnostics_processor

    # =========================================================================
    # Containers
    # =========================================================================

    async def create_container_if_not_exists(
        self, info: CosmosEntityInformation
    ) -> ContainerProxy:
        return await self.client.create_container_if_not_exists(info)

    async def delete_container(self, info: CosmosEntityInformation) -> None:
        await self.client.delete_container(info.container_name)

    async def _container(self, info: CosmosEntityInformation) -> ContainerProxy:
        return await self.client.get_container(info)

    def _on_response(self, headers: Mapping[str, Any], result: Any) -> None:
        diagnostics = ResponseDiagnostics.from_headers(headers)
        logger.debug(
            f"Cosmos response: {diagnostics.request_charge} RU "
            f"(activity_id={diagnostics.activity_id})",
            extra={
                "request_charge": diagnostics.request_charge,
                "activity_id": diagnostics.activity_id,
            },
        )
        if self.response_diagnostics_processor is not None:
            self.response_diagnostics_processor(diagnostics)

    # =========================================================================
    # Writes
    # =========================================================================

    async def insert(self, info: CosmosEntityInformation, entity: T) -> T:
        """Create a new document; fails if a document with the same id exists.

        A missing str id is generated before the write.
        """
        if entity is None:
            raise ValidationError("entity", "must not be None")
        if info.get_id(entity) is None:
            if info.id_type is not str:
                raise ValidationError(info.id_attribute, "int ids must be assigned before insert")
            info.set_id(entity, str(uuid.uuid4()))

        container = await self._container(info)
        document = self.converter.write(entity)
        logger.debug(
            f"Inserting {info.container_name}/{document['id']} "
            f"(partition_key={info.get_partition_key_field_value(entity)})",
            extra={"container": info.container_name, "operation": "insert"},
        )
        response = await container.create_item(body=document, response_hook=self._on_response)
        return self._saved(info, entity, response)

    async def upsert(self, info: CosmosEntityInformation, entity: T) -> T:
        """Insert or replace a document.

        Versioned entities holding an etag are written conditionally; a stale
        etag surfaces as the SDK's precondition-failed error.
        """
        if entity is None:
            raise ValidationError("entity", "must not be None")

        container = await self._container(info)
        document = self.converter.write(entity)
        kwargs: dict[str, Any] = {}
        etag = info.get_version_field_value(entity)
        if info.is_versioned and etag:
            kwargs["etag"] = etag
            kwargs["match_condition"] = MatchConditions.IfNotModified
        logger.debug(
            f"Upserting {info.container_name}/{document.get('id')} "
            f"(partition_key={info.get_partition_key_field_value(entity)})",
            extra={"container": info.container_name, "operation": "upsert"},
        )
        response = await container.upsert_item(
            body=document, response_hook=self._on_response, **kwargs
        )
        return self._saved(info, entity, response)

    def _saved(self, info: CosmosEntityInformation, entity: T, response: dict[str, Any]) -> T:
        if info.is_versioned:
            info.set_version_field_value(entity, response.get("_etag"))
        return self.converter.read(info.domain_class, response)

    # =========================================================================
    # Point reads
    # =========================================================================

    def _point_partition_key(
        self, info: CosmosEntityInformation, item_id: Any, partition_key: Any
    ) -> Any:
        """Partition key for a point operation, None when it has to be looked up."""
        if partition_key is not None:
            return partition_key
        if not info.has_partition_key:
            return str(item_id)
        return None

    async def find_by_id(
        self, info: CosmosEntityInformation, item_id: Any, partition_key: Any = None
    ) -> Any:
        """Read one entity by id, None when absent."""
        if item_id is None:
            raise ValidationError("id", "must not be None")

        key = self._point_partition_key(info, item_id, partition_key)
        if key is None:
            query = DocumentQuery(Criteria.is_equal(info.id_attribute, item_id))
            return await self.find_one(info, query)

        container = await self._container(info)
        try:
            document = await container.read_item(
                item=str(item_id), partition_key=key, response_hook=self._on_response
            )
        except CosmosResourceNotFoundError:
            return None
        return self.converter.read(info.domain_class, document)

    async def exists_by_id(
        self, info: CosmosEntityInformation, item_id: Any, partition_key: Any = None
    ) -> bool:
        return await self.find_by_id(info, item_id, partition_key) is not None

    async def find_by_ids(self, info: CosmosEntityInformation, ids: Iterable[Any]) -> list[Any]:
        if ids is None:
            raise ValidationError("ids", "must not be None")
        id_list = list(ids)
        if not id_list:
            return []
        query = DocumentQuery(Criteria.where(info.id_attribute, CriteriaType.IN, id_list))
        return [entity async for entity in self.find(info, query)]

    # =========================================================================
    # Queries
    # =========================================================================

    def _generate(self, info: CosmosEntityInformation, query: DocumentQuery) -> CosmosQuery:
        return QuerySpecGenerator(info).generate_find(query)

    def _query_options(self, info: CosmosEntityInformation, query: DocumentQuery) -> dict[str, Any]:
        options: dict[str, Any] = {}
        key = query.partition_key_value(info.partition_key_attribute)
        if key is not None:
            options["partition_key"] = key
        return options

    async def _query_documents(
        self, info: CosmosEntityInformation, query: DocumentQuery
    ) -> AsyncIterator[dict[str, Any]]:
        container = await self._container(info)
        spec = self._generate(info, query)
        logger.debug(f"Querying {info.container_name}: {spec}")

        returned = 0
        async for document in container.query_items(
            query=spec.sql, parameters=spec.parameters, **self._query_options(info, query)
        ):
            yield document
            returned += 1
            # Never hand out more than LIMIT items, whatever the service returns
            if query.limit is not None and returned >= query.limit:
                break

    async def find(self, info: CosmosEntityInformation, query: DocumentQuery) -> AsyncIterator[Any]:
        """Stream the entities matching a query."""
        async for document in self._query_documents(info, query):
            yield self.converter.read(info.domain_class, document)

    async def find_all(
        self, info: CosmosEntityInformation, sort: Sort | None = None
    ) -> AsyncIterator[Any]:
        async for entity in self.find(info, DocumentQuery().with_sort(sort)):
            yield entity

    async def find_one(self, info: CosmosEntityInformation, query: DocumentQuery) -> Any:
        """Single-result query: the entity, None when nothing matches.

        Raises:
            IncorrectResultSizeError: more than one document matches
        """
        if query.limit is None:
            query = query.with_offset_limit(query.offset or 0, 2)
        results = [entity async for entity in self.find(info, query)]
        if len(results) > 1:
            raise IncorrectResultSizeError(1, len(results), info.container_name)
        return results[0] if results else None

    async def paginate_query(
        self, info: CosmosEntityInformation, query: DocumentQuery, pageable: CosmosPageRequest
    ) -> Page[Any]:
        """Fetch one page of results starting at the pageable's continuation token.

        The returned page carries the continuation token for the next page,
        None once the results are exhausted.
        """
        if pageable is None:
            raise ValidationError("pageable", "must not be None")

        query = query.with_sort(pageable.sort)
        container = await self._container(info)
        spec = self._generate(info, query)
        logger.debug(
            f"Paging {info.container_name} (page={pageable.page}, size={pageable.size}): {spec}"
        )

        pages = container.query_items(
            query=spec.sql,
            parameters=spec.parameters,
            max_item_count=pageable.size,
            **self._query_options(info, query),
        ).by_page(pageable.request_continuation)

        documents: list[dict[str, Any]] = []
        continuation: str | None = None
        async for page in pages:
            documents = [document async for document in page]
            continuation = pages.continuation_token
            # Cross-partition queries may return empty pages before the data
            if documents or continuation is None:
                break

        content = [self.converter.read(info.domain_class, d) for d in documents]
        total = await self.count(info, query)
        next_request = CosmosPageRequest(pageable.page, pageable.size, continuation, pageable.sort)
        return Page(content, next_request, total)

    async def count(
        self, info: CosmosEntityInformation, query: DocumentQuery | None = None
    ) -> int:
        query = query or DocumentQuery()
        container = await self._container(info)
        spec = QuerySpecGenerator(info).generate_count(query)
        total = 0
        async for value in container.query_items(
            query=spec.sql, parameters=spec.parameters, **self._query_options(info, query)
        ):
            total += int(value)
        return total

    async def exists(self, info: CosmosEntityInformation, query: DocumentQuery) -> bool:
        return await self.count(info, query) > 0

    # =========================================================================
    # Deletes
    # =========================================================================

    async def delete_by_id(
        self, info: CosmosEntityInformation, item_id: Any, partition_key: Any = None
    ) -> None:
        """Delete one document.

        Without a partition key (and with a partition key field declared) the
        document is located by id first.
        """
        if item_id is None:
            raise ValidationError("id", "must not be None")

        key = self._point_partition_key(info, item_id, partition_key)
        container = await self._container(info)
        if key is not None:
            await container.delete_item(
                item=str(item_id), partition_key=key, response_hook=self._on_response
            )
            return

        query = DocumentQuery(Criteria.is_equal(info.id_attribute, item_id))
        documents = [document async for document in self._query_documents(info, query)]
        for document in documents:
            await self._delete_document(info, container, document)

    async def _delete_document(
        self, info: CosmosEntityInformation, container: ContainerProxy, document: dict[str, Any]
    ) -> None:
        key_name = info.partition_key_field_name or "id"
        await container.delete_item(
            item=document["id"],
            partition_key=document.get(key_name),
            response_hook=self._on_response,
        )

    async def delete(self, info: CosmosEntityInformation, query: DocumentQuery) -> list[Any]:
        """Delete every document matching the query; returns the deleted entities."""
        container = await self._container(info)
        documents = [document async for document in self._query_documents(info, query)]
        for document in documents:
            await self._delete_document(info, container, document)
        logger.debug(f"Deleted {len(documents)} document(s) from {info.container_name}")
        return [self.converter.read(info.domain_class, d) for d in documents]

    async def delete_all(self, info: CosmosEntityInformation) -> None:
        await self.delete(info, DocumentQuery())
