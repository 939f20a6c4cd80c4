"""
Cosmos DB client wrapper.

Provides a clean interface to Azure Cosmos DB with:
- Connection management
- Database creation
- Container creation from entity metadata (partition key, RU, TTL, indexing)
- Container proxy caching
"""

from __future__ import annotations

import logging
from typing import Any

from azure.cosmos import PartitionKey
from azure.cosmos.aio import ContainerProxy, CosmosClient, DatabaseProxy
from azure.cosmos.exceptions import CosmosHttpResponseError

from ..config import CosmosConfig, get_credential
from ..exceptions import AuthenticationError
from ..mapping.entity_information import CosmosEntityInformation

logger = logging.getLogger(__name__)


class CosmosClientWrapper:
    """Wrapper for the Azure Cosmos DB async client.

    Manages the connection lifecycle and hands out container proxies. A client
    instance may be injected (e.g. one configured by the hosting application);
    injected clients are not closed by the wrapper.
    """

    def __init__(self, config: CosmosConfig, client: CosmosClient | None = None):
        """Initialize the Cosmos DB client wrapper.

        Args:
            config: Cosmos DB configuration
            client: Optional pre-configured async CosmosClient
        """
        self.config = config
        self._client: CosmosClient | None = client
        self._owns_client = client is None
        self._credential: Any = None
        self._database: DatabaseProxy | None = None
        self._containers: dict[str, ContainerProxy] = {}
        self._initialized = False

    async def initialize(self) -> None:
        """Create the client if needed and ensure the database exists."""
        if self._initialized:
            return

        if self._client is None:
            self._credential = get_credential(self.config)
            kwargs: dict[str, Any] = {}
            if self.config.consistency_level:
                kwargs["consistency_level"] = self.config.consistency_level
            self._client = CosmosClient(self.config.endpoint, credential=self._credential, **kwargs)

        try:
            self._database = await self._client.create_database_if_not_exists(
                id=self.config.database_name
            )
        except CosmosHttpResponseError as e:
            if e.status_code in (401, 403):
                raise AuthenticationError(self.config.endpoint, str(e)) from e
            raise

        self._initialized = True
        logger.info(
            f"Connected to Cosmos DB: {self.config.endpoint} "
            f"(database={self.config.database_name}, "
            f"auth={self.config.auth_method.value})"
        )

    async def close(self) -> None:
        """Close the Cosmos DB connection."""
        if self._client is not None and self._owns_client:
            await self._client.close()
            self._client = None
        if self._credential is not None and hasattr(self._credential, "close"):
            await self._credential.close()
            self._credential = None
        self._database = None
        self._containers = {}
        self._initialized = False

    async def __aenter__(self) -> CosmosClientWrapper:
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    @property
    def database(self) -> DatabaseProxy:
        if self._database is None:
            raise RuntimeError("Cosmos client wrapper not initialized")
        return self._database

    # =========================================================================
    # Container Access
    # =========================================================================

    async def create_container_if_not_exists(
        self, entity_information: CosmosEntityInformation
    ) -> ContainerProxy:
        """Create the container described by the entity information if missing."""
        await self.initialize()
        name = entity_information.container_name
        container = await self.database.create_container_if_not_exists(
            id=name,
            partition_key=PartitionKey(path=entity_information.partition_key_path),
            indexing_policy=entity_information.indexing_policy,
            default_ttl=entity_information.time_to_live,
            offer_throughput=entity_information.request_unit,
        )
        self._containers[name] = container
        logger.info(
            f"Container ready: {name} "
            f"(partition_key={entity_information.partition_key_path}, "
            f"ru={entity_information.request_unit}, ttl={entity_information.time_to_live})"
        )
        return container

    async def get_container(self, entity_information: CosmosEntityInformation) -> ContainerProxy:
        """Get a container proxy, creating the container when auto-create is on."""
        name = entity_information.container_name
        if name in self._containers:
            return self._containers[name]
        if entity_information.is_auto_create_container:
            return await self.create_container_if_not_exists(entity_information)
        await self.initialize()
        container = self.database.get_container_client(name)
        self._containers[name] = container
        return container

    async def delete_container(self, container_name: str) -> None:
        """Delete a container and forget its proxy."""
        await self.initialize()
        await self.database.delete_container(container_name)
        self._containers.pop(container_name, None)
        logger.info(f"Container deleted: {container_name}")
