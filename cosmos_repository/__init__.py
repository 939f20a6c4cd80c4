"""
Cosmos Repository

Repository-style data access for Azure Cosmos DB.

Provides:
- Entity mapping for dataclasses (id, partition key, version, container settings)
- Criteria / DocumentQuery model with Cosmos SQL generation
- Derived queries from method names (find_by_name_and_age, count_by_..., ...)
- Page requests with continuation tokens
- Blocking and async repositories on top of the azure-cosmos async client

Usage:

    from dataclasses import dataclass

    from cosmos_repository import (
        CosmosConfig, CosmosRepository, CosmosRepositoryFactory, document, partition_key
    )

    @document(container="contacts")
    @dataclass
    class Contact:
        id: str | None = None
        name: str = partition_key(default="")
        age: int = 0

    class ContactRepository(CosmosRepository[Contact, str]):
        pass

    factory = CosmosRepositoryFactory.from_config(CosmosConfig.from_env())
    contacts = factory.get_repository(ContactRepository)
    contacts.save(Contact(name="Alice", age=30))
    adults = contacts.find_by_age_greater_than(18)

Async:

    class ReactiveContactRepository(ReactiveCosmosRepository[Contact, str]):
        pass

    async with CosmosClientWrapper(CosmosConfig.from_env()) as client:
        contacts = ReactiveContactRepository(CosmosTemplate(client))
        await contacts.save(Contact(name="Alice"))
        async for contact in contacts.find_by_name("Alice"):
            ...
"""

# Configuration
from .config import CosmosAuthMethod, CosmosConfig, get_credential

# Data access
from .core import CosmosClientWrapper, CosmosTemplate, ResponseDiagnostics

# Exceptions
from .exceptions import (
    AuthenticationError,
    CosmosAccessError,
    CosmosRepositoryError,
    EntityMetadataError,
    IncorrectResultSizeError,
    InvalidQueryMethodError,
    QueryMethodNotFoundError,
    UnsupportedOperationError,
    ValidationError,
)

# Logging
from .logging_utils import configure_structured_logging

# Mapping
from .mapping import (
    CosmosEntityInformation,
    IndexingMode,
    MappingCosmosConverter,
    document,
    get_entity_information,
    id_field,
    indexing_policy,
    partition_key,
    property_field,
    version_field,
)

# Query model
from .query import (
    CosmosPageRequest,
    Criteria,
    CriteriaType,
    Direction,
    DocumentQuery,
    Order,
    Page,
    Sort,
)

# Repositories
from .repository import (
    CosmosRepository,
    CosmosRepositoryFactory,
    EventLoopThread,
    ReactiveCosmosRepository,
)

__all__ = [
    # Configuration
    "CosmosAuthMethod",
    "CosmosConfig",
    "get_credential",
    # Data access
    "CosmosClientWrapper",
    "CosmosTemplate",
    "ResponseDiagnostics",
    # Mapping
    "CosmosEntityInformation",
    "IndexingMode",
    "MappingCosmosConverter",
    "document",
    "get_entity_information",
    "id_field",
    "indexing_policy",
    "partition_key",
    "property_field",
    "version_field",
    # Query model
    "CosmosPageRequest",
    "Criteria",
    "CriteriaType",
    "Direction",
    "DocumentQuery",
    "Order",
    "Page",
    "Sort",
    # Repositories
    "CosmosRepository",
    "CosmosRepositoryFactory",
    "EventLoopThread",
    "ReactiveCosmosRepository",
    # Logging
    "configure_structured_logging",
    # Exceptions
    "CosmosRepositoryError",
    "EntityMetadataError",
    "ValidationError",
    "InvalidQueryMethodError",
    "QueryMethodNotFoundError",
    "CosmosAccessError",
    "IncorrectResultSizeError",
    "UnsupportedOperationError",
    "AuthenticationError",
]

__version__ = "0.1.0"
