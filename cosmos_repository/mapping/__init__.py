"""
Entity mapping: declarations, metadata resolution and document conversion.
"""

from .annotations import (
    IndexingMode,
    document,
    id_field,
    indexing_policy,
    partition_key,
    property_field,
    version_field,
)
from .converter import MappingCosmosConverter, from_json_value, to_json_value
from .entity_information import CosmosEntityInformation, get_entity_information

__all__ = [
    "CosmosEntityInformation",
    "IndexingMode",
    "MappingCosmosConverter",
    "document",
    "from_json_value",
    "get_entity_information",
    "id_field",
    "indexing_policy",
    "partition_key",
    "property_field",
    "to_json_value",
    "version_field",
]
