"""
Entity metadata resolution.

Reads the mapping declarations of a dataclass once and exposes everything the
template and repositories need: id / partition key / version fields, container
settings and the indexing policy. Invalid declarations fail at construction.
"""

from __future__ import annotations

import dataclasses
import functools
import os
import re
import types
from typing import Any, Generic, TypeVar, Union, get_args, get_origin, get_type_hints

from ..exceptions import EntityMetadataError
from .annotations import (
    ROLE_ID,
    ROLE_PARTITION_KEY,
    ROLE_VERSION,
    IndexingMode,
    document_settings,
    field_marker,
    field_property_name,
    indexing_policy_settings,
)

T = TypeVar("T")
ID = TypeVar("ID")

ID_PROPERTY_NAME = "id"
ETAG_PROPERTY_NAME = "_etag"

DEFAULT_REQUEST_UNIT = 4000
DEFAULT_TIME_TO_LIVE = -1
DEFAULT_INDEXING_POLICY_AUTOMATIC = True
DEFAULT_INDEXING_POLICY_MODE = IndexingMode.CONSISTENT
DEFAULT_AUTO_CREATE_CONTAINER = True

_PLACEHOLDER = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::([^}]*))?\}")


def unwrap_optional(tp: Any) -> Any:
    """Return X for Optional[X] / X | None, otherwise the type unchanged."""
    origin = get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in get_args(tp) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def resolve_expression(domain_class: type, expression: str) -> str:
    """Expand ``${NAME}`` / ``${NAME:default}`` placeholders from the environment."""

    def replace(match: re.Match[str]) -> str:
        name, default = match.group(1), match.group(2)
        value = os.environ.get(name, default)
        if value is None:
            raise EntityMetadataError(
                domain_class, f"environment variable {name} referenced by container name is not set"
            )
        return value

    return _PLACEHOLDER.sub(replace, expression)


class CosmosEntityInformation(Generic[T, ID]):
    """Mapping metadata for one domain class.

    Use get_entity_information() rather than the constructor so the metadata
    is computed once per class.
    """

    def __init__(self, domain_class: type[T]):
        if not isinstance(domain_class, type) or not dataclasses.is_dataclass(domain_class):
            raise EntityMetadataError(domain_class, "domain class must be a dataclass")

        self.domain_class = domain_class
        self._fields = {f.name: f for f in dataclasses.fields(domain_class)}
        try:
            self._type_hints = get_type_hints(domain_class)
        except NameError as e:
            raise EntityMetadataError(domain_class, f"unresolvable type hint: {e}") from e

        self._id_field = self._resolve_id_field()
        self._partition_key_field = self._resolve_single(
            ROLE_PARTITION_KEY, "Azure Cosmos DB supports only one partition key field"
        )
        self._version_field = self._resolve_single(
            ROLE_VERSION, "Azure Cosmos DB supports only one version field"
        )
        if self._partition_key_field is not None:
            self._require_str(self._partition_key_field, "partition key")
        if self._version_field is not None:
            self._require_str(self._version_field, "version")
        self._check_reserved_properties()

        settings = document_settings(domain_class)
        self._container_name = self._resolve_container_name(settings)
        self._request_unit = (
            settings.ru if settings and settings.ru is not None else DEFAULT_REQUEST_UNIT
        )
        self._time_to_live = (
            settings.time_to_live
            if settings and settings.time_to_live is not None
            else DEFAULT_TIME_TO_LIVE
        )
        self._auto_create_container = (
            settings.auto_create_container
            if settings and settings.auto_create_container is not None
            else DEFAULT_AUTO_CREATE_CONTAINER
        )
        self._indexing_policy = self._resolve_indexing_policy()

    # =========================================================================
    # Resolution
    # =========================================================================

    def _marked(self, role: str) -> list[dataclasses.Field]:
        return [f for f in self._fields.values() if field_marker(f).get("role") == role]

    def _resolve_id_field(self) -> dataclasses.Field:
        marked = self._marked(ROLE_ID)
        if len(marked) > 1:
            raise EntityMetadataError(self.domain_class, "only one field may be marked with id_field()")
        id_field = marked[0] if marked else self._fields.get(ID_PROPERTY_NAME)
        if id_field is None:
            raise EntityMetadataError(
                self.domain_class, "domain class should contain an id_field() or a field named id"
            )
        if unwrap_optional(self._type_hints.get(id_field.name)) not in (str, int):
            raise EntityMetadataError(self.domain_class, "type of id field must be str or int")
        return id_field

    def _resolve_single(self, role: str, message: str) -> dataclasses.Field | None:
        marked = self._marked(role)
        if len(marked) > 1:
            raise EntityMetadataError(self.domain_class, message)
        return marked[0] if marked else None

    def _require_str(self, field: dataclasses.Field, label: str) -> None:
        if unwrap_optional(self._type_hints.get(field.name)) is not str:
            raise EntityMetadataError(self.domain_class, f"type of {label} field must be str")

    def _check_reserved_properties(self) -> None:
        reserved = {
            ID_PROPERTY_NAME: self._id_field,
            ETAG_PROPERTY_NAME: self._version_field,
        }
        for f in self._fields.values():
            for name, owner in reserved.items():
                if f is not owner and self.property_name(f.name) == name:
                    raise EntityMetadataError(
                        self.domain_class, f"field {f.name} clashes with document property {name}"
                    )

    def _resolve_container_name(self, settings: Any) -> str:
        if settings is not None and settings.container:
            return resolve_expression(self.domain_class, settings.container)
        return self.domain_class.__name__

    def _resolve_indexing_policy(self) -> dict[str, Any]:
        settings = indexing_policy_settings(self.domain_class)
        automatic = DEFAULT_INDEXING_POLICY_AUTOMATIC
        mode = DEFAULT_INDEXING_POLICY_MODE
        policy: dict[str, Any] = {}
        if settings is not None:
            if settings.automatic is not None:
                automatic = settings.automatic
            if settings.mode is not None:
                mode = settings.mode
            # Undeclared paths are left out so the service defaults apply
            if settings.include_paths:
                policy["includedPaths"] = [{"path": p} for p in settings.include_paths]
            if settings.exclude_paths:
                policy["excludedPaths"] = [{"path": p} for p in settings.exclude_paths]
        return {"automatic": automatic, "indexingMode": mode.value, **policy}

    # =========================================================================
    # Identifier
    # =========================================================================

    @property
    def id_attribute(self) -> str:
        return self._id_field.name

    @property
    def id_type(self) -> type:
        return unwrap_optional(self._type_hints[self._id_field.name])

    def get_id(self, entity: T) -> ID:
        return getattr(entity, self._id_field.name)

    def set_id(self, entity: T, value: ID) -> None:
        setattr(entity, self._id_field.name, value)

    def is_new(self, entity: T) -> bool:
        """An entity is new when its id is unset (None, or 0 for int ids)."""
        value = self.get_id(entity)
        if value is None:
            return True
        return self.id_type is int and value == 0

    # =========================================================================
    # Partition key
    # =========================================================================

    @property
    def has_partition_key(self) -> bool:
        return self._partition_key_field is not None

    @property
    def partition_key_attribute(self) -> str | None:
        return self._partition_key_field.name if self._partition_key_field else None

    @property
    def partition_key_field_name(self) -> str | None:
        """Document property holding the partition key."""
        if self._partition_key_field is None:
            return None
        return self.property_name(self._partition_key_field.name)

    @property
    def partition_key_path(self) -> str:
        """Container partition key path; the id doubles as key when none is declared."""
        return "/" + (self.partition_key_field_name or ID_PROPERTY_NAME)

    def get_partition_key_field_value(self, entity: T) -> str | None:
        if self._partition_key_field is None:
            return None
        return getattr(entity, self._partition_key_field.name)

    # =========================================================================
    # Version
    # =========================================================================

    @property
    def is_versioned(self) -> bool:
        return self._version_field is not None

    @property
    def version_field_name(self) -> str | None:
        return self._version_field.name if self._version_field else None

    def get_version_field_value(self, entity: T) -> str | None:
        if self._version_field is None:
            return None
        return getattr(entity, self._version_field.name)

    def set_version_field_value(self, entity: T, value: str | None) -> None:
        if self._version_field is not None:
            setattr(entity, self._version_field.name, value)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def fields(self) -> list[dataclasses.Field]:
        return list(self._fields.values())

    @property
    def type_hints(self) -> dict[str, Any]:
        return self._type_hints

    def has_attribute(self, attribute: str) -> bool:
        return attribute in self._fields

    def property_name(self, attribute: str) -> str:
        """Document property an attribute is stored under.

        Names that are not attributes of the class (e.g. ``_ts``) pass through.
        """
        if attribute == self._id_field.name:
            return ID_PROPERTY_NAME
        if self._version_field is not None and attribute == self._version_field.name:
            return ETAG_PROPERTY_NAME
        field = self._fields.get(attribute)
        return field_property_name(field) if field is not None else attribute

    # =========================================================================
    # Container settings
    # =========================================================================

    @property
    def container_name(self) -> str:
        return self._container_name

    @property
    def request_unit(self) -> int:
        return self._request_unit

    @property
    def time_to_live(self) -> int:
        return self._time_to_live

    @property
    def indexing_policy(self) -> dict[str, Any]:
        return dict(self._indexing_policy)

    @property
    def is_auto_create_container(self) -> bool:
        return self._auto_create_container

    def __repr__(self) -> str:
        return (
            f"CosmosEntityInformation({self.domain_class.__name__}, "
            f"container={self._container_name!r}, id={self.id_attribute!r}, "
            f"partition_key={self.partition_key_attribute!r})"
        )


@functools.lru_cache(maxsize=None)
def get_entity_information(domain_class: type) -> CosmosEntityInformation:
    """Return the (memoized) entity information for a domain class."""
    return CosmosEntityInformation(domain_class)
