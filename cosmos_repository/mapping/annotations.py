"""
Declarations for mapping dataclasses onto Cosmos DB containers.

Domain classes are plain dataclasses. Container level settings are attached
with class decorators, field roles with ``dataclasses.field`` metadata:

    @document(container="contacts", ru=400)
    @indexing_policy(exclude_paths=["/notes/*"])
    @dataclass
    class Contact:
        logic_id: str = id_field()
        title: str = partition_key()
        notes: str = property_field(name="note_text", default="")
        etag: str | None = version_field()
"""

from __future__ import annotations

import dataclasses
from dataclasses import MISSING
from enum import Enum
from typing import Any, Callable, TypeVar

METADATA_KEY = "cosmos"
DOCUMENT_ATTR = "__cosmos_document__"
INDEXING_POLICY_ATTR = "__cosmos_indexing_policy__"

ROLE_ID = "id"
ROLE_PARTITION_KEY = "partition_key"
ROLE_VERSION = "version"

C = TypeVar("C", bound=type)


class IndexingMode(Enum):
    """Container indexing mode."""

    CONSISTENT = "consistent"
    LAZY = "lazy"
    NONE = "none"


@dataclasses.dataclass(frozen=True)
class DocumentSettings:
    """Container level settings declared with ``@document``."""

    container: str | None = None
    ru: int | None = None
    time_to_live: int | None = None
    auto_create_container: bool | None = None


@dataclasses.dataclass(frozen=True)
class IndexingPolicySettings:
    """Indexing policy declared with ``@indexing_policy``."""

    automatic: bool | None = None
    mode: IndexingMode | None = None
    include_paths: tuple[str, ...] = ()
    exclude_paths: tuple[str, ...] = ()


def document(
    container: str | None = None,
    *,
    ru: int | None = None,
    time_to_live: int | None = None,
    auto_create_container: bool | None = None,
) -> Callable[[C], C]:
    """Declare the container a domain class is stored in.

    Args:
        container: Container name, may contain ``${ENV}`` or ``${ENV:default}``
            placeholders. Defaults to the class name.
        ru: Provisioned throughput in request units
        time_to_live: Default time to live in seconds (-1: no expiry)
        auto_create_container: Create the container on first use
    """
    settings = DocumentSettings(
        container=container,
        ru=ru,
        time_to_live=time_to_live,
        auto_create_container=auto_create_container,
    )

    def decorate(cls: C) -> C:
        setattr(cls, DOCUMENT_ATTR, settings)
        return cls

    return decorate


def indexing_policy(
    *,
    automatic: bool | None = None,
    mode: IndexingMode | str | None = None,
    include_paths: list[str] | tuple[str, ...] = (),
    exclude_paths: list[str] | tuple[str, ...] = (),
) -> Callable[[C], C]:
    """Declare the indexing policy of the container a domain class lives in."""
    settings = IndexingPolicySettings(
        automatic=automatic,
        mode=IndexingMode(mode) if isinstance(mode, str) else mode,
        include_paths=tuple(include_paths),
        exclude_paths=tuple(exclude_paths),
    )

    def decorate(cls: C) -> C:
        setattr(cls, INDEXING_POLICY_ATTR, settings)
        return cls

    return decorate


def _marked_field(
    marker: dict[str, Any],
    default: Any,
    default_factory: Any,
    **kwargs: Any,
) -> Any:
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[METADATA_KEY] = marker
    return dataclasses.field(
        default=default, default_factory=default_factory, metadata=metadata, **kwargs
    )


def id_field(*, default: Any = MISSING, default_factory: Any = MISSING, **kwargs: Any) -> Any:
    """Mark the identifier field. It is stored as the document ``id``."""
    return _marked_field({"role": ROLE_ID}, default, default_factory, **kwargs)


def partition_key(
    name: str | None = None,
    *,
    default: Any = MISSING,
    default_factory: Any = MISSING,
    **kwargs: Any,
) -> Any:
    """Mark the partition key field, optionally renaming its document property."""
    return _marked_field(
        {"role": ROLE_PARTITION_KEY, "name": name}, default, default_factory, **kwargs
    )


def version_field(*, default: Any = None, default_factory: Any = MISSING, **kwargs: Any) -> Any:
    """Mark the optimistic-locking field. It holds the document ``_etag``."""
    if default_factory is not MISSING:
        default = MISSING
    return _marked_field({"role": ROLE_VERSION}, default, default_factory, **kwargs)


def property_field(
    name: str,
    *,
    default: Any = MISSING,
    default_factory: Any = MISSING,
    **kwargs: Any,
) -> Any:
    """Store a field under a different document property name."""
    return _marked_field({"name": name}, default, default_factory, **kwargs)


def field_marker(field: dataclasses.Field) -> dict[str, Any]:
    """Return the mapping marker attached to a dataclass field (empty if none)."""
    return field.metadata.get(METADATA_KEY, {})


def field_property_name(field: dataclasses.Field) -> str:
    """Document property name of a dataclass field."""
    return field_marker(field).get("name") or field.name


def document_settings(domain_class: type) -> DocumentSettings | None:
    return getattr(domain_class, DOCUMENT_ATTR, None)


def indexing_policy_settings(domain_class: type) -> IndexingPolicySettings | None:
    return getattr(domain_class, INDEXING_POLICY_ATTR, None)
