"""
Conversion between domain dataclasses and Cosmos DB JSON documents.
"""

from __future__ import annotations

import dataclasses
from datetime import date, datetime
from enum import Enum
from typing import Any, TypeVar, get_args, get_origin, get_type_hints
from uuid import UUID

from .annotations import field_property_name
from .entity_information import (
    ETAG_PROPERTY_NAME,
    ID_PROPERTY_NAME,
    get_entity_information,
    unwrap_optional,
)

T = TypeVar("T")


def to_json_value(value: Any) -> Any:
    """Convert a Python value into something the SDK can serialize as JSON."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Enum):
        return to_json_value(value.value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            field_property_name(f): to_json_value(getattr(value, f.name))
            for f in dataclasses.fields(value)
        }
    if isinstance(value, dict):
        return {str(k): to_json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_json_value(v) for v in value]
    return value


def from_json_value(value: Any, tp: Any) -> Any:
    """Convert a JSON value back into the type described by a type hint."""
    if value is None:
        return None
    tp = unwrap_optional(tp)
    if tp is Any:
        return value

    origin = get_origin(tp)
    args = get_args(tp)
    if origin in (list, set, frozenset) and isinstance(value, list):
        item_type = args[0] if args else Any
        return origin(from_json_value(v, item_type) for v in value)
    if origin is tuple and isinstance(value, list):
        if len(args) == 2 and args[1] is Ellipsis:
            return tuple(from_json_value(v, args[0]) for v in value)
        if args:
            return tuple(from_json_value(v, t) for v, t in zip(value, args))
        return tuple(value)
    if origin is dict and isinstance(value, dict):
        value_type = args[1] if len(args) == 2 else Any
        return {k: from_json_value(v, value_type) for k, v in value.items()}
    if origin is not None or not isinstance(tp, type):
        return value

    if dataclasses.is_dataclass(tp) and isinstance(value, dict):
        hints = get_type_hints(tp)
        kwargs = {}
        for f in dataclasses.fields(tp):
            key = field_property_name(f)
            if f.init and key in value:
                kwargs[f.name] = from_json_value(value[key], hints.get(f.name, Any))
        return tp(**kwargs)
    if issubclass(tp, Enum):
        return tp(value)
    if tp is datetime and isinstance(value, str):
        return datetime.fromisoformat(value)
    if tp is date and isinstance(value, str):
        return date.fromisoformat(value)
    if tp is UUID and isinstance(value, str):
        return UUID(value)
    if tp is int and isinstance(value, str):
        return int(value)
    if tp is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    return value


class MappingCosmosConverter:
    """Maps entities to documents using their CosmosEntityInformation.

    The id field is written as ``id`` (as a string), the version field as
    ``_etag``, every other field under its property name.
    """

    def write(self, entity: Any) -> dict[str, Any]:
        info = get_entity_information(type(entity))
        document: dict[str, Any] = {}
        for f in info.fields:
            value = getattr(entity, f.name)
            name = info.property_name(f.name)
            if name == ID_PROPERTY_NAME and f.name == info.id_attribute:
                if value is not None:
                    document[ID_PROPERTY_NAME] = str(value)
            elif name == ETAG_PROPERTY_NAME:
                if value is not None:
                    document[ETAG_PROPERTY_NAME] = value
            else:
                document[name] = to_json_value(value)
        return document

    def read(self, domain_class: type[T], document: dict[str, Any]) -> T:
        info = get_entity_information(domain_class)
        hints = info.type_hints
        kwargs: dict[str, Any] = {}
        for f in info.fields:
            if not f.init:
                continue
            name = info.property_name(f.name)
            if name not in document:
                if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
                    kwargs[f.name] = None
                continue
            kwargs[f.name] = from_json_value(document[name], hints.get(f.name, Any))
        return domain_class(**kwargs)
