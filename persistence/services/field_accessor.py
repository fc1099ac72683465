"""
Single-field boolean accessors built from a declarative field reference.

`resolve_bool_field` turns a descriptor into a `BoolField` capability object:

- a `BoolField` is used as-is,
- a SQLAlchemy instrumented attribute (`Widget.is_deleted`) is resolved against its mapper,
- an attribute name is resolved against the `owner` type passed alongside it.

Validation happens once per (owner, name) and the compiled accessor is cached, so
repeated calls on the same field cost a dict lookup.
"""
from __future__ import annotations

import dataclasses
import inspect
import logging
from dataclasses import dataclass
from functools import lru_cache
from operator import attrgetter
from typing import Any, Callable, Optional

from sqlalchemy import Boolean, inspect as sa_inspect
from sqlalchemy.orm import ColumnProperty, QueryableAttribute

from shared.exceptions import InvalidFieldDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoolField:
    name: str
    get: Callable[[Any], bool]
    set: Callable[[Any, bool], None]


def resolve_bool_field(
    descriptor: Any, owner: Optional[type] = None, entity_type: Optional[type] = None
) -> BoolField:
    """
    `entity_type`, when known, is the class the field will be set on; a descriptor
    owned by an unrelated class is rejected.
    """
    if isinstance(descriptor, BoolField):
        return descriptor

    if isinstance(descriptor, QueryableAttribute):
        _check_owner(descriptor, descriptor.class_, entity_type)
        return _compile(descriptor.class_, descriptor.key)

    if isinstance(descriptor, str):
        owner = owner or entity_type
        if owner is None:
            raise InvalidFieldDescriptor(descriptor, "an attribute name needs the owning entity type")
        _check_owner(descriptor, owner, entity_type)
        return _compile(owner, descriptor)

    raise InvalidFieldDescriptor(
        descriptor, "expected a BoolField, a mapped attribute or an attribute name"
    )


def _check_owner(descriptor: Any, owner: type, entity_type: Optional[type]) -> None:
    if entity_type is not None and not issubclass(entity_type, owner):
        raise InvalidFieldDescriptor(
            descriptor, f"belongs to {owner.__name__}, not to {entity_type.__name__}"
        )


@lru_cache(maxsize=None)
def _compile(owner: type, name: str) -> BoolField:
    mapper = sa_inspect(owner, raiseerr=False)
    if mapper is not None:
        _check_mapped_column(owner, mapper, name)
    else:
        _check_plain_attribute(owner, name)

    logger.debug("Compiled boolean setter for %s.%s", owner.__name__, name)

    def _set(entity: Any, value: bool) -> None:
        setattr(entity, name, value)

    return BoolField(name=name, get=attrgetter(name), set=_set)


def _check_mapped_column(owner: type, mapper, name: str) -> None:
    prop = mapper.attrs.get(name)
    if prop is None:
        raise InvalidFieldDescriptor(f"{owner.__name__}.{name}", "no such mapped attribute")
    if not isinstance(prop, ColumnProperty) or len(prop.columns) != 1:
        raise InvalidFieldDescriptor(f"{owner.__name__}.{name}", "not a single-column property")
    if not isinstance(prop.columns[0].type, Boolean):
        raise InvalidFieldDescriptor(
            f"{owner.__name__}.{name}", f"column type is {prop.columns[0].type!r}, not Boolean"
        )


def _check_plain_attribute(owner: type, name: str) -> None:
    label = f"{owner.__name__}.{name}"

    attr = getattr(owner, name, None)
    if isinstance(attr, property):
        if attr.fset is None:
            raise InvalidFieldDescriptor(label, "read-only property")
        hint = inspect.get_annotations(attr.fget).get("return")
    else:
        hint = _annotation_of(owner, name)
        if hint is None:
            raise InvalidFieldDescriptor(label, "no annotated attribute with that name")

    # postponed annotations arrive as strings
    if hint is not bool and hint != "bool":
        raise InvalidFieldDescriptor(label, f"annotated as {hint!r}, not bool")

    if dataclasses.is_dataclass(owner) and owner.__dataclass_params__.frozen:
        raise InvalidFieldDescriptor(label, "frozen dataclass")
    model_config = getattr(owner, "model_config", None)
    if isinstance(model_config, dict) and model_config.get("frozen"):
        raise InvalidFieldDescriptor(label, "frozen model")


def _annotation_of(owner: type, name: str) -> Any:
    model_fields = getattr(owner, "model_fields", None)
    if isinstance(model_fields, dict) and name in model_fields:
        return model_fields[name].annotation

    for cls in owner.__mro__:
        annotations = inspect.get_annotations(cls)
        if name in annotations:
            return annotations[name]
    return None
