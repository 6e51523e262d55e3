from __future__ import annotations

import copy
import dataclasses
from collections.abc import Mapping, MutableMapping, MutableSequence, MutableSet
from decimal import Decimal
from types import ModuleType
from typing import Any

from sqlalchemy.orm import Mapper, object_mapper
from sqlalchemy.orm.exc import UnmappedInstanceError

from .errors import OutputParameterError, ProjectionError

_IMMUTABLE = (
    type(None),
    bool,
    int,
    float,
    complex,
    Decimal,
    str,
    bytes,
    tuple,
    frozenset,
    range,
)


def mapper_for(value: Any) -> Mapper | None:
    """Return the ORM mapper of a mapped instance, or ``None`` for anything else."""
    if isinstance(value, (type, *_IMMUTABLE)):
        return None
    try:
        return object_mapper(value)
    except UnmappedInstanceError:
        return None


def _slot_names(cls: type) -> list[str]:
    names: list[str] = []
    for klass in cls.__mro__:
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name not in ("__dict__", "__weakref__") and name not in names:
                names.append(name)
    return names


def _has_own_eq(value: Any) -> bool:
    return type(value).__eq__ is not object.__eq__


def record_state(value: Any, *, structural_only: bool = False) -> dict[str, Any] | None:
    """
    Return the field state of a record-like object.

    Mapped instances are read through their column attributes, dataclasses
    through their fields, other objects through ``__dict__`` and ``__slots__``.
    Returns ``None`` for values that are not records: scalars, containers,
    callables, modules and classes. With ``structural_only`` a type that
    defines its own ``__eq__`` is not treated as a record either.
    """
    if isinstance(value, (type, ModuleType, *_IMMUTABLE)) or callable(value):
        return None
    if isinstance(value, (Mapping, MutableSequence, MutableSet, bytearray)):
        return None

    mapper = mapper_for(value)
    if mapper is not None:
        return {attr.key: getattr(value, attr.key) for attr in mapper.column_attrs}

    if dataclasses.is_dataclass(value):
        return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}

    if structural_only and _has_own_eq(value):
        return None

    state: dict[str, Any] = {}
    if hasattr(value, "__dict__"):
        state.update(
            (k, v) for k, v in vars(value).items() if k != "_sa_instance_state"
        )
    for name in _slot_names(type(value)):
        if hasattr(value, name):
            state[name] = getattr(value, name)
    if not state and not hasattr(value, "__dict__"):
        return None
    return state


def is_mutable_target(value: Any) -> bool:
    """Whether ``value`` is a location a caller can read an output back from."""
    if isinstance(value, _IMMUTABLE):
        return False
    if isinstance(value, (MutableMapping, MutableSequence, MutableSet, bytearray)):
        return True
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return not type(value).__dataclass_params__.frozen
    return record_state(value) is not None


def _as_mapping(source: Any) -> Mapping[str, Any]:
    if isinstance(source, Mapping):
        return source
    state = record_state(source)
    if state is None:
        raise ProjectionError(
            f"Cannot project a value of type {type(source).__name__} into a record"
        )
    return state


def _as_items(source: Any, target: Any) -> list[Any]:
    # Mappings, strings and records would iterate into keys, characters or
    # nothing at all; only collections of items fill a sequence or set.
    if isinstance(source, (Mapping, str, bytes, bytearray, memoryview)) or (
        record_state(source) is not None
    ):
        raise ProjectionError(
            f"Cannot project {type(source).__name__} into {type(target).__name__}"
        )
    try:
        return list(source)
    except TypeError as exc:
        raise ProjectionError(
            f"Cannot project {type(source).__name__} into {type(target).__name__}"
        ) from exc


def _declared_fields(target: Any) -> set[str] | None:
    """Field names of a dataclass or mapped target; ``None`` for open objects."""
    if mapper_for(target) is not None or dataclasses.is_dataclass(target):
        return set(record_state(target) or ())
    return None


def _clone(value: Any) -> Any:
    try:
        return copy.deepcopy(value)
    except (TypeError, AttributeError, copy.Error) as exc:
        raise ProjectionError(
            f"Cannot copy output value of type {type(value).__name__}: {exc}"
        ) from exc


def project(source: Any, target: Any) -> None:
    """
    Write a structural copy of ``source`` into the mutable ``target``.

    Containers are emptied and refilled. Records get one attribute per field of
    the source; target attributes the source does not carry are kept, and
    dataclass or mapped targets ignore source fields they do not declare.
    """
    if not is_mutable_target(target):
        raise OutputParameterError(
            f"Output parameters must be mutable. Got type {type(target).__name__}."
        )

    try:
        if isinstance(target, MutableMapping):
            state = _clone(dict(_as_mapping(source)))
            target.clear()
            target.update(state)
        elif isinstance(target, bytearray):
            if not isinstance(source, (bytes, bytearray, memoryview)):
                raise ProjectionError(
                    f"Cannot project {type(source).__name__} into bytearray"
                )
            target[:] = bytes(source)
        elif isinstance(target, MutableSequence):
            items = _clone(_as_items(source, target))
            target[:] = items
        elif isinstance(target, MutableSet):
            items = _clone(_as_items(source, target))
            target.clear()
            target.update(items)
        else:
            state = _clone(dict(_as_mapping(source)))
            fields = _declared_fields(target)
            for key, value in state.items():
                if fields is None or key in fields:
                    setattr(target, key, value)
    except ProjectionError:
        raise
    except (TypeError, ValueError, AttributeError) as exc:
        raise ProjectionError(
            f"Cannot project {type(source).__name__} into {type(target).__name__}: {exc}"
        ) from exc
