from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .projection import record_state


def deep_equal(a: Any, b: Any) -> bool:
    """
    Structural equality of two arbitrary values.

    Values of different types are never equal, so ``1`` and ``1.0`` or ``True``
    and ``1`` differ. Lists and tuples compare element by element, mappings by
    key, sets by content. Mapping keys and set members must match in type as
    well, so ``{1}`` and ``{1.0}`` differ. Records (mapped instances, dataclasses and plain
    objects without their own ``__eq__``) compare field by field, so two
    distinct instances holding the same data are equal. Anything else falls
    back to ``==``.
    """
    return _equal(a, b, set())


def _equal(a: Any, b: Any, seen: set[tuple[int, int]]) -> bool:
    if a is b:
        return True
    if type(a) is not type(b):
        return False
    if isinstance(a, type) or callable(a):
        return False

    # Cycles: a pair already under comparison is assumed equal.
    key = (id(a), id(b))
    if key in seen:
        return True
    seen.add(key)

    if isinstance(a, Mapping):
        if len(a) != len(b):
            return False
        typed_b = {(type(k), k): v for k, v in b.items()}
        for k, v in a.items():
            typed_key = (type(k), k)
            if typed_key not in typed_b or not _equal(v, typed_b[typed_key], seen):
                return False
        return True

    if isinstance(a, (list, tuple)):
        return len(a) == len(b) and all(_equal(x, y, seen) for x, y in zip(a, b))

    if isinstance(a, (set, frozenset)):
        return {(type(x), x) for x in a} == {(type(x), x) for x in b}

    state_a = record_state(a, structural_only=True)
    if state_a is not None:
        return _equal(state_a, record_state(b, structural_only=True), seen)

    return bool(a == b)
