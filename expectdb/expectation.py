from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from .identity import normalize_name


@dataclass
class Expectation:
    """One anticipated call on a :class:`expectdb.DB` handle."""

    name: str
    params: list[Any] = field(default_factory=list)
    outputs: list[Any] = field(default_factory=list)
    error: BaseException | None = None

    def __post_init__(self) -> None:
        self.name = normalize_name(self.name)

    def with_params(self, *params: Any) -> Expectation:
        """Expect the call to receive ``params``, compared structurally."""
        self.params.extend(params)
        return self

    def with_output(self, *outputs: Any) -> Expectation:
        """
        Write ``outputs`` into the call's arguments, position by position.

        Each value is copied now, so changing it after declaration has no
        effect on what the call produces.
        """
        self.outputs.extend(copy.deepcopy(o) for o in outputs)
        return self

    def with_error(self, error: BaseException | None) -> Expectation:
        """Expose ``error`` as the handle's ``error`` once the call happens."""
        self.error = error
        return self
