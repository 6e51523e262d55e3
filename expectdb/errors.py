from __future__ import annotations


class ExpectationError(AssertionError):
    """Base class for every mismatch recorded by a :class:`expectdb.DB` handle."""

    def __init__(self, message: str, name: str | None = None):
        super().__init__(message)
        self.name = name


class UnexpectedCallError(ExpectationError):
    pass


class CallMismatchError(ExpectationError):
    def __init__(self, name: str, expected: str):
        super().__init__(f"Unexpected call to {name}; expected {expected}", name)
        self.expected = expected


class ParameterCountError(ExpectationError):
    pass


class ParameterMismatchError(ExpectationError):
    def __init__(self, name: str, position: int, actual: object, expected: object):
        super().__init__(
            f"Unexpected parameter {actual!r} in func {name}; expected {expected!r}",
            name,
        )
        self.position = position
        self.actual = actual
        self.expected = expected


class OutputParameterError(ExpectationError):
    pass


class ProjectionError(ExpectationError):
    pass


class UnmetExpectationsError(ExpectationError):
    pass
