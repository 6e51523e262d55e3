from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import create_mock_engine
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError

from .equality import deep_equal
from .errors import (
    CallMismatchError,
    ExpectationError,
    ParameterCountError,
    ParameterMismatchError,
    UnexpectedCallError,
    UnmetExpectationsError,
)
from .expectation import Expectation
from .identity import caller_name, intercepted, normalize_name
from .projection import project

logger = logging.getLogger(__name__)

# ORM-style dialect names that SQLAlchemy spells differently.
_DIALECT_ALIASES = {
    "postgres": "postgresql",
    "sqlite3": "sqlite",
}


def _resolve_url(dialect: str | URL) -> URL:
    if isinstance(dialect, URL):
        return dialect
    if not dialect:
        raise ValueError("dialect must be a non-empty string or URL")
    raw = str(dialect)
    if "://" not in raw:
        raw = f"{_DIALECT_ALIASES.get(raw.lower(), raw.lower())}://"
    try:
        url = make_url(raw)
        url.get_dialect()
    except ArgumentError as exc:
        raise ValueError(f"Unknown dialect: {dialect!r}") from exc
    return url


def _discard(sql: Any, *multiparams: Any, **params: Any) -> None:
    logger.debug("mock engine discarded statement: %s", sql)


class DB:
    """
    Chainable database handle that checks calls against declared expectations.

    Declare calls with :meth:`expect_call`, hand the handle to the code under
    test, then check :meth:`expectations_met`. Mismatches never raise while
    the code under test runs; they are collected and the first one is
    reported at verification time.
    """

    def __init__(self, dialect: str | URL = "sqlite"):
        self.url = _resolve_url(dialect)
        # Placeholder engine; it never opens a connection.
        self.engine = create_mock_engine(self.url, _discard)
        self.error: BaseException | None = None
        self._expectations: list[Expectation] = []
        self._index = 0
        self._errors: list[ExpectationError] = []

    @property
    def expectations(self) -> tuple[Expectation, ...]:
        return tuple(self._expectations)

    @property
    def index(self) -> int:
        return self._index

    @property
    def errors(self) -> tuple[ExpectationError, ...]:
        return tuple(self._errors)

    def expect_call(self, name: str) -> Expectation:
        expectation = Expectation(name)
        self._expectations.append(expectation)
        return expectation

    def expectations_met(self) -> ExpectationError | None:
        if self._errors:
            return self._errors[0]
        if self._index < len(self._expectations):
            return UnmetExpectationsError("Not all expectations met")
        return None

    def assert_expectations_met(self) -> None:
        error = self.expectations_met()
        if error is not None:
            raise error

    def _record(self, error: ExpectationError) -> None:
        logger.debug("expectation failure: %s", error)
        self._errors.append(error)

    def _report(self, name: str | None, *params: Any) -> None:
        """
        Match one call against the next expectation.

        ``name`` may be ``None`` when called straight from a handle method, in
        which case that method's own name is used.
        """
        name = normalize_name(name if name else caller_name(1))
        logger.debug("call %s%r at position %d", name, params, self._index)

        if self._index >= len(self._expectations):
            self._record(UnexpectedCallError(f"Unexpected call to {name}", name))
            return

        expected = self._expectations[self._index]
        if name != expected.name:
            self._record(CallMismatchError(name, expected.name))

        if self._verify_params(name, expected, params):
            self._set_outputs(name, expected, params)

        self.error = expected.error
        self._index += 1

    def _verify_params(self, name: str, expected: Expectation, params: tuple) -> bool:
        # False when the parameter count is wrong; outputs are skipped then.
        if not expected.params:
            return True
        if len(params) < len(expected.params):
            self._record(ParameterCountError("Not enough parameters", name))
            return False
        if len(params) > len(expected.params):
            self._record(ParameterCountError("Too many parameters", name))
            return False

        mismatch = None
        for position, (actual, wanted) in enumerate(zip(params, expected.params)):
            if not deep_equal(actual, wanted) and mismatch is None:
                mismatch = ParameterMismatchError(name, position, actual, wanted)
        if mismatch is not None:
            self._record(mismatch)
        return True

    def _set_outputs(self, name: str, expected: Expectation, params: tuple) -> None:
        for target, output in zip(params, expected.outputs):
            try:
                project(output, target)
            except ExpectationError as exc:
                exc.name = name
                self._record(exc)
                return

    def new(self) -> DB:
        return DB(self.url)

    def close(self) -> None:
        return None

    @intercepted
    def select(self, *params: Any) -> DB:
        return self

    @intercepted
    def first(self, *params: Any) -> DB:
        return self

    @intercepted
    def find(self, *params: Any) -> DB:
        return self

    @intercepted
    def related(self, *params: Any) -> DB:
        return self

    @intercepted
    def update(self, *attrs: Any) -> DB:
        return self

    @intercepted
    def save(self, value: Any) -> DB:
        return self

    @intercepted
    def create(self, value: Any) -> DB:
        return self

    @intercepted
    def create_table(self, *values: Any) -> DB:
        return self

    @intercepted
    def has_table(self, value: Any) -> bool:
        return True

    @intercepted
    def where(self, *params: Any) -> DB:
        return self

    @intercepted
    def model(self, value: Any) -> DB:
        return self

    @intercepted
    def table(self, value: Any) -> DB:
        return self

    @intercepted
    def joins(self, value: Any) -> DB:
        return self

    @intercepted
    def scan(self, value: Any) -> DB:
        return self

    @intercepted
    def delete(self, value: Any) -> DB:
        return self


def open_db(dialect: str | URL = "sqlite", *args: Any, **kwargs: Any) -> DB:
    """
    Open a handle for ``dialect``.

    ``dialect`` is a dialect name (``"postgres"``, ``"mysql"``, ``"sqlite3"``
    and the SQLAlchemy spellings) or a full SQLAlchemy URL. Connection
    arguments are accepted for signature compatibility and ignored; nothing
    is ever connected to.
    """
    db = DB(dialect)
    if args or kwargs:
        logger.debug("ignoring connection arguments for %s", db.url.drivername)
    return db
