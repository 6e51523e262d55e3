"""
expectdb

Call-expectation test double for a chainable ORM-style database handle.

Tests declare the calls they expect, in order, then run the code under test
against the handle:

    db = expectdb.open_db("postgres")
    db.expect_call("where").with_params("name = ?", "alice")
    db.expect_call("first").with_output(User(name="Alice"))

    load_user(db)

    db.assert_expectations_met()

Nothing is executed against a database; the handle only records and checks
calls.
"""

from .db import DB, open_db
from .equality import deep_equal
from .errors import (
    CallMismatchError,
    ExpectationError,
    OutputParameterError,
    ParameterCountError,
    ParameterMismatchError,
    ProjectionError,
    UnexpectedCallError,
    UnmetExpectationsError,
)
from .expectation import Expectation
from .identity import intercepted
from .models import Model
from .projection import project

# Keep in sync with pyproject.toml version for now (KISS).
__version__ = "0.1.0"

__all__ = [
    "DB",
    "CallMismatchError",
    "Expectation",
    "ExpectationError",
    "Model",
    "OutputParameterError",
    "ParameterCountError",
    "ParameterMismatchError",
    "ProjectionError",
    "UnexpectedCallError",
    "UnmetExpectationsError",
    "deep_equal",
    "intercepted",
    "open_db",
    "project",
    "__version__",
]
