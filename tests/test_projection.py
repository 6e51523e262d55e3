from __future__ import annotations

import threading

import pytest

from expectdb import OutputParameterError, ProjectionError, project
from expectdb.projection import is_mutable_target, record_state


def test_dataclass_into_dataclass():
    from tests.conftest import User

    source = User(id=7, name="Alice", tags=["admin"])
    target = User(name="stale", email="stale@example.com")
    project(source, target)

    assert target == User(id=7, name="Alice", tags=["admin"])

    source.tags.append("owner")
    assert target.tags == ["admin"]


def test_dict_target_is_replaced():
    target = {"stale": True}
    project({"name": "Alice", "roles": ["a"]}, target)
    assert target == {"name": "Alice", "roles": ["a"]}


def test_record_into_dict():
    from tests.conftest import Account

    target: dict = {}
    project(Account("alice", 5), target)
    assert target == {"owner": "alice", "balance": 5}


def test_sequences_and_sets():
    rows = [1]
    project([{"id": 1}, {"id": 2}], rows)
    assert rows == [{"id": 1}, {"id": 2}]

    ids = {9}
    project([1, 2], ids)
    assert ids == {1, 2}

    buf = bytearray(b"old")
    project(b"new bytes", buf)
    assert buf == bytearray(b"new bytes")


def test_mapping_into_mapped_instance():
    from tests.conftest import UserRecord

    record = UserRecord(id=3, name="stale")
    project({"name": "Alice", "email": "alice@example.com"}, record)

    assert record.id == 3
    assert record.name == "Alice"
    assert record.email == "alice@example.com"


def test_mapped_instance_state_is_its_columns():
    from tests.conftest import UserRecord

    assert record_state(UserRecord(id=1, name="Bob")) == {
        "id": 1,
        "name": "Bob",
        "email": None,
    }


def test_target_attributes_missing_from_source_are_kept():
    from tests.conftest import Account

    target = Account("stale", 1)
    target.note = "keep me"
    project({"owner": "alice"}, target)

    assert target.owner == "alice"
    assert target.balance == 1
    assert target.note == "keep me"


@pytest.mark.parametrize("target", [None, 5, 1.5, "text", b"raw", (1, 2), frozenset()])
def test_immutable_targets_are_rejected(target):
    assert not is_mutable_target(target)
    with pytest.raises(OutputParameterError, match="Output parameters must be mutable"):
        project({"name": "Alice"}, target)


def test_frozen_dataclass_is_not_a_target():
    from tests.conftest import FrozenUser

    assert not is_mutable_target(FrozenUser())
    with pytest.raises(OutputParameterError):
        project({"name": "Alice"}, FrozenUser())


def test_mutable_targets():
    from tests.conftest import Account, User, UserRecord

    for target in ({}, [], set(), bytearray(), User(), Account(), UserRecord()):
        assert is_mutable_target(target)


def test_scalar_source_cannot_fill_a_record():
    from tests.conftest import User

    with pytest.raises(ProjectionError):
        project(5, User())


def test_uncopyable_source_raises_projection_error():
    with pytest.raises(ProjectionError, match="Cannot copy"):
        project({"lock": threading.Lock()}, {})


def test_bytearray_needs_bytes():
    with pytest.raises(ProjectionError):
        project([1, 2, 3], bytearray())


@pytest.mark.parametrize(
    "source, target",
    [
        ({"id": 1, "name": "Alice"}, []),
        ("Alice", []),
        (b"Alice", []),
        ({"id": 1}, set()),
        ("Alice", set()),
    ],
)
def test_shape_mismatch_into_collections(source, target):
    with pytest.raises(ProjectionError):
        project(source, target)
    assert not target


def test_record_does_not_fill_a_list():
    from tests.conftest import User

    rows: list = []
    with pytest.raises(ProjectionError):
        project(User(name="Alice"), rows)
    assert rows == []


def test_tuples_and_generators_fill_a_list():
    rows: list = []
    project((1, 2), rows)
    assert rows == [1, 2]

    project((n * 2 for n in range(3)), rows)
    assert rows == [0, 2, 4]


def test_undeclared_fields_are_ignored_by_declared_records():
    from tests.conftest import User, UserRecord

    user = User()
    project({"name": "Alice", "nickname": "al"}, user)
    assert user.name == "Alice"
    assert not hasattr(user, "nickname")

    record = UserRecord()
    project(User(id=4, name="Alice", tags=["admin"]), record)
    assert record.id == 4
    assert record.name == "Alice"
    assert not hasattr(record, "tags")
