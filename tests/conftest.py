from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from sqlalchemy import Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Ensure the repository root is importable (so `import expectdb` works without
# an installed package).
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from expectdb import DB, Model, open_db  # noqa: E402


@dataclass
class User(Model):
    name: str = ""
    email: str | None = None
    tags: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class FrozenUser:
    name: str = ""


class Account:
    def __init__(self, owner: str = "", balance: int = 0):
        self.owner = owner
        self.balance = balance


class Base(DeclarativeBase):
    pass


class UserRecord(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=True)
    email: Mapped[str] = mapped_column(String(120), nullable=True)


class UserRepository:
    """Code under test: talks to the handle the way application code would."""

    def __init__(self, db: DB):
        self.db = db

    def find_by_name(self, name: str) -> tuple[User, BaseException | None]:
        user = User()
        result = self.db.where("name = ?", name).first(user)
        return user, result.error

    def register(self, user: User) -> BaseException | None:
        if not self.db.has_table(user):
            self.db.create_table(user)
        return self.db.create(user).error


@pytest.fixture
def db() -> DB:
    return open_db("sqlite")
