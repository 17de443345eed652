from typing import Callable

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from backend.app import models  # noqa: F401 - register tables on the metadata


@pytest.fixture()
def engine():
    """In-memory SQLite shared across sessions so background tasks see the same rows."""

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine) -> Session:
    """Provide an in-memory SQLModel session for isolated tests."""

    with Session(engine) as session:
        yield session


@pytest.fixture()
def session_factory(engine) -> Callable[[], Session]:
    return lambda: Session(engine)
