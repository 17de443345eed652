import time
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from backend.app.main import app


@pytest.fixture(scope="session")
def client() -> TestClient:
    """Application client with startup run: tables created and demo data seeded."""

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def wait_for() -> Callable[[Callable[[], bool]], bool]:
    def _wait(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(0.05)
        return predicate()

    return _wait
