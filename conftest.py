"""
Root conftest for the pytest test suite.

Key Fixtures:
- `anyio_backend`: Specifies the asyncio backend.
- `test_settings`: Settings with no MongoDB connection string, so no test
  ever talks to a real server.
- `report_store`: The store the `/report` route should use. `None` here,
  which leaves the route on the (unset) lifespan connection; feature
  conftests override it with an in-memory store.
- `app_for_testing`: A fresh application per test, with the report store
  dependency overridden when `report_store` is given.
- `client`: A starlette TestClient for `app_for_testing`.
"""

from typing import Any, Generator, Optional

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from coffee_reporting.core.config import Settings
from coffee_reporting.features.reports.router import get_report_store
from coffee_reporting.main import create_app


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(scope="function")
def test_settings() -> Settings:
    return Settings(mongo_uri="", db_timeout_seconds=1.0)


@pytest.fixture(scope="function")
def report_store() -> Optional[Any]:
    return None


@pytest.fixture(scope="function")
def app_for_testing(test_settings: Settings, report_store: Optional[Any]) -> Generator[FastAPI, Any, None]:
    """
    Provides an application built from `test_settings`. When a
    `report_store` is supplied it replaces the MongoDB-backed store.
    """
    app = create_app(test_settings)
    if report_store is not None:
        app.dependency_overrides[get_report_store] = lambda: report_store

    yield app

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(app_for_testing: FastAPI) -> Generator[TestClient, Any, None]:
    with TestClient(app_for_testing) as tc:
        yield tc
