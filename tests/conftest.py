"""Shared pytest configuration for the expense tracker test-suite."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterable, Iterator
from pathlib import Path

import pytest


def _insert_repo_root() -> None:
    """Make sure the repository root is importable without an install."""

    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_insert_repo_root()

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from expense_tracker.client import ExpenseClient  # noqa: E402
from expense_tracker.database import Database  # noqa: E402
from expense_tracker.logging import JSON_ENV_FLAG, LEVEL_ENV_FLAG, ROOT_LOGGER  # noqa: E402
from expense_tracker.server import create_app  # noqa: E402


def pytest_report_header(config: pytest.Config) -> Iterable[str]:  # pragma: no cover - pytest hook
    log_level = os.environ.get(LEVEL_ENV_FLAG, "INFO")
    return [f"expense-tracker repo: {Path.cwd()}", f"{LEVEL_ENV_FLAG}={log_level}"]


@pytest.fixture(autouse=True)
def _isolate_logging(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Pin the log level and drop handlers attached during a test."""

    monkeypatch.setenv(LEVEL_ENV_FLAG, "INFO")
    monkeypatch.setenv(JSON_ENV_FLAG, "0")
    yield
    package_logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture()
def database() -> Iterator[Database]:
    db = Database("sqlite://")
    db.open()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def db_session(database: Database) -> Iterator[Session]:
    with database.session_scope() as session:
        yield session


@pytest.fixture()
def client(database: Database) -> Iterator[TestClient]:
    with TestClient(create_app(database)) as test_client:
        yield test_client


@pytest.fixture()
def api_client(client: TestClient) -> ExpenseClient:
    return ExpenseClient("http://testserver", session=client)
