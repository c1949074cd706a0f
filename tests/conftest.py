"""
Pytest fixtures for the request kernel test suite.

Provides:
- Structured-logging setup and JSON log capture
- Deterministic clock, in-memory store and role resolver for service tests
- A real database for store/selector/concurrency tests

Environment Variables:
- DATABASE_URL: database URL for the SQL-backed tests.  If not set, a
  SQLite file under the pytest temp directory is used.
"""

import json
import logging
import os
from io import StringIO
from typing import Generator
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from request_kernel.config import KernelSettings
from request_kernel.db.base import Base
from request_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session_factory,
    init_engine,
    reset_engine,
)
from request_kernel.domain.clock import DeterministicClock
from request_kernel.domain.dtos import Request
from request_kernel.domain.status import RequestStatus
from request_kernel.logging_config import StructuredFormatter, configure_logging
from request_kernel.services.lifecycle_controller import RequestLifecycleController
from request_kernel.services.request_store import InMemoryRequestStore, SqlRequestStore
from request_kernel.services.role_resolver import StaticRoleResolver


DEPARTMENT_ID = "dept-cse"
OTHER_DEPARTMENT_ID = "dept-ece"
CLUB_ID = "club-robotics"
OTHER_CLUB_ID = "club-chess"

DEPT_REVIEWER = "reviewer@cse"
OTHER_DEPT_REVIEWER = "reviewer@ece"
CLUB_OFFICER = "officer@robotics"
OTHER_CLUB_OFFICER = "officer@chess"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Send the suite's JSON logs to a buffer instead of stderr."""
    configure_logging(level=logging.DEBUG, stream=StringIO())


@pytest.fixture
def captured_logs():
    """
    Capture request_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, controller):
            controller.attempt_transition(...)
            logs = captured_logs()
            assert any(r["message"] == "transition_committed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("request_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Domain/service fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock()


@pytest.fixture
def role_resolver() -> StaticRoleResolver:
    """Two departments and two clubs, one actor each."""
    resolver = StaticRoleResolver()
    resolver.register_department_reviewer(DEPT_REVIEWER, DEPARTMENT_ID)
    resolver.register_department_reviewer(OTHER_DEPT_REVIEWER, OTHER_DEPARTMENT_ID)
    resolver.register_club_officer(CLUB_OFFICER, CLUB_ID)
    resolver.register_club_officer(OTHER_CLUB_OFFICER, OTHER_CLUB_ID)
    return resolver


@pytest.fixture
def memory_store() -> InMemoryRequestStore:
    return InMemoryRequestStore()


def build_request(status=RequestStatus.PROCESSING, **overrides) -> Request:
    """A request owned by CLUB_ID under DEPARTMENT_ID."""
    fields = {
        "request_id": uuid4(),
        "status": status,
        "requesting_party": "1RV21CS001",
        "club_id": CLUB_ID,
        "department_id": DEPARTMENT_ID,
        "quantity": 2,
    }
    fields.update(overrides)
    return Request(**fields)


@pytest.fixture
def make_request(memory_store):
    """Factory fixture: store a request at the given status, return it."""

    def _make(status=RequestStatus.PROCESSING, **overrides) -> Request:
        return memory_store.add(build_request(status, **overrides))

    return _make


@pytest.fixture
def controller(memory_store, role_resolver, deterministic_clock) -> RequestLifecycleController:
    return RequestLifecycleController(memory_store, role_resolver, deterministic_clock)


# =============================================================================
# Database fixtures (engine + tables once per suite, rows cleared per test)
# =============================================================================


@pytest.fixture(scope="session")
def db_settings(tmp_path_factory) -> KernelSettings:
    url = os.environ.get("DATABASE_URL")
    if not url:
        db_file = tmp_path_factory.mktemp("db") / "request_kernel_test.db"
        url = f"sqlite:///{db_file}"
    return KernelSettings(database_url=url, pool_size=10, max_overflow=10, log_level="DEBUG")


@pytest.fixture(scope="session")
def db_engine(db_settings):
    """Engine wired the way an application wires it, from KernelSettings."""
    yield init_engine(db_settings)
    reset_engine()


@pytest.fixture(scope="session")
def db_tables(db_engine):
    drop_tables()
    create_tables()
    yield
    drop_tables()


def _delete_all_rows() -> None:
    """Core DELETEs bypass the ORM immutability listeners."""
    with get_engine().begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def session_factory(db_engine, db_tables):
    """Session factory for real commits; all rows are removed at teardown."""
    yield get_session_factory()
    _delete_all_rows()


@pytest.fixture
def session(session_factory) -> Generator[Session, None, None]:
    sess = session_factory()
    try:
        yield sess
    finally:
        sess.close()


@pytest.fixture
def sql_store(session_factory) -> SqlRequestStore:
    return SqlRequestStore(session_factory)


@pytest.fixture
def sql_controller(sql_store, role_resolver, deterministic_clock) -> RequestLifecycleController:
    return RequestLifecycleController(sql_store, role_resolver, deterministic_clock)
