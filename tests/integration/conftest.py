"""
Integration test fixtures — PostgreSQL testcontainer and schema setup.

Provides a real PostgreSQL instance for each test session via testcontainers.
The registry_events table is created by the adapter itself; each test gets
an empty table via truncation.
"""

from __future__ import annotations

import psycopg
import pytest
from testcontainers.postgres import PostgresContainer

from cred_registry.adapters.event_log import PsycopgEventLog

TRUNCATE_EVENTS = "TRUNCATE registry_events RESTART IDENTITY;"


def _psycopg_dsn(container: PostgresContainer) -> str:
    return container.get_connection_url().replace("postgresql+psycopg2", "postgresql")


@pytest.fixture(scope="session")
def postgres_container() -> PostgresContainer:
    """Start a PostgreSQL container for the entire test session."""
    with PostgresContainer("postgres:16-alpine") as pg:
        assert PsycopgEventLog(_psycopg_dsn(pg)).ensure_schema().is_success()
        yield pg


@pytest.fixture()
def dsn(postgres_container: PostgresContainer) -> str:
    """Return a psycopg-compatible DSN with an empty registry_events table."""
    connection_url = _psycopg_dsn(postgres_container)
    with psycopg.connect(connection_url) as conn:
        conn.execute(TRUNCATE_EVENTS)
        conn.commit()
    return connection_url
