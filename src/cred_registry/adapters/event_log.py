"""
Notification log adapters — where registry events become externally observable.

Adapter layer — implements the EventPublisher port twice:

  InMemoryEventLog  → ordered in-process list (default, tests, single node)
  PsycopgEventLog   → append-only `registry_events` outbox table in PostgreSQL

The PostgreSQL adapter writes each event in its own transaction with
parameterized SQL (psycopg v3, no ORM). Any exception is caught at this
adapter boundary via Result.from_computation(), so the registry sees a
DATABASE_ERROR failure and aborts the transition it belongs to.
"""

from __future__ import annotations

import threading
from uuid import uuid4

import psycopg
import structlog
from psycopg.types.json import Jsonb
from railway import ErrorCode
from railway.result import Result

from cred_registry.domain.events import RegistryEvent, event_payload

log = structlog.get_logger()

DDL = """
CREATE TABLE IF NOT EXISTS registry_events (
    sequence     BIGSERIAL PRIMARY KEY,
    id           UUID NOT NULL UNIQUE,
    event_type   TEXT NOT NULL,
    payload      JSONB NOT NULL,
    occurred_at  TIMESTAMP WITH TIME ZONE NOT NULL,
    recorded_at  TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now()
)
"""

_INSERT_EVENT = """
INSERT INTO registry_events (id, event_type, payload, occurred_at)
VALUES (%s, %s, %s, %s)
"""


class InMemoryEventLog:
    """
    Keep published events in publication order.

    Implements the EventPublisher port. Never fails.
    """

    def __init__(self) -> None:
        self._events: list[RegistryEvent] = []
        self._lock = threading.Lock()

    def publish(self, event: RegistryEvent) -> Result[RegistryEvent]:
        with self._lock:
            self._events.append(event)
        log.debug("event_log.published", event_type=event.event_type, backend="memory")
        return Result.success(event)

    @property
    def events(self) -> tuple[RegistryEvent, ...]:
        with self._lock:
            return tuple(self._events)

    def of_type(self, event_cls: type) -> tuple[RegistryEvent, ...]:
        return tuple(e for e in self.events if isinstance(e, event_cls))

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)


class PsycopgEventLog:
    """
    Append registry events to a PostgreSQL outbox table.

    Implements the EventPublisher port. Off-system indexers read the table
    ordered by `sequence`.
    """

    def __init__(self, dsn: str) -> None:
        self._dsn = dsn

    def ensure_schema(self) -> Result[bool]:
        """Create the outbox table if it does not exist yet."""
        return Result.from_computation(
            self._create_table,
            ErrorCode.DATABASE_ERROR,
            "Failed to create registry_events table",
        )

    def publish(self, event: RegistryEvent) -> Result[RegistryEvent]:
        return Result.from_computation(
            lambda: self._append(event),
            ErrorCode.DATABASE_ERROR,
            f"Failed to append {event.event_type} to registry_events",
        )

    def _create_table(self) -> bool:
        with psycopg.connect(self._dsn) as conn, conn.transaction():
            conn.execute(DDL)
        log.info("event_log.schema_ready", table="registry_events")
        return True

    def _append(self, event: RegistryEvent) -> RegistryEvent:
        with psycopg.connect(self._dsn) as conn, conn.transaction(), conn.cursor() as cur:
            cur.execute(
                _INSERT_EVENT,
                (uuid4(), event.event_type, Jsonb(event_payload(event)), event.timestamp),
            )
        log.debug("event_log.published", event_type=event.event_type, backend="postgres")
        return event
