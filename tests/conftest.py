"""
Shared test fixtures and helpers for the cred-registry test suite.

Provides a deterministic clock, an in-memory notification log, and a
registry wired to both, plus a registry with one institution already
registered.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from cred_registry.adapters.event_log import InMemoryEventLog
from cred_registry.registry import CredentialRegistry

OWNER = "0xOWNER000000000000000000000000000000000001"
INSTITUTION = "0xACME0000000000000000000000000000000000002"
OTHER_INSTITUTION = "0xGLOBEX00000000000000000000000000000000003"
HOLDER = "0xHOLDER0000000000000000000000000000000004"
OTHER_HOLDER = "0xHOLDER0000000000000000000000000000000005"
STRANGER = "0xSTRANGER00000000000000000000000000000006"


class TickingClock:
    """Deterministic clock: each call returns one second later than the previous one."""

    def __init__(self, start: datetime | None = None) -> None:
        self._current = start or datetime(2026, 1, 1, 9, 0, 0, tzinfo=UTC)
        self.calls = 0

    def now(self) -> datetime:
        self._current += timedelta(seconds=1)
        self.calls += 1
        return self._current


@pytest.fixture()
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture()
def event_log() -> InMemoryEventLog:
    return InMemoryEventLog()


@pytest.fixture()
def registry(clock: TickingClock, event_log: InMemoryEventLog) -> CredentialRegistry:
    """A fresh registry created by OWNER."""
    return CredentialRegistry(creator=OWNER, clock=clock, publisher=event_log)


@pytest.fixture()
def acme(registry: CredentialRegistry) -> CredentialRegistry:
    """The registry with INSTITUTION registered as Acme University."""
    result = registry.register_institution(
        OWNER,
        principal=INSTITUTION,
        name="Acme University",
        email="registrar@acme.edu",
        accreditation_id="ACC1",
        country="US",
    )
    assert result.is_success()
    return registry
