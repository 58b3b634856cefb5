"""
Ports — Protocol-based interfaces for the registry's collaborators.

These define WHAT the registry needs from its substrate without
specifying HOW it is provided:

  Domain ← Ports (protocols) ← Adapters (implementations)

Each port is a Protocol (structural typing) so adapters satisfy the
contract simply by implementing the methods — no inheritance.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from railway.result import Result

from cred_registry.domain.events import RegistryEvent


@runtime_checkable
class Clock(Protocol):
    """
    Port: the substrate's clock.

    Must be monotonic: successive calls never go backwards, so issuance
    timestamps within one holder's history are non-decreasing.
    """

    def now(self) -> datetime: ...


@runtime_checkable
class EventPublisher(Protocol):
    """
    Port: append a notification to the externally observable log.

    Called inside the registry's critical section, before the state change
    it describes is applied. A Failure aborts the whole transition, so a
    notification is recorded iff the state changed.
    """

    def publish(self, event: RegistryEvent) -> Result[RegistryEvent]: ...
