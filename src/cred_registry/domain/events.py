"""
Registry notifications — append-only records of successful state changes.

Exactly one notification is published per successful mutating operation
and none on failure. Off-system indexers consume them from whichever
EventPublisher adapter is wired in.

`CertificateVerified` is the exception: it is informational, emitted by a
read-only query only when the registry is configured to do so.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, ClassVar

from cred_registry.domain.models import Certificate, Institution, Principal


@dataclass(frozen=True, slots=True)
class InstitutionRegistered:
    event_type: ClassVar[str] = "InstitutionRegistered"

    principal: Principal
    name: str
    email: str
    accreditation_id: str
    country: str
    timestamp: datetime

    @staticmethod
    def of(institution: Institution, timestamp: datetime) -> InstitutionRegistered:
        return InstitutionRegistered(
            principal=institution.principal,
            name=institution.name,
            email=institution.email,
            accreditation_id=institution.accreditation_id,
            country=institution.country,
            timestamp=timestamp,
        )


@dataclass(frozen=True, slots=True)
class InstitutionRemoved:
    event_type: ClassVar[str] = "InstitutionRemoved"

    principal: Principal
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class OwnershipTransferred:
    event_type: ClassVar[str] = "OwnershipTransferred"

    previous_owner: Principal
    new_owner: Principal
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class CertificateIssued:
    event_type: ClassVar[str] = "CertificateIssued"

    holder: Principal
    institution: Principal
    holder_name: str
    program: str
    content_hash: str
    timestamp: datetime

    @staticmethod
    def of(certificate: Certificate) -> CertificateIssued:
        return CertificateIssued(
            holder=certificate.holder,
            institution=certificate.institution,
            holder_name=certificate.holder_name,
            program=certificate.program,
            content_hash=certificate.content_hash,
            timestamp=certificate.issued_at,
        )


@dataclass(frozen=True, slots=True)
class CertificateVerified:
    event_type: ClassVar[str] = "CertificateVerified"

    holder: Principal
    institution: Principal
    is_valid: bool
    timestamp: datetime


type RegistryEvent = (
    InstitutionRegistered
    | InstitutionRemoved
    | OwnershipTransferred
    | CertificateIssued
    | CertificateVerified
)


def event_payload(event: RegistryEvent) -> dict[str, Any]:
    """JSON-ready payload of an event: field values with timestamps as ISO 8601."""
    payload = asdict(event)
    payload["timestamp"] = event.timestamp.isoformat()
    return payload
