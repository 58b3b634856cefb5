"""
Domain models — immutable value objects for institutions and certificates.

These are pure value objects with no behavior beyond small derived views.
A Certificate is a snapshot taken at issuance: it is never updated to
reflect later changes to the issuing institution's record.

All models are frozen dataclasses (immutable).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

type Principal = str

NULL_PRINCIPAL: Principal = "0x0000000000000000000000000000000000000000"


def is_null_principal(principal: Principal | None) -> bool:
    """True for a missing, blank, or zero-address principal."""
    if principal is None or not principal.strip():
        return True
    return principal.strip().lower() == NULL_PRINCIPAL


@dataclass(frozen=True, slots=True)
class Institution:
    """
    An issuing organization, keyed by its principal.

    `is_registered` mirrors the authorization table while the institution
    is active. A removed institution keeps only its key: every attribute
    is cleared and `registered_at` is None.
    """

    principal: Principal
    name: str = ""
    email: str = ""
    accreditation_id: str = ""
    country: str = ""
    is_registered: bool = False
    registered_at: datetime | None = None

    @staticmethod
    def cleared(principal: Principal) -> Institution:
        """The record returned for a principal that is not (or no longer) registered."""
        return Institution(principal=principal)


@dataclass(frozen=True, slots=True)
class Certificate:
    """
    An academic credential issued by an institution to a holder.

    `content_hash` references the off-system credential artifact and is
    globally unique across the registry's lifetime.
    """

    holder_name: str
    holder_external_id: str
    program: str
    grade: str
    issued_at: datetime
    content_hash: str
    institution: Principal
    holder: Principal
    is_issued: bool = True


@dataclass(frozen=True, slots=True)
class VerificationSummary:
    """
    Everything a verifier needs to know about a holder at a glance.

    The three tuples are index-aligned with the holder's certificate
    history: `institutions[i]`, `programs[i]` and `issued_at[i]` all
    describe the i-th certificate.
    """

    holder: Principal
    institutions: tuple[Principal, ...] = field(default_factory=tuple)
    programs: tuple[str, ...] = field(default_factory=tuple)
    issued_at: tuple[datetime, ...] = field(default_factory=tuple)

    @property
    def count(self) -> int:
        return len(self.institutions)

    @property
    def has_certificates(self) -> bool:
        return self.count > 0

    @staticmethod
    def of(holder: Principal, certificates: tuple[Certificate, ...]) -> VerificationSummary:
        return VerificationSummary(
            holder=holder,
            institutions=tuple(c.institution for c in certificates),
            programs=tuple(c.program for c in certificates),
            issued_at=tuple(c.issued_at for c in certificates),
        )
