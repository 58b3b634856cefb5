"""
Registry state — the single owned object behind every operation.

Holds the Owner, the Institutions and AuthorizedInstitutions tables, the
per-holder CertificateStore and the UsedHashes index. The mutators here
apply one already-validated change each and never check permissions:
that is the job of the guards in `cred_registry.guards`, evaluated by the
registry before any mutator runs.

Readers receive tuples and frozen records, never the internal lists.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cred_registry.domain.models import Certificate, Institution, Principal


@dataclass
class RegistryState:
    owner: Principal
    institutions: dict[Principal, Institution] = field(default_factory=dict)
    authorized: dict[Principal, bool] = field(default_factory=dict)
    certificates: dict[Principal, list[Certificate]] = field(default_factory=dict)
    used_hashes: set[str] = field(default_factory=set)

    # ──────────────────────── Reads ────────────────────────

    def is_authorized(self, principal: Principal) -> bool:
        return self.authorized.get(principal, False)

    def institution(self, principal: Principal) -> Institution:
        return self.institutions.get(principal) or Institution.cleared(principal)

    def certificates_of(self, holder: Principal) -> tuple[Certificate, ...]:
        return tuple(self.certificates.get(holder, ()))

    def certificate_count(self, holder: Principal) -> int:
        return len(self.certificates.get(holder, ()))

    def is_hash_used(self, content_hash: str) -> bool:
        return content_hash in self.used_hashes

    # ──────────────────────── Mutations ────────────────────────

    def set_owner(self, new_owner: Principal) -> Principal:
        self.owner = new_owner
        return new_owner

    def register(self, institution: Institution) -> Institution:
        """Store the record and raise its authorization flag together."""
        self.institutions[institution.principal] = institution
        self.authorized[institution.principal] = True
        return institution

    def revoke(self, principal: Principal) -> Institution:
        """Clear the record and drop its authorization flag together."""
        cleared = Institution.cleared(principal)
        self.institutions[principal] = cleared
        self.authorized[principal] = False
        return cleared

    def append(self, certificate: Certificate) -> Certificate:
        """Consume the content hash and append to the holder's history."""
        self.used_hashes.add(certificate.content_hash)
        self.certificates.setdefault(certificate.holder, []).append(certificate)
        return certificate
