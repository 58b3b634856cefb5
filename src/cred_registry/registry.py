"""
Credential registry — authorization, issuance and verification.

Domain layer. Every mutating operation is one transition:

  guards (role, arguments, uniqueness)
    → build the new record and its notification
      → publish the notification
        → apply the state change

run inside a single critical section. A failure at any stage
short-circuits through the Result railway before the state change is
applied, so a rejected operation leaves state untouched and publishes
nothing.

Queries take the same lock and return immutable snapshots. They need no
authorization.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TypeVar

import structlog
from railway import (
    ComposableExecutionContext,
    LockedExecutionContext,
    LoggingExecutionContext,
    ResultFailures,
)
from railway.failure import ErrorCode, FailureDescription
from railway.result import Result

from cred_registry.domain.events import (
    CertificateIssued,
    CertificateVerified,
    InstitutionRegistered,
    InstitutionRemoved,
    OwnershipTransferred,
    RegistryEvent,
)
from cred_registry.domain.models import (
    NULL_PRINCIPAL,
    Certificate,
    Institution,
    Principal,
    VerificationSummary,
    is_null_principal,
)
from cred_registry.domain.ports import Clock, EventPublisher
from cred_registry.guards import Role, require_principal, require_role, require_text
from cred_registry.state import RegistryState

T = TypeVar("T")

log = structlog.get_logger()


class CredentialRegistry:
    """
    The registry: one owner, authorized institutions, per-holder certificates.

    The creator becomes the owner. Construction fails with ValueError if
    the creator is the null principal.
    """

    def __init__(
        self,
        creator: Principal,
        clock: Clock,
        publisher: EventPublisher,
        emit_verification_events: bool = False,
    ) -> None:
        if is_null_principal(creator):
            raise ValueError("Registry creator must not be the null principal")
        self._state = RegistryState(owner=creator)
        self._clock = clock
        self._publisher = publisher
        self._emit_verification_events = emit_verification_events
        self._lock = threading.RLock()
        self._serialized = LockedExecutionContext(self._lock)

    # ──────────────────────── Institution lifecycle ────────────────────────

    def register_institution(
        self,
        caller: Principal,
        principal: Principal,
        name: str,
        email: str,
        accreditation_id: str,
        country: str,
    ) -> Result[Institution]:
        """
        Authorize `principal` to issue certificates (owner only).

        Overwrites any cleared record left by an earlier removal, with a
        fresh registration timestamp.
        """

        def _transition() -> Result[Institution]:
            return (
                require_role(self._state, caller, Role.OWNER)
                .flat_map(lambda _: require_principal(principal, "principal"))
                .flat_map(lambda _: require_text(name, "name"))
                .flat_map(lambda _: require_text(accreditation_id, "accreditation_id"))
                .flat_map(lambda _: self._require_not_authorized(principal))
                .map(
                    lambda _: Institution(
                        principal=principal,
                        name=name,
                        email=email,
                        accreditation_id=accreditation_id,
                        country=country,
                        is_registered=True,
                        registered_at=self._clock.now(),
                    )
                )
                .flat_map(
                    lambda institution: self._commit(
                        InstitutionRegistered.of(institution, institution.registered_at),
                        lambda: self._state.register(institution),
                    )
                )
            )

        return self._run("register_institution", _transition).peek(
            lambda institution: log.info(
                "registry.institution_registered",
                principal=institution.principal,
                accreditation_id=institution.accreditation_id,
            )
        )

    def remove_institution(self, caller: Principal, principal: Principal) -> Result[Institution]:
        """
        Revoke an institution's authorization (owner only).

        Certificates it already issued stay valid and queryable.
        Returns the cleared record.
        """

        def _transition() -> Result[Institution]:
            return (
                require_role(self._state, caller, Role.OWNER)
                .flat_map(lambda _: self._require_authorized(principal))
                .flat_map(
                    lambda _: self._commit(
                        InstitutionRemoved(principal=principal, timestamp=self._clock.now()),
                        lambda: self._state.revoke(principal),
                    )
                )
            )

        return self._run("remove_institution", _transition).peek(
            lambda _: log.info("registry.institution_removed", principal=principal)
        )

    def transfer_ownership(self, caller: Principal, new_owner: Principal) -> Result[Principal]:
        """Hand the owner role to `new_owner` in one step (owner only)."""

        def _transition() -> Result[Principal]:
            return (
                require_role(self._state, caller, Role.OWNER)
                .flat_map(lambda _: require_principal(new_owner, "new_owner"))
                .flat_map(
                    lambda _: self._commit(
                        OwnershipTransferred(
                            previous_owner=self._state.owner,
                            new_owner=new_owner,
                            timestamp=self._clock.now(),
                        ),
                        lambda: self._state.set_owner(new_owner),
                    )
                )
            )

        return self._run("transfer_ownership", _transition).peek(
            lambda owner: log.info("registry.ownership_transferred", previous_owner=caller, new_owner=owner)
        )

    # ──────────────────────── Issuance ────────────────────────

    def issue_certificate(
        self,
        caller: Principal,
        holder_name: str,
        holder_external_id: str,
        program: str,
        grade: str,
        content_hash: str,
        holder: Principal,
    ) -> Result[Certificate]:
        """
        Issue a certificate from the calling institution to `holder`.

        Permanent: there is no update or retract. The content hash is
        consumed for good, whoever issued it and whoever holds it.
        """

        def _transition() -> Result[Certificate]:
            return (
                require_role(self._state, caller, Role.INSTITUTION)
                .flat_map(lambda _: require_principal(holder, "holder"))
                .flat_map(lambda _: require_text(holder_name, "holder_name"))
                .flat_map(lambda _: require_text(program, "program"))
                .flat_map(lambda _: require_text(content_hash, "content_hash"))
                .flat_map(lambda _: self._require_unused_hash(content_hash))
                .map(
                    lambda _: Certificate(
                        holder_name=holder_name,
                        holder_external_id=holder_external_id,
                        program=program,
                        grade=grade,
                        issued_at=self._clock.now(),
                        content_hash=content_hash,
                        institution=caller,
                        holder=holder,
                    )
                )
                .flat_map(
                    lambda certificate: self._commit(
                        CertificateIssued.of(certificate),
                        lambda: self._state.append(certificate),
                    )
                )
            )

        return self._run("issue_certificate", _transition).peek(
            lambda certificate: log.info(
                "registry.certificate_issued",
                holder=certificate.holder,
                institution=certificate.institution,
                content_hash=certificate.content_hash,
            )
        )

    # ──────────────────────── Queries ────────────────────────

    def get_owner(self) -> Principal:
        with self._lock:
            return self._state.owner

    def is_institution_authorized(self, principal: Principal) -> bool:
        with self._lock:
            return self._state.is_authorized(principal)

    def get_institution_details(self, principal: Principal) -> Institution:
        """
        Stored record for `principal`, or an all-empty one.

        An all-empty record does not distinguish "never registered" from
        "removed"; combine with is_institution_authorized.
        """
        with self._lock:
            return self._state.institution(principal)

    def get_student_certificates(self, holder: Principal) -> tuple[Certificate, ...]:
        with self._lock:
            return self._state.certificates_of(holder)

    def get_certificate_count(self, holder: Principal) -> int:
        with self._lock:
            return self._state.certificate_count(holder)

    def get_certificate_details(self, holder: Principal, index: int) -> Result[Certificate]:
        with self._lock:
            certificates = self._state.certificates_of(holder)
        if not 0 <= index < len(certificates):
            return ResultFailures.index_out_of_range(holder, index, len(certificates))
        return Result.success(certificates[index])

    def verify_certificate(self, holder: Principal) -> VerificationSummary:
        """
        Summarize the holder's certificates in index-aligned sequences.

        With verification events enabled, also publishes one informational
        CertificateVerified naming the issuer of the most recent certificate.
        A failure to publish it is logged and does not affect the answer.
        """
        with self._lock:
            summary = VerificationSummary.of(holder, self._state.certificates_of(holder))
            if self._emit_verification_events:
                event = CertificateVerified(
                    holder=holder,
                    institution=summary.institutions[-1] if summary.has_certificates else NULL_PRINCIPAL,
                    is_valid=summary.has_certificates,
                    timestamp=self._clock.now(),
                )
                Result.from_computation(
                    lambda: self._publisher.publish(event),
                    ErrorCode.TECHNICAL_ERROR,
                    f"Failed to publish {event.event_type}",
                ).flat_map(lambda published: published).peek_failure(
                    lambda err: log.warning("registry.verification_event_failed", holder=holder, error=str(err))
                )
        return summary

    def get_institution_status(self, principal: Principal) -> tuple[Institution, bool]:
        """Stored record and authorization flag, read under one lock acquisition."""
        with self._lock:
            return self._state.institution(principal), self._state.is_authorized(principal)

    # ──────────────────────── Internals ────────────────────────

    def _run(self, operation: str, transition: Callable[[], Result[T]]) -> Result[T]:
        """Execute one transition inside the critical section, logging the rejection if any."""
        ctx = ComposableExecutionContext(
            LoggingExecutionContext(operation=operation, log_level=logging.DEBUG),
            self._serialized,
        )
        return ctx.execute(transition).peek_failure(
            lambda err: _log_rejection(operation, err)
        )

    def _commit(self, event: RegistryEvent, apply: Callable[[], T]) -> Result[T]:
        """Publish the notification, then apply the change it describes."""
        return self._publisher.publish(event).map(lambda _: apply())

    def _require_authorized(self, principal: Principal) -> Result[Principal]:
        if not self._state.is_authorized(principal):
            return ResultFailures.not_registered(principal)
        return Result.success(principal)

    def _require_not_authorized(self, principal: Principal) -> Result[Principal]:
        if self._state.is_authorized(principal):
            return ResultFailures.already_registered(principal)
        return Result.success(principal)

    def _require_unused_hash(self, content_hash: str) -> Result[str]:
        if self._state.is_hash_used(content_hash):
            return ResultFailures.duplicate_hash(content_hash)
        return Result.success(content_hash)


def _log_rejection(operation: str, err: FailureDescription) -> None:
    log.warning(
        "registry.operation_rejected",
        operation=operation,
        error_code=err.code.value,
        message=err.message,
    )
