"""
Unit tests for the query and verification surface.

Queries need no caller identity, never fail except for an out-of-range
certificate index, and never change state.
"""

from __future__ import annotations

from unittest.mock import MagicMock

from railway import ErrorCode, Result, ResultAssertions

from cred_registry.adapters.event_log import InMemoryEventLog
from cred_registry.domain.events import CertificateVerified
from cred_registry.domain.models import NULL_PRINCIPAL
from cred_registry.registry import CredentialRegistry
from tests.conftest import HOLDER, INSTITUTION, OTHER_HOLDER, OTHER_INSTITUTION, OWNER, STRANGER, TickingClock


def _issue_two(registry: CredentialRegistry) -> None:
    registry.register_institution(OWNER, OTHER_INSTITUTION, "Globex Institute", "", "ACC2", "DE")
    registry.issue_certificate(INSTITUTION, "Ada Lovelace", "S-001", "BSc Mathematics", "First", "Qm1", HOLDER)
    registry.issue_certificate(OTHER_INSTITUTION, "Ada Lovelace", "G-77", "MSc Computing", "Merit", "Qm2", HOLDER)


class TestInstitutionQueries:
    """Verify authorization lookup and details."""

    def test_unknown_principal(self, registry: CredentialRegistry) -> None:
        """
        GIVEN a principal never registered
        WHEN queried
        THEN it is not authorized and its details are all empty.
        """
        assert registry.is_institution_authorized(STRANGER) is False
        details = registry.get_institution_details(STRANGER)
        assert details.principal == STRANGER
        assert details.name == ""
        assert details.is_registered is False

    def test_registered_principal(self, acme: CredentialRegistry) -> None:
        assert acme.is_institution_authorized(INSTITUTION) is True
        details = acme.get_institution_details(INSTITUTION)
        assert details.name == "Acme University"
        assert details.email == "registrar@acme.edu"
        assert details.country == "US"


class TestCertificateQueries:
    """Verify history, count and point lookups."""

    def test_empty_holder(self, registry: CredentialRegistry) -> None:
        assert registry.get_student_certificates(HOLDER) == ()
        assert registry.get_certificate_count(HOLDER) == 0

    def test_count_matches_history(self, acme: CredentialRegistry) -> None:
        """
        GIVEN a holder with two certificates
        WHEN count and history are read
        THEN the count equals the history length.
        """
        _issue_two(acme)

        assert acme.get_certificate_count(HOLDER) == len(acme.get_student_certificates(HOLDER)) == 2

    def test_details_by_index(self, acme: CredentialRegistry) -> None:
        _issue_two(acme)

        first = ResultAssertions.assert_success(acme.get_certificate_details(HOLDER, 0))
        second = ResultAssertions.assert_success(acme.get_certificate_details(HOLDER, 1))

        assert first.program == "BSc Mathematics"
        assert second.program == "MSc Computing"
        assert second.institution == OTHER_INSTITUTION

    def test_index_out_of_range(self, acme: CredentialRegistry) -> None:
        """
        GIVEN a holder with two certificates
        WHEN index 2 is requested
        THEN it fails with INDEX_OUT_OF_RANGE.
        """
        _issue_two(acme)

        result = acme.get_certificate_details(HOLDER, 2)

        ResultAssertions.assert_failure(result, ErrorCode.INDEX_OUT_OF_RANGE)

    def test_negative_index_out_of_range(self, acme: CredentialRegistry) -> None:
        _issue_two(acme)
        ResultAssertions.assert_failure(acme.get_certificate_details(HOLDER, -1), ErrorCode.INDEX_OUT_OF_RANGE)

    def test_index_on_empty_holder(self, registry: CredentialRegistry) -> None:
        ResultAssertions.assert_failure(registry.get_certificate_details(HOLDER, 0), ErrorCode.INDEX_OUT_OF_RANGE)

    def test_history_snapshot_is_immutable(self, acme: CredentialRegistry) -> None:
        """
        GIVEN a history snapshot taken before a later issuance
        WHEN another certificate is issued
        THEN the earlier snapshot is unchanged.
        """
        acme.issue_certificate(INSTITUTION, "Ada Lovelace", "S-001", "BSc Mathematics", "First", "Qm1", HOLDER)
        snapshot = acme.get_student_certificates(HOLDER)

        acme.issue_certificate(INSTITUTION, "Ada Lovelace", "S-001", "MSc Mathematics", "First", "Qm2", HOLDER)

        assert len(snapshot) == 1
        assert acme.get_certificate_count(HOLDER) == 2


class TestVerifyCertificate:
    """Verify the verification summary."""

    def test_holder_with_certificates(self, acme: CredentialRegistry) -> None:
        """
        GIVEN a holder with certificates from two institutions
        WHEN verified
        THEN the three sequences are index-aligned with the history.
        """
        _issue_two(acme)
        history = acme.get_student_certificates(HOLDER)

        summary = acme.verify_certificate(HOLDER)

        assert summary.has_certificates is True
        assert summary.count == len(history) == 2
        assert summary.institutions == tuple(c.institution for c in history)
        assert summary.programs == tuple(c.program for c in history)
        assert summary.issued_at == tuple(c.issued_at for c in history)

    def test_holder_without_certificates(self, acme: CredentialRegistry) -> None:
        summary = acme.verify_certificate(OTHER_HOLDER)

        assert summary.has_certificates is False
        assert summary.count == 0
        assert summary.institutions == summary.programs == summary.issued_at == ()

    def test_no_event_by_default(self, acme: CredentialRegistry, event_log: InMemoryEventLog) -> None:
        _issue_two(acme)
        acme.verify_certificate(HOLDER)
        assert event_log.of_type(CertificateVerified) == ()


class TestVerificationEvents:
    """Verify the optional informational CertificateVerified notification."""

    def _registry(self, event_log: InMemoryEventLog) -> CredentialRegistry:
        registry = CredentialRegistry(
            creator=OWNER, clock=TickingClock(), publisher=event_log, emit_verification_events=True,
        )
        registry.register_institution(OWNER, INSTITUTION, "Acme University", "", "ACC1", "US")
        return registry

    def test_event_names_latest_issuer(self, event_log: InMemoryEventLog) -> None:
        """
        GIVEN verification events enabled AND a holder with one certificate
        WHEN the holder is verified
        THEN one CertificateVerified names the issuer and is valid.
        """
        registry = self._registry(event_log)
        registry.issue_certificate(INSTITUTION, "Ada Lovelace", "S-001", "BSc Mathematics", "First", "Qm1", HOLDER)

        registry.verify_certificate(HOLDER)

        verified = event_log.of_type(CertificateVerified)
        assert len(verified) == 1
        assert verified[0].holder == HOLDER
        assert verified[0].institution == INSTITUTION
        assert verified[0].is_valid is True

    def test_event_for_unknown_holder(self, event_log: InMemoryEventLog) -> None:
        registry = self._registry(event_log)

        registry.verify_certificate(STRANGER)

        verified = event_log.of_type(CertificateVerified)
        assert len(verified) == 1
        assert verified[0].institution == NULL_PRINCIPAL
        assert verified[0].is_valid is False

    def _registry_with(self, publisher: MagicMock) -> CredentialRegistry:
        registry = CredentialRegistry(
            creator=OWNER, clock=TickingClock(), publisher=publisher, emit_verification_events=True,
        )
        registry.register_institution(OWNER, INSTITUTION, "Acme University", "", "ACC1", "US")
        registry.issue_certificate(INSTITUTION, "Ada Lovelace", "S-001", "BSc Mathematics", "First", "Qm1", HOLDER)
        return registry

    def test_failed_publish_keeps_summary(self) -> None:
        """
        GIVEN a publisher that accepts mutations but rejects CertificateVerified
        WHEN the holder is verified
        THEN the summary is still returned in full.
        """
        publisher = MagicMock()
        publisher.publish.side_effect = lambda event: (
            Result.failure(ErrorCode.DATABASE_ERROR, "outbox down")
            if isinstance(event, CertificateVerified)
            else Result.success(event)
        )
        registry = self._registry_with(publisher)

        summary = registry.verify_certificate(HOLDER)

        assert summary.count == 1
        assert summary.institutions == (INSTITUTION,)

    def test_raising_publisher_keeps_summary(self) -> None:
        """
        GIVEN a publisher that raises on CertificateVerified
        WHEN the holder is verified
        THEN no exception escapes and the summary is still returned.
        """
        publisher = MagicMock()

        def _publish(event):
            if isinstance(event, CertificateVerified):
                raise RuntimeError("outbox down")
            return Result.success(event)

        publisher.publish.side_effect = _publish
        registry = self._registry_with(publisher)

        summary = registry.verify_certificate(HOLDER)

        assert summary.count == 1
        assert summary.has_certificates is True
        assert summary.programs == ("BSc Mathematics",)


class TestInstitutionStatus:
    """Verify the combined record-and-flag lookup."""

    def test_registered(self, acme: CredentialRegistry) -> None:
        institution, authorized = acme.get_institution_status(INSTITUTION)

        assert institution.name == "Acme University"
        assert institution.is_registered is True
        assert authorized is True

    def test_removed_is_consistent(self, acme: CredentialRegistry) -> None:
        """
        GIVEN a removed institution
        WHEN its status is read
        THEN the cleared record and the dropped flag come back together.
        """
        acme.remove_institution(OWNER, INSTITUTION)

        institution, authorized = acme.get_institution_status(INSTITUTION)

        assert institution.is_registered is False
        assert authorized is False

    def test_reads_under_one_lock_acquisition(self, acme: CredentialRegistry) -> None:
        lock = MagicMock()
        acme._lock = lock

        acme.get_institution_status(INSTITUTION)

        assert lock.__enter__.call_count == 1
