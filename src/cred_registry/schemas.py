"""
HTTP schemas — request bodies and response views for the registry API.

Request models only shape the JSON; emptiness and null-principal checks
stay in the registry guards so every surface rejects the same inputs
with the same error codes.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from cred_registry.domain.models import Certificate, Institution, VerificationSummary


class _RequestBody(BaseModel):
    """Missing or null text fields arrive as "" and are judged by the guards."""

    @field_validator("*", mode="before")
    @classmethod
    def null_as_empty(cls, value: object) -> object:
        return "" if value is None else value


class RegisterInstitutionRequest(_RequestBody):
    principal: str = ""
    name: str = ""
    email: str = ""
    accreditation_id: str = ""
    country: str = ""


class TransferOwnershipRequest(_RequestBody):
    new_owner: str = ""


class IssueCertificateRequest(_RequestBody):
    holder: str = Field(default="", description="Principal of the certificate holder")
    holder_name: str = ""
    holder_external_id: str = ""
    program: str = ""
    grade: str = ""
    content_hash: str = Field(default="", description="Reference to the off-system credential artifact")


class InstitutionView(BaseModel):
    principal: str
    name: str
    email: str
    accreditation_id: str
    country: str
    is_registered: bool
    registered_at: datetime | None
    authorized: bool

    @staticmethod
    def from_domain(institution: Institution, authorized: bool) -> InstitutionView:
        return InstitutionView(
            principal=institution.principal,
            name=institution.name,
            email=institution.email,
            accreditation_id=institution.accreditation_id,
            country=institution.country,
            is_registered=institution.is_registered,
            registered_at=institution.registered_at,
            authorized=authorized,
        )


class CertificateView(BaseModel):
    holder: str
    holder_name: str
    holder_external_id: str
    program: str
    grade: str
    issued_at: datetime
    content_hash: str
    institution: str
    is_issued: bool

    @staticmethod
    def from_domain(certificate: Certificate) -> CertificateView:
        return CertificateView(
            holder=certificate.holder,
            holder_name=certificate.holder_name,
            holder_external_id=certificate.holder_external_id,
            program=certificate.program,
            grade=certificate.grade,
            issued_at=certificate.issued_at,
            content_hash=certificate.content_hash,
            institution=certificate.institution,
            is_issued=certificate.is_issued,
        )


class VerificationView(BaseModel):
    holder: str
    has_certificates: bool
    count: int
    institutions: list[str]
    programs: list[str]
    issued_at: list[datetime]

    @staticmethod
    def from_domain(summary: VerificationSummary) -> VerificationView:
        return VerificationView(
            holder=summary.holder,
            has_certificates=summary.has_certificates,
            count=summary.count,
            institutions=list(summary.institutions),
            programs=list(summary.programs),
            issued_at=list(summary.issued_at),
        )
