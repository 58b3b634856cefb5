"""
FastAPI + Uvicorn ASGI application — the registry's HTTP boundary.

Architecture:
  - FastAPI: routes translate HTTP into registry operations
  - Result → JSONResponse via railway.http_support (error code → status)
  - Caller identity: taken verbatim from a request header. Authentication
    happens upstream (gateway, mTLS terminator); this layer only forwards
    the already-authenticated principal. A missing header is the null
    principal, which every mutating operation rejects as UNAUTHORIZED.

Entry point for production: uvicorn cred_registry.asgi:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated, Any

import structlog
from fastapi import Depends, FastAPI, HTTPException, Path, Request
from fastapi.responses import JSONResponse
from railway.http_support import build_fastapi_response

from cred_registry import __version__
from cred_registry.config import AppSettings
from cred_registry.main import build_registry, configure_structlog, load_settings
from cred_registry.registry import CredentialRegistry
from cred_registry.schemas import (
    CertificateView,
    InstitutionView,
    IssueCertificateRequest,
    RegisterInstitutionRequest,
    TransferOwnershipRequest,
    VerificationView,
)

DEFAULT_CALLER_HEADER = "X-Caller-Principal"

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Startup: build the registry from settings unless one was injected.
    Shutdown: nothing to release; the registry lives in memory.
    """
    if app.state.registry is None:
        loaded = load_settings()
        if loaded.is_failure():
            log.error("asgi.startup_error", error=str(loaded.error()), cause=str(loaded.error().exception))
            raise RuntimeError(str(loaded.error())) from loaded.error().exception
        settings = loaded.value()

        configure_structlog(settings.log_level, settings.log_format)
        app.state.registry = build_registry(settings)
        app.state.caller_header = settings.api.caller_header
        app.state.event_backend = settings.events.backend

    log.info(
        "asgi.startup",
        version=__version__,
        owner=app.state.registry.get_owner(),
        event_backend=app.state.event_backend,
    )

    yield

    log.info("asgi.shutdown_complete")


def _registry(request: Request) -> CredentialRegistry:
    registry = request.app.state.registry
    if registry is None:
        raise HTTPException(status_code=503, detail="Registry not initialized")
    return registry


def _caller(request: Request) -> str:
    return request.headers.get(request.app.state.caller_header, "")


RegistryDep = Annotated[CredentialRegistry, Depends(_registry)]
CallerDep = Annotated[str, Depends(_caller)]


def create_app(
    registry: CredentialRegistry | None = None,
    settings: AppSettings | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    With `registry` given (tests, the composition root), startup does not
    read settings from the environment.
    """
    app = FastAPI(
        title="cred-registry",
        description="Academic credential registry — institution authorization, issuance and verification",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.registry = registry
    app.state.caller_header = settings.api.caller_header if settings else DEFAULT_CALLER_HEADER
    app.state.event_backend = settings.events.backend if settings else "memory"

    # ─────────────────────── Probes ───────────────────────

    @app.get("/health")
    async def health() -> JSONResponse:
        """Liveness: 200 once a registry is wired, 503 before."""
        if app.state.registry is None:
            return JSONResponse(
                status_code=503,
                content={"status": "unhealthy", "reason": "registry not initialized"},
            )
        return JSONResponse(status_code=200, content={"status": "healthy"})

    @app.get("/info")
    async def info() -> dict[str, Any]:
        return {
            "name": "cred-registry",
            "version": __version__,
            "owner": app.state.registry.get_owner() if app.state.registry else None,
            "event_backend": app.state.event_backend,
        }

    # ─────────────────────── Ownership ───────────────────────

    @app.get("/owner")
    def get_owner(registry: RegistryDep) -> dict[str, str]:
        return {"owner": registry.get_owner()}

    @app.post("/ownership")
    def transfer_ownership(
        body: TransferOwnershipRequest, registry: RegistryDep, caller: CallerDep,
    ) -> JSONResponse:
        result = registry.transfer_ownership(caller, body.new_owner)
        return build_fastapi_response(result.map(lambda owner: {"owner": owner}))

    # ─────────────────────── Institutions ───────────────────────

    @app.post("/institutions")
    def register_institution(
        body: RegisterInstitutionRequest, registry: RegistryDep, caller: CallerDep,
    ) -> JSONResponse:
        result = registry.register_institution(
            caller,
            principal=body.principal,
            name=body.name,
            email=body.email,
            accreditation_id=body.accreditation_id,
            country=body.country,
        )
        return build_fastapi_response(
            result.map(lambda inst: InstitutionView.from_domain(inst, True).model_dump(mode="json")),
            success_status=201,
        )

    @app.delete("/institutions/{principal}")
    def remove_institution(principal: str, registry: RegistryDep, caller: CallerDep) -> JSONResponse:
        result = registry.remove_institution(caller, principal)
        return build_fastapi_response(
            result.map(lambda inst: InstitutionView.from_domain(inst, False).model_dump(mode="json"))
        )

    @app.get("/institutions/{principal}")
    def get_institution(principal: str, registry: RegistryDep) -> InstitutionView:
        institution, authorized = registry.get_institution_status(principal)
        return InstitutionView.from_domain(institution, authorized)

    @app.get("/institutions/{principal}/authorization")
    def get_authorization(principal: str, registry: RegistryDep) -> dict[str, Any]:
        return {"principal": principal, "authorized": registry.is_institution_authorized(principal)}

    # ─────────────────────── Certificates ───────────────────────

    @app.post("/certificates")
    def issue_certificate(
        body: IssueCertificateRequest, registry: RegistryDep, caller: CallerDep,
    ) -> JSONResponse:
        result = registry.issue_certificate(
            caller,
            holder_name=body.holder_name,
            holder_external_id=body.holder_external_id,
            program=body.program,
            grade=body.grade,
            content_hash=body.content_hash,
            holder=body.holder,
        )
        return build_fastapi_response(
            result.map(lambda cert: CertificateView.from_domain(cert).model_dump(mode="json")),
            success_status=201,
        )

    @app.get("/holders/{holder}/certificates")
    def get_student_certificates(holder: str, registry: RegistryDep) -> list[CertificateView]:
        return [CertificateView.from_domain(c) for c in registry.get_student_certificates(holder)]

    # Declared before /{index} so "count" is never parsed as an index.
    @app.get("/holders/{holder}/certificates/count")
    def get_certificate_count(holder: str, registry: RegistryDep) -> dict[str, Any]:
        return {"holder": holder, "count": registry.get_certificate_count(holder)}

    @app.get("/holders/{holder}/certificates/{index}")
    def get_certificate_details(
        holder: str, index: Annotated[int, Path(ge=0)], registry: RegistryDep,
    ) -> JSONResponse:
        result = registry.get_certificate_details(holder, index)
        return build_fastapi_response(
            result.map(lambda cert: CertificateView.from_domain(cert).model_dump(mode="json"))
        )

    @app.get("/holders/{holder}/verification")
    def verify_certificate(holder: str, registry: RegistryDep) -> VerificationView:
        return VerificationView.from_domain(registry.verify_certificate(holder))

    return app


app = create_app()


if __name__ == "__main__":
    # For local testing: python -m uvicorn cred_registry.asgi:app --reload
    import uvicorn

    uvicorn.run(
        "cred_registry.asgi:app",
        host="0.0.0.0",
        port=8000,
        reload=False,
        log_level="info",
    )
