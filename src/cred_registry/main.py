"""
Application entry point — wires dependencies and starts the HTTP server.

Composition root: creates the concrete clock and notification log,
builds the registry around them, and hands it to the FastAPI app.
This is the ONLY place where concrete adapters are chosen.

Responsibilities:
  1. Configure structlog (console or JSON lines)
  2. Load and validate configuration from environment
  3. Create the notification log (in-memory or PostgreSQL outbox)
  4. Build the registry with the configured owner
  5. Serve the API with uvicorn
"""

from __future__ import annotations

import logging
import sys

import structlog
import uvicorn
from railway import ErrorCode, Result

from cred_registry import __version__
from cred_registry.adapters.clock import MonotonicUtcClock
from cred_registry.adapters.event_log import InMemoryEventLog, PsycopgEventLog
from cred_registry.config import AppSettings
from cred_registry.registry import CredentialRegistry


def configure_structlog(log_level: str = "INFO", log_format: str = "console") -> None:
    """
    Configure structlog for structured logging.

    "json": JSON lines to stdout (machine-readable).
    "console": colored, human-readable output.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


type _EventLog = InMemoryEventLog | PsycopgEventLog


def create_event_log(settings: AppSettings) -> _EventLog:
    """
    Instantiate the configured notification log.

    The PostgreSQL outbox table is created on first use; a failure to do
    so aborts startup.
    """
    if settings.events.backend == "postgres":
        assert settings.database is not None  # guaranteed by AppSettings validator
        event_log = PsycopgEventLog(dsn=settings.database.get_dsn())
        schema = event_log.ensure_schema()
        if schema.is_failure():
            raise RuntimeError(schema.error().full_stack_trace())
        return event_log
    return InMemoryEventLog()


def build_registry(settings: AppSettings) -> CredentialRegistry:
    """Create the registry with the configured owner as its creator."""
    return CredentialRegistry(
        creator=settings.registry.owner,
        clock=MonotonicUtcClock(),
        publisher=create_event_log(settings),
        emit_verification_events=settings.registry.emit_verification_events,
    )


def load_settings() -> Result[AppSettings]:
    """Read settings from the environment; validation errors land on the failure track."""
    return Result.from_computation(AppSettings, ErrorCode.CONFIGURATION_ERROR, "Configuration error")


def main() -> None:
    """Wire dependencies and serve the registry API."""
    loaded = load_settings()
    if loaded.is_failure():
        print(f"FATAL: {loaded.error().message} — {loaded.error().exception}", file=sys.stderr)  # noqa: T201
        sys.exit(1)
    settings = loaded.value()

    configure_structlog(settings.log_level, settings.log_format)
    log = structlog.get_logger()

    log.info(
        "app.starting",
        version=__version__,
        log_level=settings.log_level,
        owner=settings.registry.owner,
        event_backend=settings.events.backend,
    )

    try:
        registry = build_registry(settings)
    except Exception as e:
        log.error("app.fatal_error", error=str(e))
        sys.exit(1)

    from cred_registry.asgi import create_app

    app = create_app(registry=registry, settings=settings)

    try:
        uvicorn.run(app, host=settings.api.host, port=settings.api.port, log_level=settings.log_level.lower())
    except KeyboardInterrupt:
        log.info("app.shutdown", reason="signal received")


if __name__ == "__main__":
    main()
