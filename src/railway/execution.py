"""
Execution contexts — separate WHAT (pure logic) from HOW (side effects).

Pure functions describe WHAT should happen and return Result[T].
An ExecutionContext describes HOW it happens: serialization, logging.
They are never mixed.

    ctx = ComposableExecutionContext(
        LoggingExecutionContext(operation="issue_certificate"),
        LockedExecutionContext(lock),
    )
    result = ctx.execute(lambda: transition(state))
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Protocol, TypeVar, runtime_checkable

from railway.failure import ErrorCode, FailureDescription
from railway.result import Failure, Result

T = TypeVar("T")
logger = logging.getLogger("railway.execution")


# ──────────────────────── Protocol (Interface) ────────────────────────


@runtime_checkable
class ExecutionContext(Protocol):
    """
    Protocol for execution contexts.

    Any class implementing execute(computation) satisfies this protocol
    via structural typing — no explicit inheritance needed.
    """

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]:
        """Execute a Result-returning computation within this context."""
        ...


# ──────────────────────── NoOp ────────────────────────


class NoOpExecutionContext:
    """Passthrough execution context — runs the computation as-is."""

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]:
        return computation()


# ──────────────────────── Serialization ────────────────────────


class LockedExecutionContext:
    """
    Run each computation inside one critical section.

    Every computation executed through the same context instance observes
    and mutates shared state one at a time. The lock is re-entrant by
    default so a computation may call back into another locked operation.

        ctx = LockedExecutionContext()
        ctx.execute(lambda: apply_transition(state))
    """

    def __init__(self, lock: threading.RLock | threading.Lock | None = None) -> None:
        self._lock = lock if lock is not None else threading.RLock()

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]:
        with self._lock:
            return computation()


# ──────────────────────── Logging ────────────────────────


class LoggingExecutionContext:
    """
    Execution context that logs entry, exit, duration, and result state.

    Wraps another context (decorator pattern). Any exception escaping the
    inner context is converted to a TECHNICAL_ERROR failure.

        ctx = LoggingExecutionContext(locked_ctx, operation="register_institution")
    """

    def __init__(
        self,
        inner: ExecutionContext | None = None,
        operation: str = "unknown",
        log_level: int = logging.INFO,
    ) -> None:
        self._inner = inner or NoOpExecutionContext()
        self._operation = operation
        self._log_level = log_level

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]:
        logger.log(self._log_level, "[%s] Starting execution", self._operation)
        start = time.monotonic()

        try:
            result = self._inner.execute(computation)
        except Exception as e:
            elapsed = time.monotonic() - start
            logger.error(
                "[%s] Execution failed after %.3fs: %s",
                self._operation,
                elapsed,
                e,
            )
            return Failure(
                FailureDescription(
                    ErrorCode.TECHNICAL_ERROR,
                    f"Execution failed: {e}",
                    e,
                )
            )

        elapsed = time.monotonic() - start
        state = "SUCCESS" if result.is_success() else "FAILURE"
        logger.log(
            self._log_level,
            "[%s] Completed in %.3fs — %s",
            self._operation,
            elapsed,
            state,
        )
        return result


# ──────────────────────── Composable ────────────────────────


class ComposableExecutionContext:
    """
    Compose multiple execution contexts into a single one.

    The first context is the outermost:

        composed = ComposableExecutionContext(
            LoggingExecutionContext(operation="transfer_ownership"),
            LockedExecutionContext(lock),
        )
        # Logging wraps Locked wraps computation
    """

    def __init__(self, *contexts: ExecutionContext) -> None:
        if not contexts:
            raise ValueError("At least one execution context is required")
        self._contexts = list(contexts)

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]:
        wrapped = computation
        for ctx in reversed(self._contexts):
            prev = wrapped
            wrapped = lambda _ctx=ctx, _prev=prev: _ctx.execute(_prev)
        return wrapped()
