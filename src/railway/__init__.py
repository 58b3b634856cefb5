"""
Railway-Oriented Programming (ROP) support for the credential registry.

Explicit, composable error handling — no exceptions for domain rejections.

    from railway import Result, ErrorCode

    def require_text(value: str, field: str) -> Result[str]:
        if not value.strip():
            return Result.failure(ErrorCode.INVALID_ARGUMENT, f"{field} must not be empty")
        return Result.success(value)
"""

from railway.result import Result, Success, Failure
from railway.failure import ErrorCode, FailureDescription
from railway.execution import (
    ExecutionContext,
    NoOpExecutionContext,
    LockedExecutionContext,
    LoggingExecutionContext,
    ComposableExecutionContext,
)
from railway.result_failures import ResultFailures
from railway.assertions import ResultAssertions

__all__ = [
    "Result",
    "Success",
    "Failure",
    "ErrorCode",
    "FailureDescription",
    "ExecutionContext",
    "NoOpExecutionContext",
    "LockedExecutionContext",
    "LoggingExecutionContext",
    "ComposableExecutionContext",
    "ResultFailures",
    "ResultAssertions",
]

__version__ = "1.0.0"
