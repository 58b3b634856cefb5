"""
Failure description — structured error information for the failure track.

An ErrorCode names the kind of failure; a FailureDescription carries the
code together with a human-readable message, the optional underlying
exception, and the moment the failure was recorded.

Enum + frozen dataclass give us __eq__, __hash__ and __repr__ for free,
and Enum members are singleton-comparable with `is`.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, unique
from typing import Optional


@unique
class ErrorCode(Enum):
    """
    Structured error codes for the failure track.

    The first group are the registry's domain rejections. Each one aborts
    the triggering operation with zero state change. The second group are
    infrastructure failures raised by adapters and execution contexts.
    """

    # --- Domain rejections ---
    UNAUTHORIZED = "UNAUTHORIZED"
    """Caller lacks the role the operation requires (→ 403)."""

    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    """A required field is empty or a principal is the null identity (→ 400)."""

    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    """The institution is already authorized (→ 409)."""

    NOT_REGISTERED = "NOT_REGISTERED"
    """The institution is not currently authorized (→ 404)."""

    DUPLICATE_HASH = "DUPLICATE_HASH"
    """The content hash already backs an issued certificate (→ 409)."""

    INDEX_OUT_OF_RANGE = "INDEX_OUT_OF_RANGE"
    """No certificate at that position in the holder's history (→ 404)."""

    # --- Infrastructure failures ---
    TECHNICAL_ERROR = "TECHNICAL_ERROR"
    """Unexpected exception inside an operation (→ 500)."""

    DATABASE_ERROR = "DATABASE_ERROR"
    """Database connectivity or query failures (→ 500)."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """Settings missing or invalid at startup (→ 500)."""


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor carrying error code, message, optional exception, and timestamp.

    >>> desc = FailureDescription(ErrorCode.DUPLICATE_HASH, "Content hash already used: QmABC")
    >>> desc.code
    <ErrorCode.DUPLICATE_HASH: 'DUPLICATE_HASH'>
    >>> desc.message
    'Content hash already used: QmABC'
    """

    code: ErrorCode
    message: str
    exception: Optional[BaseException] = field(default=None, repr=False)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def full_stack_trace(self) -> str:
        """Message followed by the formatted exception chain, if any."""
        if self.exception is None:
            return self.message
        tb = "".join(
            traceback.format_exception(type(self.exception), self.exception, self.exception.__traceback__)
        )
        return f"{self.message}\n{tb}"

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"
