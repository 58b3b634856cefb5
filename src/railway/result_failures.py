"""
Convenience factory methods for the registry's domain rejections.

    # Instead of:
    Result.failure(ErrorCode.INVALID_ARGUMENT, "name must not be empty")

    # Write:
    ResultFailures.invalid_argument("name must not be empty")
"""

from __future__ import annotations

from railway.failure import ErrorCode
from railway.result import Result


class ResultFailures:
    """Factory methods for the failure kinds the registry produces."""

    @staticmethod
    def unauthorized(message: str) -> Result:
        """Caller lacks the required role."""
        return Result.failure(ErrorCode.UNAUTHORIZED, message)

    @staticmethod
    def invalid_argument(message: str) -> Result:
        """Empty required field or null principal."""
        return Result.failure(ErrorCode.INVALID_ARGUMENT, message)

    @staticmethod
    def already_registered(principal: str) -> Result:
        return Result.failure(
            ErrorCode.ALREADY_REGISTERED,
            f"Institution already registered: {principal}",
        )

    @staticmethod
    def not_registered(principal: str) -> Result:
        return Result.failure(
            ErrorCode.NOT_REGISTERED,
            f"Institution not registered: {principal}",
        )

    @staticmethod
    def duplicate_hash(content_hash: str) -> Result:
        return Result.failure(
            ErrorCode.DUPLICATE_HASH,
            f"Content hash already used: {content_hash}",
        )

    @staticmethod
    def index_out_of_range(holder: str, index: int, count: int) -> Result:
        return Result.failure(
            ErrorCode.INDEX_OUT_OF_RANGE,
            f"Certificate index {index} out of range for holder {holder} ({count} issued)",
        )
