"""
HTTP integration — ErrorCode→HTTP status mapping and response builders.

    status = HttpStatusMapper.map_error_code(ErrorCode.DUPLICATE_HASH)  # → 409

    @app.post("/certificates")
    def issue(...):
        return build_fastapi_response(result, success_status=201)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, TypeVar

from fastapi.responses import JSONResponse

from railway.failure import ErrorCode, FailureDescription
from railway.result import Result

T = TypeVar("T")


# ──────────────────────── Error Code → HTTP Status Mapping ────────────────────────


class HttpStatusMapper:
    """Maps ErrorCode enum values to HTTP status codes."""

    _CODE_TO_STATUS: dict[ErrorCode, int] = {
        ErrorCode.UNAUTHORIZED: 403,
        ErrorCode.INVALID_ARGUMENT: 400,
        ErrorCode.ALREADY_REGISTERED: 409,
        ErrorCode.NOT_REGISTERED: 404,
        ErrorCode.DUPLICATE_HASH: 409,
        ErrorCode.INDEX_OUT_OF_RANGE: 404,
        ErrorCode.TECHNICAL_ERROR: 500,
        ErrorCode.DATABASE_ERROR: 500,
        ErrorCode.CONFIGURATION_ERROR: 500,
    }

    @classmethod
    def map_error_code(cls, code: ErrorCode) -> int:
        return cls._CODE_TO_STATUS.get(code, 500)

    @classmethod
    def map_failure(cls, failure: FailureDescription) -> int:
        return cls.map_error_code(failure.code)


# ──────────────────────── Error Response DTO ────────────────────────


@dataclass(frozen=True, slots=True)
class ErrorResponse:
    """
    Standardized error response body.

        {
            "error_code": "DUPLICATE_HASH",
            "message": "Content hash already used: QmABC123",
            "timestamp": "2026-02-17T10:30:00+00:00"
        }
    """

    error_code: str
    message: str
    timestamp: str

    @staticmethod
    def from_failure(failure: FailureDescription) -> ErrorResponse:
        return ErrorResponse(
            error_code=failure.code.value,
            message=failure.message,
            timestamp=failure.timestamp.isoformat(),
        )

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


# ──────────────────────── Response Builders ────────────────────────


def build_response(
    result: Result[T],
    success_status: int = 200,
) -> tuple[Any, int]:
    """Build a (body, status_code) tuple from a Result."""
    return result.either(
        on_success=lambda value: (value, success_status),
        on_failure=lambda error: (
            ErrorResponse.from_failure(error).to_dict(),
            HttpStatusMapper.map_failure(error),
        ),
    )


def build_fastapi_response(
    result: Result[T],
    success_status: int = 200,
) -> JSONResponse:
    """
    Build a FastAPI JSONResponse from a Result.

    The success value must already be JSON-serializable.
    """
    body, status = build_response(result, success_status)
    return JSONResponse(content=body, status_code=status)
