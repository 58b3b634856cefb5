"""Tests for the Result monad."""

from __future__ import annotations

import pytest

from railway import ErrorCode, FailureDescription, Result, ResultFailures
from railway.result import Failure, Success


class TestConstruction:
    def test_success_wraps_value(self) -> None:
        result = Result.success(42)
        assert result.is_success()
        assert not result.is_failure()
        assert result.value() == 42

    def test_success_rejects_none(self) -> None:
        with pytest.raises(TypeError):
            Result.success(None)

    def test_failure_carries_description(self) -> None:
        result = Result.failure(ErrorCode.NOT_REGISTERED, "gone")
        assert result.is_failure()
        assert result.error().code == ErrorCode.NOT_REGISTERED
        assert result.error().message == "gone"

    def test_value_on_failure_raises(self) -> None:
        with pytest.raises(ValueError, match="gone"):
            Result.failure(ErrorCode.NOT_REGISTERED, "gone").value()

    def test_error_on_success_raises(self) -> None:
        with pytest.raises(ValueError):
            Result.success(1).error()


class TestTransformations:
    def test_map_and_flat_map_on_success(self) -> None:
        result = Result.success(2).map(lambda n: n * 10).flat_map(lambda n: Result.success(n + 1))
        assert result.value() == 21

    def test_flat_map_short_circuits(self) -> None:
        """A failing stage stops every later stage from running."""
        calls: list[int] = []

        result = (
            Result.success(1)
            .flat_map(lambda _: ResultFailures.unauthorized("not the owner"))
            .map(lambda n: calls.append(n))
        )

        assert result.error().code == ErrorCode.UNAUTHORIZED
        assert calls == []

    def test_either(self) -> None:
        assert Result.success(3).either(lambda v: v + 1, lambda e: -1) == 4
        assert Result.failure(ErrorCode.DUPLICATE_HASH, "x").either(lambda v: v, lambda e: e.code) == ErrorCode.DUPLICATE_HASH

    def test_either(self) -> None:
        assert Result.success(3).either(lambda v: v + 1, lambda e: -1) == 4
        assert Result.failure(ErrorCode.DUPLICATE_HASH, "x").either(lambda v: v, lambda e: e.code) == ErrorCode.DUPLICATE_HASH

    def test_peek_and_peek_failure(self) -> None:
        seen: list[object] = []

        Result.success("a").peek(seen.append).peek_failure(seen.append)
        Result.failure(ErrorCode.DUPLICATE_HASH, "dup").peek(seen.append).peek_failure(lambda e: seen.append(e.code))

        assert seen == ["a", ErrorCode.DUPLICATE_HASH]


class TestFactories:
    def test_from_computation_success(self) -> None:
        assert Result.from_computation(lambda: 7, ErrorCode.DATABASE_ERROR, "boom").value() == 7

    def test_from_computation_captures_exception(self) -> None:
        def _explode() -> int:
            raise OSError("disk")

        result = Result.from_computation(_explode, ErrorCode.DATABASE_ERROR, "write failed")

        assert result.error().code == ErrorCode.DATABASE_ERROR
        assert isinstance(result.error().exception, OSError)

    def test_result_failures_messages(self) -> None:
        assert "0xA" in ResultFailures.already_registered("0xA").error().message
        assert "0xA" in ResultFailures.not_registered("0xA").error().message
        message = ResultFailures.index_out_of_range("0xH", 3, 2).error().message
        assert "3" in message and "0xH" in message


class TestEqualityAndMatching:
    def test_equality(self) -> None:
        assert Result.success(1) == Result.success(1)
        assert Result.failure(ErrorCode.UNAUTHORIZED, "x") == Result.failure(ErrorCode.UNAUTHORIZED, "x")
        assert Result.success(1) != Result.failure(ErrorCode.UNAUTHORIZED, "x")

    def test_bool(self) -> None:
        assert Result.success(0)
        assert not Result.failure(ErrorCode.UNAUTHORIZED, "x")

    def test_pattern_matching(self) -> None:
        match Result.success("v"):
            case Success(value):
                assert value == "v"
            case Failure(_):
                pytest.fail("expected Success")

        match Result.failure(ErrorCode.INVALID_ARGUMENT, "bad"):
            case Failure(error):
                assert error.code == ErrorCode.INVALID_ARGUMENT
            case Success(_):
                pytest.fail("expected Failure")

    def test_repr(self) -> None:
        assert repr(Result.success(1)) == "Success(1)"
        assert repr(Result.failure(ErrorCode.UNAUTHORIZED, "no")) == "Failure(UNAUTHORIZED: 'no')"


class TestFailureDescription:
    def test_str(self) -> None:
        assert str(FailureDescription(ErrorCode.DUPLICATE_HASH, "dup")) == "DUPLICATE_HASH: dup"

    def test_full_stack_trace(self) -> None:
        try:
            raise RuntimeError("inner")
        except RuntimeError as e:
            desc = FailureDescription(ErrorCode.TECHNICAL_ERROR, "outer", e)

        trace = desc.full_stack_trace()
        assert trace.startswith("outer")
        assert "RuntimeError: inner" in trace

    def test_full_stack_trace_without_exception(self) -> None:
        assert FailureDescription(ErrorCode.TECHNICAL_ERROR, "only").full_stack_trace() == "only"
