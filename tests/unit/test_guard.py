"""
Name: Collaborator Guard Unit Tests

Responsibilities:
  - Test transient vs permanent error classification
  - Verify attempt ceiling (retry_count + 1)
  - Verify timeout mapping and cancellation passthrough

Collaborators:
  - ragline.application.guard: Module under test
  - tenacity: retry engine (zero delays in tests)

Constraints:
  - Tests must not make real API calls
  - Must run fast (zero backoff, short timeouts)
"""

import asyncio
from unittest.mock import Mock

import httpx
import pytest

from ragline.application.guard import (
    PERMANENT_HTTP_CODES,
    TRANSIENT_HTTP_CODES,
    CollaboratorGuard,
    get_http_status_code,
    is_transient_error,
)
from ragline.exceptions import (
    CollaboratorTimeoutError,
    EmbeddingTimeoutError,
    EmbeddingUnavailableError,
    GenerationUnavailableError,
)


def _guard(retry_count: int = 1, timeout_seconds: float = 0.5) -> CollaboratorGuard:
    return CollaboratorGuard(
        timeout_seconds=timeout_seconds,
        retry_count=retry_count,
        base_delay_seconds=0,
        max_delay_seconds=0,
    )


class _ApiError(Exception):
    def __init__(self, code: int):
        super().__init__(f"api error {code}")
        self.code = code


class _Flaky:
    """Callable that raises the queued errors, then returns value."""

    def __init__(self, errors, value="ok"):
        self.errors = list(errors)
        self.value = value
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.value


@pytest.mark.unit
class TestGetHttpStatusCode:
    def test_extracts_code_attribute(self):
        exc = Mock()
        exc.code = 429
        assert get_http_status_code(exc) == 429

    def test_extracts_from_httpx_response(self):
        request = httpx.Request("POST", "http://ollama/api/generate")
        response = httpx.Response(503, request=request)
        exc = httpx.HTTPStatusError("boom", request=request, response=response)
        assert get_http_status_code(exc) == 503

    def test_returns_none_for_unknown_exception(self):
        assert get_http_status_code(ValueError("some error")) is None


@pytest.mark.unit
class TestIsTransientError:
    @pytest.mark.parametrize("code", sorted(TRANSIENT_HTTP_CODES))
    def test_transient_http_codes(self, code):
        exc = _ApiError(code)
        assert is_transient_error(exc) is True

    @pytest.mark.parametrize("code", sorted(PERMANENT_HTTP_CODES))
    def test_permanent_http_codes(self, code):
        exc = _ApiError(code)
        assert is_transient_error(exc) is False

    def test_timeouts_and_connection_errors_are_transient(self):
        assert is_transient_error(TimeoutError()) is True
        assert is_transient_error(ConnectionResetError()) is True
        assert is_transient_error(httpx.ConnectError("refused")) is True

    def test_message_patterns(self):
        assert is_transient_error(RuntimeError("Rate limit exceeded")) is True

    def test_cancellation_is_never_transient(self):
        assert is_transient_error(asyncio.CancelledError()) is False

    def test_taxonomy_errors_are_not_retried(self):
        assert is_transient_error(EmbeddingUnavailableError("bad vector")) is False

    def test_unknown_errors_fail_fast(self):
        assert is_transient_error(ValueError("bad request body")) is False


@pytest.mark.unit
class TestCollaboratorGuard:
    async def test_returns_value_on_success(self):
        op = _Flaky([])
        assert await _guard().call("embedding", op, error_cls=EmbeddingUnavailableError) == "ok"
        assert op.calls == 1

    async def test_retries_transient_error_once(self):
        op = _Flaky([ConnectionError("reset")])

        result = await _guard().call("embedding", op, error_cls=EmbeddingUnavailableError)

        assert result == "ok"
        assert op.calls == 2

    async def test_attempts_never_exceed_retry_count_plus_one(self):
        op = _Flaky([ConnectionError("1"), ConnectionError("2"), ConnectionError("3")])

        with pytest.raises(GenerationUnavailableError) as exc_info:
            await _guard().call("generation", op, error_cls=GenerationUnavailableError)

        assert op.calls == 2
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    async def test_retry_count_zero_means_single_attempt(self):
        op = _Flaky([ConnectionError("reset")])

        with pytest.raises(EmbeddingUnavailableError):
            await _guard(retry_count=0).call(
                "embedding", op, error_cls=EmbeddingUnavailableError
            )

        assert op.calls == 1

    async def test_permanent_error_attempted_once(self):
        op = _Flaky([ValueError("bad request")])

        with pytest.raises(EmbeddingUnavailableError) as exc_info:
            await _guard().call("embedding", op, error_cls=EmbeddingUnavailableError)

        assert op.calls == 1
        assert isinstance(exc_info.value.__cause__, ValueError)

    async def test_taxonomy_error_passes_through_unwrapped(self):
        original = EmbeddingUnavailableError("empty vector")
        op = _Flaky([original])

        with pytest.raises(EmbeddingUnavailableError) as exc_info:
            await _guard().call("embedding", op, error_cls=EmbeddingUnavailableError)

        assert exc_info.value is original
        assert op.calls == 1

    async def test_timeout_maps_to_stage_timeout_error(self):
        calls = 0

        async def slow():
            nonlocal calls
            calls += 1
            await asyncio.sleep(5)

        with pytest.raises(EmbeddingTimeoutError) as exc_info:
            await _guard(timeout_seconds=0.05).call(
                "embedding", slow, error_cls=EmbeddingUnavailableError
            )

        assert calls == 2
        assert isinstance(exc_info.value, EmbeddingUnavailableError)
        assert isinstance(exc_info.value, CollaboratorTimeoutError)
        assert exc_info.value.error_code == "TIMEOUT"

    async def test_cancellation_is_not_retried(self):
        calls = 0
        started = asyncio.Event()

        async def hanging():
            nonlocal calls
            calls += 1
            started.set()
            await asyncio.sleep(10)

        task = asyncio.create_task(
            _guard(timeout_seconds=5).call(
                "generation", hanging, error_cls=GenerationUnavailableError
            )
        )
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert calls == 1

    def test_rejects_more_than_one_retry(self):
        with pytest.raises(ValueError):
            CollaboratorGuard(timeout_seconds=1, retry_count=2)

    def test_from_config(self, rag_config):
        guard = CollaboratorGuard.from_config(rag_config)

        assert guard.timeout_seconds == 0.2
        assert guard.max_attempts == 2
