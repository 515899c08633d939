"""
Name: Collaborator Call Guard (timeout + bounded retry)

Responsibilities:
  - Bound every collaborator call with a timeout
  - Allow at most one retry, with exponential backoff + jitter,
    and only for transient errors
  - Translate failures into the caller-supplied taxonomy error
  - Never retry or wrap cancellation

Collaborators:
  - tenacity: AsyncRetrying with configurable stop/wait/retry strategies
  - exceptions: taxonomy errors and their timeout subclasses
  - metrics: retry/failure counters

Constraints:
  - Only retry transient errors (429, 5xx, timeouts, connection errors)
  - Never retry permanent errors (400, 401, 403, 404)
  - asyncio.CancelledError always propagates untouched

Notes:
  - Adapters do not retry on their own; this is the only retry layer,
    so retry_count + 1 is the hard ceiling on attempts per call
"""

import asyncio
from typing import Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from ..config import RagConfig
from ..exceptions import TIMEOUT_ERRORS, RAGError
from ..logger import logger
from ..metrics import record_collaborator_failure, record_collaborator_retry

T = TypeVar("T")

# R: HTTP status codes that indicate transient errors (retry-able)
TRANSIENT_HTTP_CODES: frozenset[int] = frozenset(
    {
        429,  # Too Many Requests (rate limit)
        500,  # Internal Server Error
        502,  # Bad Gateway
        503,  # Service Unavailable
        504,  # Gateway Timeout
    }
)

# R: HTTP status codes that indicate permanent errors (no retry)
PERMANENT_HTTP_CODES: frozenset[int] = frozenset(
    {
        400,  # Bad Request
        401,  # Unauthorized
        403,  # Forbidden
        404,  # Not Found
    }
)

_TRANSIENT_NAME_PATTERNS = (
    "timeout",
    "connection",
    "connect",
    "temporary",
    "unavailable",
    "resourceexhausted",
    "deadline",
)

_TRANSIENT_MESSAGE_PATTERNS = (
    "rate limit",
    "too many requests",
    "quota exceeded",
    "temporarily unavailable",
    "connection reset",
    "connection refused",
    "timed out",
    "deadline exceeded",
)


def get_http_status_code(exception: BaseException) -> int | None:
    """
    R: Extract HTTP status code from various exception types.

    Supports google.genai APIError (.code), httpx.HTTPStatusError
    (.response.status_code) and anything exposing .status_code.
    """
    code = getattr(exception, "code", None)
    if isinstance(code, int) and code >= 100:
        return code

    response = getattr(exception, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return status_code

    status_code = getattr(exception, "status_code", None)
    if isinstance(status_code, int):
        return status_code

    return None


def is_transient_error(exception: BaseException) -> bool:
    """
    R: Determine if an exception is transient (should retry).

    Returns:
        True if transient (retry), False if permanent (fail fast)
    """
    # R: Cancellation is a caller decision, never a provider hiccup
    if isinstance(exception, asyncio.CancelledError):
        return False
    if not isinstance(exception, Exception):
        return False

    # R: Adapters raise taxonomy errors only for malformed provider output
    if isinstance(exception, RAGError):
        return False

    if isinstance(exception, (TimeoutError, ConnectionError)):
        return True

    status_code = get_http_status_code(exception)
    if status_code is not None:
        if status_code in PERMANENT_HTTP_CODES:
            return False
        if status_code in TRANSIENT_HTTP_CODES:
            return True

    exception_name = type(exception).__name__.lower()
    if any(pattern in exception_name for pattern in _TRANSIENT_NAME_PATTERNS):
        return True

    message = str(exception).lower()
    if any(pattern in message for pattern in _TRANSIENT_MESSAGE_PATTERNS):
        return True

    # R: Default: treat unknown errors as non-transient (fail fast)
    return False


class CollaboratorGuard:
    """
    R: Runs one collaborator operation under timeout + bounded retry.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float,
        retry_count: int = 1,
        base_delay_seconds: float = 0.2,
        max_delay_seconds: float = 2.0,
    ):
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        if retry_count not in (0, 1):
            raise ValueError("retry_count must be 0 or 1")
        self.timeout_seconds = timeout_seconds
        self.retry_count = retry_count
        self.base_delay_seconds = base_delay_seconds
        self.max_delay_seconds = max_delay_seconds

    @classmethod
    def from_config(cls, config: RagConfig) -> "CollaboratorGuard":
        return cls(
            timeout_seconds=config.timeout_seconds,
            retry_count=config.retry_count,
            base_delay_seconds=config.retry_base_delay_ms / 1000,
            max_delay_seconds=config.retry_max_delay_ms / 1000,
        )

    @property
    def max_attempts(self) -> int:
        return self.retry_count + 1

    async def call(
        self,
        collaborator: str,
        operation: Callable[[], Awaitable[T]],
        *,
        error_cls: type[RAGError],
    ) -> T:
        """
        R: Await operation() with a per-attempt timeout.

        Args:
            collaborator: Name used in logs/metrics ("embedding", "retrieval", ...)
            operation: Zero-arg factory; called once per attempt
            error_cls: Taxonomy error raised when the call finally fails

        Raises:
            error_cls: collaborator failed after the allowed retry
            TIMEOUT_ERRORS[error_cls]: last attempt timed out
            asyncio.CancelledError: caller cancelled the request
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential_jitter(
                initial=self.base_delay_seconds,
                max=self.max_delay_seconds,
                jitter=self.base_delay_seconds,
            ),
            retry=retry_if_exception(is_transient_error),
            before_sleep=self._retry_logger(collaborator),
            reraise=True,
        )

        try:
            return await retrying(self._bounded, operation)
        except asyncio.CancelledError:
            raise
        except TimeoutError as exc:
            record_collaborator_failure(collaborator, "timeout")
            timeout_cls = TIMEOUT_ERRORS.get(error_cls, error_cls)
            logger.error(
                f"{collaborator} call timed out",
                extra={
                    "collaborator": collaborator,
                    "timeout_seconds": self.timeout_seconds,
                    "attempts": self.max_attempts,
                },
            )
            raise timeout_cls(
                f"{collaborator} did not respond within {self.timeout_seconds:g}s"
            ) from exc
        except error_cls:
            record_collaborator_failure(collaborator, "error")
            raise
        except Exception as exc:
            record_collaborator_failure(collaborator, "error")
            logger.error(
                f"{collaborator} call failed",
                extra={
                    "collaborator": collaborator,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            raise error_cls(f"{collaborator} failed: {exc}") from exc

    async def _bounded(self, operation: Callable[[], Awaitable[T]]) -> T:
        return await asyncio.wait_for(operation(), timeout=self.timeout_seconds)

    @staticmethod
    def _retry_logger(collaborator: str) -> Callable[[RetryCallState], None]:
        def _log_retry(retry_state: RetryCallState) -> None:
            wait_time = retry_state.next_action.sleep if retry_state.next_action else 0
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            record_collaborator_retry(collaborator)
            logger.warning(
                f"Retry attempt {retry_state.attempt_number} for {collaborator}",
                extra={
                    "collaborator": collaborator,
                    "attempt": retry_state.attempt_number,
                    "wait_seconds": round(wait_time, 2),
                    "error": str(exc) if exc else None,
                    "error_type": type(exc).__name__ if exc else None,
                },
            )

        return _log_retry
