"""Retrying transaction executor over the Firestore REST client.

Each attempt runs the caller's work function against a fresh transaction and
commits its buffered writes. Contention and transient backend failures are
retried with exponential backoff (tenacity); everything else propagates on
the first attempt. After the last attempt the last error is re-raised
unchanged.

Work functions may run more than once, so they must keep all side effects
inside the transaction handle.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from app.domain.exceptions import ELearningException
from app.infrastructure.exceptions import TRANSIENT_STATUS_CODES
from app.infrastructure.firebase._rest_client import FirestoreRESTClient, Transaction

logger = logging.getLogger(__name__)

T = TypeVar("T")

TransactionWork = Callable[[Transaction], Awaitable[T]]
RetryObserver = Callable[[int, BaseException, int], Awaitable[None] | None]

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY_MS = 100

# Fallback for errors that carry no status code. Closed list.
RETRYABLE_MESSAGE_PATTERNS = ("conflict", "concurrent", "timeout", "deadline", "resource")


def _normalize_code(code: str) -> str:
    """'deadline-exceeded' and 'DEADLINE_EXCEEDED' compare equal."""
    return code.strip().upper().replace("-", "_")


def is_retryable_error(error: BaseException) -> bool:
    """Return True if a failed attempt should be retried.

    Errors with a string ``code`` are matched against the transient status
    allow-list only. Domain exceptions are business-rule violations and never
    retried. Cancellation is never retried. Anything else falls back to the
    message heuristic.
    """
    if not isinstance(error, Exception):
        return False
    code = getattr(error, "code", None)
    if isinstance(code, str) and code:
        return _normalize_code(code) in TRANSIENT_STATUS_CODES
    if isinstance(error, ELearningException):
        return False
    message = str(error).lower()
    return any(pattern in message for pattern in RETRYABLE_MESSAGE_PATTERNS)


class TransactionRunner:
    """Runs work functions in Firestore transactions with bounded retries.

    Stateless between calls, so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        client: FirestoreRESTClient,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_delay_ms: int = DEFAULT_BASE_DELAY_MS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the runner.

        Args:
            client: Firestore client used to open and commit transactions.
            max_retries: Default total number of attempts.
            base_delay_ms: Default backoff base in milliseconds.
            sleep: Coroutine used for backoff (seconds); injectable for tests.
        """
        self._client = client
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self._sleep = sleep

    @property
    def client(self) -> FirestoreRESTClient:
        return self._client

    async def execute(
        self,
        work: TransactionWork[T],
        *,
        max_retries: int | None = None,
        base_delay_ms: int | None = None,
        on_retry: RetryObserver | None = None,
    ) -> T:
        """Run ``work`` in a transaction, retrying transient failures.

        The wait before retry n is ``base_delay_ms * 2 ** (n - 1)``.

        Args:
            work: Async callable receiving the attempt's Transaction; its return
                value is returned after a successful commit.
            max_retries: Total attempts for this call (default: runner setting).
            base_delay_ms: Backoff base for this call (default: runner setting).
            on_retry: Optional observer called as (attempt, error, delay_ms)
                before each retry. Its failures are logged and ignored.

        Returns:
            The work function's result from the committed attempt.

        Raises:
            Exception: The first fatal error, or the last transient error once
                attempts are exhausted, unchanged.
        """
        attempts = max_retries if max_retries is not None else self.max_retries
        base_delay = base_delay_ms if base_delay_ms is not None else self.base_delay_ms
        if attempts < 1:
            raise RuntimeError("TransactionRunner.execute called with max_retries < 1")

        retrying = AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=base_delay / 1000),
            retry=retry_if_exception(is_retryable_error),
            before_sleep=self._before_sleep(on_retry, attempts),
            sleep=self._sleep,
            reraise=True,
        )
        retry_transaction: str | None = None
        try:
            async for attempt in retrying:
                with attempt:
                    previous, retry_transaction = retry_transaction, None
                    txn = await self._client.begin_transaction(previous)
                    try:
                        result = await work(txn)
                        await txn.commit()
                    except BaseException as exc:
                        # Completes even when the caller is cancelled.
                        await asyncio.shield(self._rollback_quietly(txn))
                        if getattr(exc, "code", None) == "ABORTED":
                            retry_transaction = txn.id
                        raise
                number = attempt.retry_state.attempt_number
                if number > 1:
                    logger.info("Transaction committed on attempt %d", number)
        except Exception as exc:
            if is_retryable_error(exc):
                logger.error("Transaction failed after %d attempts: %s", attempts, exc)
            else:
                logger.debug("Transaction failed with non-retryable error: %s", exc)
            raise
        return result

    def _before_sleep(
        self, on_retry: RetryObserver | None, attempts: int
    ) -> Callable[[RetryCallState], Awaitable[None]]:
        """Log the failed attempt and notify ``on_retry`` before the backoff sleep."""

        async def before_sleep(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception()
            delay_ms = round(retry_state.next_action.sleep * 1000)
            logger.warning(
                "Transaction attempt %d/%d failed, retrying in %dms: %s",
                retry_state.attempt_number,
                attempts,
                delay_ms,
                error,
            )
            await self._notify(on_retry, retry_state.attempt_number, error, delay_ms)

        return before_sleep

    @staticmethod
    async def _rollback_quietly(txn: Transaction) -> None:
        """Release an unfinished transaction; the original error takes precedence."""
        try:
            await txn.rollback()
        except Exception:
            logger.warning("Transaction rollback failed for %s", txn.id, exc_info=True)

    @staticmethod
    async def _notify(
        on_retry: RetryObserver | None,
        attempt: int,
        error: BaseException,
        delay_ms: int,
    ) -> None:
        if on_retry is None:
            return
        try:
            outcome = on_retry(attempt, error, delay_ms)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:
            logger.warning("Retry observer raised; continuing", exc_info=True)
