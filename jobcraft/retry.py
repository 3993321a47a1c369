"""Retry with exponential backoff — stdlib only.

Two entry points share one loop: ``with_retry`` runs a zero-argument
callable, ``retry`` decorates a function. By default only rate-limit
errors (HTTP 429) are retried; everything else propagates unchanged.
"""
from __future__ import annotations

import functools
import random
import threading
import time
from typing import Any, Callable, Tuple, Type, TypeVar

from jobcraft.log import get_logger

log = get_logger(__name__)

T = TypeVar("T")

RATE_LIMIT_STATUS = 429


class ProviderError(Exception):
    """Failure from an external HTTP-like service, carrying its status code."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RetryCancelled(Exception):
    """The caller cancelled while a retry was pending."""


def status_code_of(exc: BaseException) -> int | None:
    """HTTP-like status of *exc*: ``status_code`` (openai, requests) or ``status``."""
    for attr in ("status_code", "status"):
        code = getattr(exc, attr, None)
        if isinstance(code, int):
            return code
    response = getattr(exc, "response", None)
    code = getattr(response, "status_code", None)
    return code if isinstance(code, int) else None


def is_rate_limited(exc: BaseException) -> bool:
    return status_code_of(exc) == RATE_LIMIT_STATUS


def backoff_delay(
    attempt: int,
    base_delay: float,
    backoff_factor: float = 2.0,
    max_delay: float | None = None,
) -> float:
    """Delay before the retry that follows zero-based *attempt*."""
    delay = base_delay * (backoff_factor ** attempt)
    if max_delay is not None:
        delay = min(delay, max_delay)
    return delay


def with_retry(
    fn: Callable[[], T],
    *,
    max_attempts: int = 3,
    base_delay: float = 2.0,
    retry_if: Callable[[BaseException], bool] = is_rate_limited,
    retryable: Tuple[Type[BaseException], ...] = (Exception,),
    backoff_factor: float = 2.0,
    max_delay: float | None = None,
    jitter: bool = False,
    sleep: Callable[[float], Any] | None = None,
    cancel_event: threading.Event | None = None,
    name: str | None = None,
) -> T:
    """Call *fn* until it succeeds, retrying errors accepted by *retry_if*.

    ``max_attempts`` counts total calls; values below 1 still make one call.
    The wait after zero-based attempt ``i`` is ``base_delay * backoff_factor**i``.
    When *cancel_event* is given, waits are interruptible and a set event
    raises :class:`RetryCancelled` instead of calling *fn* again.
    """
    attempts = max(max_attempts, 1)
    label = name or getattr(fn, "__qualname__", repr(fn))
    for attempt in range(attempts):
        if cancel_event is not None and cancel_event.is_set():
            raise RetryCancelled(f"{label} cancelled before attempt {attempt + 1}")
        try:
            return fn()
        except retryable as exc:
            if not retry_if(exc):
                raise
            if attempt == attempts - 1:
                log.error("%s failed after %d attempts: %s", label, attempts, exc)
                raise
            delay = backoff_delay(attempt, base_delay, backoff_factor, max_delay)
            if jitter:
                delay *= 0.5 + random.random()
            log.warning(
                "%s attempt %d/%d failed (%s), retrying in %.1fs",
                label,
                attempt + 1,
                attempts,
                exc,
                delay,
            )
            if cancel_event is not None:
                if cancel_event.wait(delay):
                    raise RetryCancelled(f"{label} cancelled during backoff") from exc
            else:
                (sleep or time.sleep)(delay)
    raise AssertionError("unreachable")  # pragma: no cover


def retry(
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float | None = 30.0,
    backoff_factor: float = 2.0,
    jitter: bool = True,
    retryable: Tuple[Type[BaseException], ...] = (Exception,),
    retry_if: Callable[[BaseException], bool] = lambda exc: True,
) -> Callable:
    """Decorator: retries the wrapped function with exponential backoff."""

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return with_retry(
                functools.partial(fn, *args, **kwargs),
                max_attempts=max_attempts,
                base_delay=base_delay,
                retry_if=retry_if,
                retryable=retryable,
                backoff_factor=backoff_factor,
                max_delay=max_delay,
                jitter=jitter,
                name=fn.__qualname__,
            )

        return wrapper

    return decorator
