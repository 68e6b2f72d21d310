r"""Exceptions raised by the retry builder and executor.

Only the exceptions defined in this module ever leave
``RetryExecutor.execute``. Errors raised by retry listeners or backoff
strategies are reported to the diagnostic sink and never propagated.
"""

from __future__ import annotations

__all__ = ["ConfigurationError", "FatalTaskError", "RetryError", "RetryExhaustedError"]

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterable


class RetryError(Exception):
    """Base class for all the errors raised by ``aretry``."""


class ConfigurationError(RetryError, ValueError):
    """Exception raised when a retry policy is configured incorrectly.

    It is raised by the builder for a negative attempt budget, a missing
    backoff strategy, or per-kind predicates whose kind was never
    registered as retryable, and by the executor when no task is given.

    Args:
        message: A descriptive error message.
        dangling_kinds: The error kinds that have a predicate but are not
            registered as retryable, if this is the reason of the error.

    Example:
        ```pycon
        >>> from aretry.exceptions import ConfigurationError
        >>> raise ConfigurationError("max_attempts must be >= 0, got -1")
        Traceback (most recent call last):
            ...
        aretry.exceptions.ConfigurationError: max_attempts must be >= 0, got -1

        ```
    """

    def __init__(self, message: str, dangling_kinds: Iterable[Hashable] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.dangling_kinds = frozenset(dangling_kinds)


class FatalTaskError(RetryError, RuntimeError):
    """Exception raised when the task fails with a non-retryable error.

    The original error is available in ``cause`` and is also chained as
    ``__cause__``.

    Args:
        message: A descriptive error message.
        cause: The error raised by the task.
        kind: The error kind resolved for ``cause``, or ``None`` if the
            error carries no kind.
        attempt: The attempt (0-indexed) that raised the error.
    """

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException,
        kind: Any = None,
        attempt: int = 0,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.kind = kind
        self.attempt = attempt


class RetryExhaustedError(RetryError, RuntimeError):
    """Exception raised when every attempt failed with a retryable error.

    This exception is only raised by executors built with
    ``raise_on_exhaustion()``. By default the executor returns the last
    observed result instead.

    Args:
        message: A descriptive error message.
        cause: The error raised by the last attempt.
        kind: The error kind of ``cause``.
        attempts: The total number of task invocations.
    """

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException,
        kind: Any = None,
        attempts: int = 0,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.kind = kind
        self.attempts = attempts
