r"""aretry - Generic retry execution for fallible operations.

This package repeatedly invokes a task under a configured policy until a
result is accepted, a non-retryable error is raised, or the attempt budget
is exhausted. Errors are matched on an explicit error kind tag rather than
on their Python type.

Key Features:
    - Fluent builder merging repeated rules (OR for predicates, ordered
      chains for listeners and backoff strategies)
    - Retry on results with custom conditions
    - Retry on tagged error kinds, with optional per-kind predicates
    - Pluggable, possibly blocking, backoff strategies
    - Immutable configuration safe to share between threads
    - Listener and backoff errors reported to a diagnostic sink, never
      propagated
    - Error kind classification for ``httpx`` errors

Example:
    ```pycon
    >>> from aretry import RetryBuilder
    >>> seen = []
    >>> executor = (
    ...     RetryBuilder.new_builder()
    ...     .retry_if_condition(lambda x: x < 10)
    ...     .with_retry_listener(lambda result, error: seen.append(result))
    ...     .with_max_attempts(2)
    ...     .build()
    ... )
    >>> executor.execute(lambda: 5)
    5
    >>> seen
    [5, 5, 5]

    ```
"""

from __future__ import annotations

__all__ = [
    "BackoffStrategy",
    "ConfigurationError",
    "ErrorPredicate",
    "FatalTaskError",
    "KindedError",
    "ResultPredicate",
    "RetryBuilder",
    "RetryConfig",
    "RetryError",
    "RetryExecutor",
    "RetryExhaustedError",
    "RetryListener",
    "__version__",
    "get_error_kind",
    "tag_error_kind",
]

from importlib.metadata import PackageNotFoundError, version

from aretry.builder import RetryBuilder
from aretry.chains import BackoffStrategy, ErrorPredicate, ResultPredicate, RetryListener
from aretry.config import RetryConfig
from aretry.exceptions import (
    ConfigurationError,
    FatalTaskError,
    RetryError,
    RetryExhaustedError,
)
from aretry.executor import RetryExecutor
from aretry.kinds import KindedError, get_error_kind, tag_error_kind

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
