r"""Fluent builder for retry policies.

Example:
    ```pycon
    >>> from aretry import RetryBuilder
    >>> calls = []
    >>> def task():
    ...     calls.append(1)
    ...     return len(calls)
    ...
    >>> executor = (
    ...     RetryBuilder.new_builder()
    ...     .retry_if_condition(lambda x: x < 3)
    ...     .with_max_attempts(5)
    ...     .build()
    ... )
    >>> executor.execute(task)
    3

    ```
"""

from __future__ import annotations

__all__ = ["RetryBuilder"]

import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from aretry.chains import BackoffStrategy, ErrorPredicate, ResultPredicate, RetryListener
from aretry.config import DEFAULT_MAX_ATTEMPTS, RetryConfig
from aretry.diagnostics import log_callback_error
from aretry.exceptions import ConfigurationError
from aretry.executor import RetryExecutor
from aretry.kinds import get_error_kind
from aretry.validation import (
    validate_backoff_strategy,
    validate_callable,
    validate_max_attempts,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable

logger: logging.Logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryBuilder(Generic[T]):
    """Accumulate retry rules and produce a validated retry policy.

    Registering the same kind of rule several times merges the rules:
    result predicates and per-kind error predicates are combined with a
    logical OR, listeners and backoff strategies are chained in
    registration order. ``None`` arguments are ignored, except for the
    backoff strategy which is required.

    The builder is mutable and not thread-safe. The configuration it
    produces is immutable.
    """

    def __init__(self) -> None:
        self._result_predicate: ResultPredicate[T] = ResultPredicate()
        self._retryable_kinds: dict[Hashable, None] = {}
        self._kind_predicates: dict[Hashable, ErrorPredicate] = {}
        self._listener: RetryListener[T] = RetryListener()
        self._backoff: BackoffStrategy[T] = BackoffStrategy()
        self._max_attempts = DEFAULT_MAX_ATTEMPTS
        self._kind_resolver: Callable[[BaseException], Any] = get_error_kind
        self._diagnostic_sink: Callable[[str, BaseException], None] = log_callback_error
        self._raise_on_exhaustion = False

    @classmethod
    def new_builder(cls) -> RetryBuilder[T]:
        """Create an empty builder."""
        return cls()

    def retry_if_condition(self, predicate: Callable[[T], bool] | None) -> RetryBuilder[T]:
        """Retry a successful result if ``predicate`` returns ``True``.

        Args:
            predicate: Predicate over the task result. It is OR-combined
                with the predicates already registered.

        Returns:
            The builder.
        """
        if predicate is None:
            return self
        self._result_predicate = self._result_predicate.combine(ResultPredicate.of(predicate))
        return self

    def retry_if_error_kind(self, kind: Hashable | None) -> RetryBuilder[T]:
        """Register an error kind as retryable.

        Args:
            kind: The error kind tag.

        Returns:
            The builder.
        """
        if kind is None:
            return self
        self._retryable_kinds[kind] = None
        return self

    def retry_with_error_predicate(
        self,
        kind: Hashable | None,
        predicate: Callable[[BaseException], bool] | None,
    ) -> RetryBuilder[T]:
        """Add a gate for the errors of one kind.

        An error of this kind is retried only if one of its predicates
        returns ``True``. This does not register the kind as retryable,
        use ``retry_if_error_kind`` for that.

        Args:
            kind: The error kind tag.
            predicate: Predicate over the raised error. It is OR-combined
                with the predicates already registered for ``kind``.

        Returns:
            The builder.
        """
        if kind is None or predicate is None:
            return self
        new = ErrorPredicate.of(predicate)
        current = self._kind_predicates.get(kind)
        self._kind_predicates[kind] = new if current is None else current.combine(new)
        return self

    def with_retry_listener(
        self, callback: Callable[[T | None, BaseException | None], Any] | None
    ) -> RetryBuilder[T]:
        """Append a listener invoked with ``(result, error)`` on every
        retry decision."""
        if callback is None:
            return self
        self._listener = self._listener.combine(RetryListener.of(callback))
        return self

    def with_backoff_strategy(
        self, callback: Callable[[T | None, BaseException | None], Any]
    ) -> RetryBuilder[T]:
        """Append a backoff strategy invoked with ``(result, error)`` on
        every retry decision, after the listeners.

        Raises:
            ConfigurationError: If ``callback`` is ``None``.
        """
        validate_backoff_strategy(callback)
        self._backoff = self._backoff.combine(BackoffStrategy.of(callback))
        return self

    def with_max_attempts(self, count: int) -> RetryBuilder[T]:
        """Set the number of extra attempts after the first one.

        Raises:
            ConfigurationError: If ``count`` is negative.
        """
        validate_max_attempts(count)
        self._max_attempts = count
        return self

    def with_kind_resolver(
        self, resolver: Callable[[BaseException], Any] | None
    ) -> RetryBuilder[T]:
        """Set the function resolving the kind of a raised error.

        By default the kind is the tag attached to the error. ``None``
        restores the default.

        Raises:
            ConfigurationError: If ``resolver`` is not callable.
        """
        if resolver is not None:
            validate_callable(resolver, "kind resolver")
        self._kind_resolver = get_error_kind if resolver is None else resolver
        return self

    def with_diagnostic_sink(
        self, sink: Callable[[str, BaseException], None] | None
    ) -> RetryBuilder[T]:
        """Set the function receiving the errors raised by listeners and
        backoff strategies.

        By default these errors are logged. ``None`` restores the default.

        Raises:
            ConfigurationError: If ``sink`` is not callable.
        """
        if sink is not None:
            validate_callable(sink, "diagnostic sink")
        self._diagnostic_sink = log_callback_error if sink is None else sink
        return self

    def raise_on_exhaustion(self, enabled: bool = True) -> RetryBuilder[T]:
        """Raise ``RetryExhaustedError`` instead of returning the last
        result when the last attempt fails with a retryable error."""
        self._raise_on_exhaustion = enabled
        return self

    def build_config(self) -> RetryConfig[T] | ConfigurationError:
        """Create the retry configuration.

        Returns:
            The validated configuration, or the ``ConfigurationError``
            describing why the builder state is invalid. The error is
            returned, not raised.

        Example:
            ```pycon
            >>> from aretry import RetryBuilder
            >>> outcome = (
            ...     RetryBuilder()
            ...     .retry_with_error_predicate("io", lambda exc: True)
            ...     .build_config()
            ... )
            >>> type(outcome).__name__
            'ConfigurationError'
            >>> sorted(outcome.dangling_kinds)
            ['io']

            ```
        """
        try:
            return RetryConfig(
                result_predicate=self._result_predicate,
                retryable_kinds=frozenset(self._retryable_kinds),
                kind_predicates=dict(self._kind_predicates),
                listener=self._listener,
                backoff=self._backoff,
                max_attempts=self._max_attempts,
                kind_resolver=self._kind_resolver,
                diagnostic_sink=self._diagnostic_sink,
                raise_on_exhaustion=self._raise_on_exhaustion,
            )
        except ConfigurationError as exc:
            logger.debug(f"Invalid retry configuration: {exc}")
            return exc

    def build(self) -> RetryExecutor[T]:
        """Create an executor bound to the validated configuration.

        Raises:
            ConfigurationError: If the builder state is invalid, for
                example if an error predicate was registered for a kind
                that is not retryable.
        """
        config = self.build_config()
        if isinstance(config, ConfigurationError):
            raise config
        return RetryExecutor(config)
