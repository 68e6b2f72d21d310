r"""Immutable configuration of a retry policy.

A ``RetryConfig`` is created once, usually by ``RetryBuilder``, and never
modified afterwards. It holds no per-call state, so the same configuration
can be used by many executions, including from several threads.
"""

from __future__ import annotations

__all__ = ["DEFAULT_MAX_ATTEMPTS", "RetryConfig"]

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from aretry.chains import BackoffStrategy, ErrorPredicate, ResultPredicate, RetryListener
from aretry.diagnostics import log_callback_error
from aretry.kinds import get_error_kind
from aretry.validation import (
    validate_backoff_strategy,
    validate_callable,
    validate_kind_predicates,
    validate_max_attempts,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Mapping

T = TypeVar("T")

# Number of extra attempts after the first one
# Total calls to the task = max_attempts + 1
DEFAULT_MAX_ATTEMPTS = 0


@dataclass(frozen=True)
class RetryConfig(Generic[T]):
    """Configuration of a retry policy.

    Args:
        result_predicate: Predicate over a successful result. ``True``
            means the result is retried.
        retryable_kinds: The error kinds eligible for retry.
        kind_predicates: Additional gate per error kind. If a predicate is
            registered for the kind of an error, it must also return
            ``True`` for the error to be retried. Every key must be in
            ``retryable_kinds``.
        listener: Callbacks invoked with ``(result, error)`` on every retry
            decision.
        backoff: Pacing callbacks invoked with ``(result, error)`` after
            the listeners. May block.
        max_attempts: Number of extra attempts after the first one. Must
            be >= 0.
        kind_resolver: Function returning the kind of a raised error, or
            ``None`` if the error has no kind.
        diagnostic_sink: Function receiving the errors raised by the
            listeners and the backoff strategy.
        raise_on_exhaustion: If ``True``, ``RetryExhaustedError`` is raised
            when the last attempt fails with a retryable error. Otherwise
            the last observed result is returned.

    Raises:
        ConfigurationError: If the configuration is inconsistent.

    Example:
        ```pycon
        >>> from aretry.config import RetryConfig
        >>> config = RetryConfig(max_attempts=2, retryable_kinds=frozenset({"io"}))
        >>> config.max_attempts
        2
        >>> config.is_retryable_kind("io"), config.is_retryable_kind("db")
        (True, False)

        ```
    """

    result_predicate: ResultPredicate[T] = field(default_factory=ResultPredicate)
    retryable_kinds: frozenset[Hashable] = frozenset()
    kind_predicates: Mapping[Hashable, ErrorPredicate] = field(
        default_factory=lambda: MappingProxyType({}), hash=False
    )
    listener: RetryListener[T] = field(default_factory=RetryListener)
    backoff: BackoffStrategy[T] = field(default_factory=BackoffStrategy)
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    kind_resolver: Callable[[BaseException], Any] = get_error_kind
    diagnostic_sink: Callable[[str, BaseException], None] = log_callback_error
    raise_on_exhaustion: bool = False

    def __post_init__(self) -> None:
        validate_max_attempts(self.max_attempts)
        validate_backoff_strategy(self.backoff)
        validate_callable(self.kind_resolver, "kind resolver")
        validate_callable(self.diagnostic_sink, "diagnostic sink")
        # Copy into read-only containers
        object.__setattr__(self, "retryable_kinds", frozenset(self.retryable_kinds))
        if not isinstance(self.kind_predicates, MappingProxyType):
            object.__setattr__(
                self, "kind_predicates", MappingProxyType(dict(self.kind_predicates))
            )
        validate_kind_predicates(self.kind_predicates, self.retryable_kinds)

    def is_retryable_kind(self, kind: Hashable) -> bool:
        if kind is None:
            return False
        try:
            return kind in self.retryable_kinds
        except TypeError:
            # unhashable kinds can never be registered
            return False

    def get_kind_predicate(self, kind: Hashable) -> ErrorPredicate | None:
        return self.kind_predicates.get(kind)
