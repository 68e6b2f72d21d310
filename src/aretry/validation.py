r"""Validation functions for retry policies.

This module provides the checks run by the builder before a retry
configuration is created. Every function raises ``ConfigurationError``
when its constraint is violated.
"""

from __future__ import annotations

__all__ = [
    "find_dangling_kinds",
    "validate_backoff_strategy",
    "validate_callable",
    "validate_kind_predicates",
    "validate_max_attempts",
    "validate_task",
]

from typing import TYPE_CHECKING, Any

from aretry.exceptions import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterable, Mapping


def validate_max_attempts(max_attempts: Any) -> None:
    """Validate the attempt budget.

    Args:
        max_attempts: The number of extra attempts after the first one.
            Must be an integer >= 0. A value of 0 means the task is called
            exactly once.

    Raises:
        ConfigurationError: If ``max_attempts`` is not an integer or is
            negative.

    Example:
        ```pycon
        >>> from aretry.validation import validate_max_attempts
        >>> validate_max_attempts(0)
        >>> validate_max_attempts(3)
        >>> validate_max_attempts(-1)
        Traceback (most recent call last):
            ...
        aretry.exceptions.ConfigurationError: max_attempts must be >= 0, got -1

        ```
    """
    if isinstance(max_attempts, bool) or not isinstance(max_attempts, int):
        msg = f"max_attempts must be an integer, got {max_attempts!r}"
        raise ConfigurationError(msg)
    if max_attempts < 0:
        msg = f"max_attempts must be >= 0, got {max_attempts}"
        raise ConfigurationError(msg)


def validate_callable(value: Any, name: str) -> None:
    """Check that a configured hook is callable.

    Args:
        value: The hook to check.
        name: The hook name used in the error message.

    Raises:
        ConfigurationError: If ``value`` is not callable.

    Example:
        ```pycon
        >>> from aretry.validation import validate_callable
        >>> validate_callable(print, "diagnostic sink")
        >>> validate_callable(42, "kind resolver")
        Traceback (most recent call last):
            ...
        aretry.exceptions.ConfigurationError: kind resolver must be callable, got 42

        ```
    """
    if not callable(value):
        msg = f"{name} must be callable, got {value!r}"
        raise ConfigurationError(msg)


def validate_backoff_strategy(strategy: Any) -> None:
    """Validate a backoff strategy before it is added to the chain.

    Raises:
        ConfigurationError: If ``strategy`` is ``None`` or not callable.
    """
    if strategy is None:
        msg = "backoff strategy is required, got None"
        raise ConfigurationError(msg)
    if not callable(strategy):
        msg = f"backoff strategy must be callable, got {strategy!r}"
        raise ConfigurationError(msg)


def validate_task(task: Any) -> None:
    """Validate the task passed to the executor.

    Raises:
        ConfigurationError: If ``task`` is ``None`` or not callable.
    """
    if task is None:
        msg = "the retry task is required, got None"
        raise ConfigurationError(msg)
    if not callable(task):
        msg = f"the retry task must be callable, got {task!r}"
        raise ConfigurationError(msg)


def find_dangling_kinds(
    kind_predicates: Mapping[Hashable, Any], retryable_kinds: Iterable[Hashable]
) -> list[Hashable]:
    """Return the predicate kinds that are not registered as retryable.

    The kinds are returned in predicate registration order.

    Example:
        ```pycon
        >>> from aretry.validation import find_dangling_kinds
        >>> find_dangling_kinds({"io": None, "db": None}, {"io"})
        ['db']

        ```
    """
    retryable = set(retryable_kinds)
    return [kind for kind in kind_predicates if kind not in retryable]


def validate_kind_predicates(
    kind_predicates: Mapping[Hashable, Any], retryable_kinds: Iterable[Hashable]
) -> None:
    """Check that every per-kind predicate refers to a retryable kind.

    Raises:
        ConfigurationError: If some predicate kinds are not retryable. The
            offending kinds are listed in the message and stored in
            ``dangling_kinds``.
    """
    retryable_kinds = list(retryable_kinds)
    dangling = find_dangling_kinds(kind_predicates, retryable_kinds)
    if dangling:
        msg = (
            f"error predicates registered for kinds [{', '.join(map(str, dangling))}] "
            f"which are not retryable kinds [{', '.join(map(str, retryable_kinds))}]"
        )
        raise ConfigurationError(msg, dangling_kinds=dangling)
