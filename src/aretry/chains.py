r"""Composable predicates and callback chains.

The builder never composes bare functions at runtime. Every rule is stored
in one of the value types below, and each type has an explicit ``combine``
operation:

- ``ResultPredicate`` and ``ErrorPredicate`` combine with a logical OR.
- ``RetryListener`` and ``BackoffStrategy`` combine into an ordered chain
  that invokes every member in registration order.

All the types are immutable, so a combined value can be shared between
configurations.
"""

from __future__ import annotations

__all__ = ["BackoffStrategy", "CallbackChain", "ErrorPredicate", "ResultPredicate", "RetryListener"]

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")


@dataclass(frozen=True)
class ResultPredicate(Generic[T]):
    """Predicate over a successful result of the task.

    The predicate returns ``True`` if the result should be retried. An
    empty predicate never asks for a retry.

    Args:
        predicates: The functions combined with a logical OR.

    Example:
        ```pycon
        >>> from aretry.chains import ResultPredicate
        >>> small = ResultPredicate.of(lambda x: x < 10)
        >>> odd = ResultPredicate.of(lambda x: x % 2 == 1)
        >>> combined = small.combine(odd)
        >>> combined(5), combined(11), combined(12)
        (True, True, False)
        >>> ResultPredicate()(5)
        False

        ```
    """

    predicates: tuple[Callable[[T], bool], ...] = ()

    @classmethod
    def of(cls, predicate: Callable[[T], bool]) -> ResultPredicate[T]:
        return cls((predicate,))

    def combine(self, other: ResultPredicate[T]) -> ResultPredicate[T]:
        """Return the logical OR of this predicate and ``other``."""
        return ResultPredicate(self.predicates + other.predicates)

    def __call__(self, result: T) -> bool:
        return any(predicate(result) for predicate in self.predicates)


@dataclass(frozen=True)
class ErrorPredicate:
    """Predicate over an error raised by the task.

    The predicate returns ``True`` if the error may be retried. It is used
    as an additional gate for a single error kind.

    Args:
        predicates: The functions combined with a logical OR.

    Example:
        ```pycon
        >>> from aretry.chains import ErrorPredicate
        >>> busy = ErrorPredicate.of(lambda exc: "busy" in str(exc))
        >>> busy(OSError("device busy")), busy(OSError("no such file"))
        (True, False)

        ```
    """

    predicates: tuple[Callable[[BaseException], bool], ...] = ()

    @classmethod
    def of(cls, predicate: Callable[[BaseException], bool]) -> ErrorPredicate:
        return cls((predicate,))

    def combine(self, other: ErrorPredicate) -> ErrorPredicate:
        """Return the logical OR of this predicate and ``other``."""
        return ErrorPredicate(self.predicates + other.predicates)

    def __call__(self, error: BaseException) -> bool:
        return any(predicate(error) for predicate in self.predicates)


@dataclass(frozen=True)
class CallbackChain(Generic[T]):
    """Ordered chain of callbacks taking ``(result, error)``.

    Calling the chain invokes every callback in registration order. If
    ``on_error`` is given, an error raised by one callback is passed to it
    and the remaining callbacks still run. Otherwise the error propagates
    and the remaining callbacks are skipped.

    Args:
        callbacks: The callbacks in invocation order.
    """

    callbacks: tuple[Callable[[T | None, BaseException | None], Any], ...] = ()

    @classmethod
    def of(cls, callback: Callable[[T | None, BaseException | None], Any]) -> CallbackChain[T]:
        return cls((callback,))

    def combine(self, other: CallbackChain[T]) -> CallbackChain[T]:
        """Return a chain running this chain and then ``other``."""
        return type(self)(self.callbacks + other.callbacks)

    def __len__(self) -> int:
        return len(self.callbacks)

    def __call__(
        self,
        result: T | None,
        error: BaseException | None,
        on_error: Callable[[BaseException], None] | None = None,
    ) -> None:
        for callback in self.callbacks:
            if on_error is None:
                callback(result, error)
                continue
            try:
                callback(result, error)
            except Exception as exc:  # noqa: BLE001
                on_error(exc)


class RetryListener(CallbackChain[T]):
    """Observability hooks invoked on every retry decision.

    Example:
        ```pycon
        >>> from aretry.chains import RetryListener
        >>> seen = []
        >>> listener = RetryListener.of(lambda r, e: seen.append(("first", r)))
        >>> listener = listener.combine(RetryListener.of(lambda r, e: seen.append(("second", r))))
        >>> listener(5, None)
        >>> seen
        [('first', 5), ('second', 5)]

        ```
    """


class BackoffStrategy(CallbackChain[T]):
    """Pacing hooks invoked between attempts.

    A backoff strategy may block the calling thread, for example with
    ``time.sleep``. The empty strategy is a no-op.
    """
