r"""Retry executor driving the attempt loop.

The executor reads an immutable ``RetryConfig`` and keeps all the mutable
state of a call (attempt index, last result, last error) in local
variables, so one executor can be used by several threads at once.

Each attempt ends in one of four states:

- success with a result the result predicate accepts: the result is
  returned immediately.
- success with a result the result predicate rejects: retry decision.
- error whose kind is retryable and passes its kind predicate: retry
  decision.
- any other error: ``FatalTaskError`` is raised immediately.

The retry decision invokes the listeners and then the backoff strategy
with ``(result, error)``. It also runs after the last attempt, so the
backoff strategy is called once more than the number of retries.
"""

from __future__ import annotations

__all__ = ["RetryExecutor"]

import functools
import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from aretry.diagnostics import BACKOFF_STAGE, LISTENER_STAGE
from aretry.exceptions import FatalTaskError, RetryExhaustedError
from aretry.validation import validate_task

if TYPE_CHECKING:
    from collections.abc import Callable

    from aretry.config import RetryConfig

logger: logging.Logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExecutor(Generic[T]):
    """Execute tasks under a retry policy.

    Args:
        config: The retry configuration.

    Attributes:
        config: The retry configuration.

    Example:
        ```pycon
        >>> from aretry import RetryBuilder, tag_error_kind
        >>> attempts = iter([OSError("busy"), OSError("busy"), "ok"])
        >>> def task():
        ...     outcome = next(attempts)
        ...     if isinstance(outcome, Exception):
        ...         raise tag_error_kind(outcome, "transient")
        ...     return outcome
        ...
        >>> executor = RetryBuilder().retry_if_error_kind("transient").with_max_attempts(3).build()
        >>> executor.execute(task)
        'ok'

        ```
    """

    def __init__(self, config: RetryConfig[T]) -> None:
        self.config = config

    def __repr__(self) -> str:
        return f"{type(self).__qualname__}(max_attempts={self.config.max_attempts})"

    def execute(self, task: Callable[[], T]) -> T | None:
        """Invoke ``task`` until it succeeds, fails fatally, or the attempt
        budget is exhausted.

        Args:
            task: The operation to run. It takes no arguments.

        Returns:
            The first result the result predicate does not retry, or the
            last observed result once all the attempts are used. The last
            result is ``None`` if every attempt raised a retryable error.

        Raises:
            ConfigurationError: If ``task`` is ``None`` or not callable.
            FatalTaskError: If the task raises an error that is not
                retryable. The task error is chained as ``__cause__``.
                Also raised if the result predicate, the kind resolver or
                an error predicate raises, chained from that error.
            RetryExhaustedError: If the configuration enables
                ``raise_on_exhaustion`` and the last attempt raised a
                retryable error.
        """
        validate_task(task)
        config = self.config
        result: T | None = None
        error: BaseException | None = None
        error_kind: Any = None

        for attempt in range(config.max_attempts + 1):
            try:
                result = task()
            except Exception as exc:
                error = exc
                error_kind = self._check_retryable(exc, attempt)
            else:
                error = error_kind = None
                if not self._should_retry_result(result, attempt):
                    logger.debug(
                        f"Task succeeded on attempt {attempt + 1}/{config.max_attempts + 1}"
                    )
                    return result
                logger.debug(
                    f"Task result on attempt {attempt + 1}/{config.max_attempts + 1} "
                    f"matched the retry condition"
                )

            self._on_retry(result, error)

        if error is not None and config.raise_on_exhaustion:
            msg = (
                f"task failed after {config.max_attempts + 1} attempts: "
                f"{type(error).__name__}: {error}"
            )
            raise RetryExhaustedError(
                msg,
                cause=error,
                kind=error_kind,
                attempts=config.max_attempts + 1,
            ) from error

        logger.debug(f"Retry budget exhausted after {config.max_attempts + 1} attempts")
        return result

    __call__ = execute

    def wrap(self, func: Callable[..., T]) -> Callable[..., T | None]:
        """Decorate ``func`` so every call runs under this retry policy.

        Example:
            ```pycon
            >>> from aretry import RetryBuilder
            >>> executor = RetryBuilder().with_max_attempts(2).build()
            >>> @executor.wrap
            ... def add(a, b):
            ...     return a + b
            ...
            >>> add(1, 2)
            3

            ```
        """

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T | None:
            return self.execute(functools.partial(func, *args, **kwargs))

        return wrapper

    def _should_retry_result(self, result: T, attempt: int) -> bool:
        """Evaluate the result predicate.

        Raises:
            FatalTaskError: If the predicate itself raises.
        """
        try:
            return self.config.result_predicate(result)
        except Exception as exc:
            msg = f"retry condition raised {type(exc).__name__} for result {result!r}: {exc}"
            raise FatalTaskError(msg, cause=exc, attempt=attempt) from exc

    def _check_retryable(self, exc: Exception, attempt: int) -> Any:
        """Return the kind of ``exc``, or raise ``FatalTaskError`` if
        ``exc`` must not be retried.

        A failing kind resolver or error predicate is fatal too. The
        ``FatalTaskError`` then wraps the callback error, and the task
        error stays available as its ``__context__``.
        """
        config = self.config
        try:
            kind = config.kind_resolver(exc)
        except Exception as resolver_exc:
            msg = (
                f"kind resolver raised {type(resolver_exc).__name__} for "
                f"{type(exc).__name__}: {resolver_exc}"
            )
            raise FatalTaskError(msg, cause=resolver_exc, attempt=attempt) from resolver_exc
        logger.debug(
            f"Task raised {type(exc).__name__} (kind={kind!r}) on attempt "
            f"{attempt + 1}/{config.max_attempts + 1}: {exc}"
        )
        if not config.is_retryable_kind(kind):
            msg = f"task raised non-retryable {type(exc).__name__} (kind={kind!r}): {exc}"
            raise FatalTaskError(msg, cause=exc, kind=kind, attempt=attempt) from exc

        predicate = config.get_kind_predicate(kind)
        if predicate is None:
            return kind
        try:
            accepted = predicate(exc)
        except Exception as predicate_exc:
            msg = (
                f"error predicate for kind={kind!r} raised {type(predicate_exc).__name__}: "
                f"{predicate_exc}"
            )
            raise FatalTaskError(
                msg, cause=predicate_exc, kind=kind, attempt=attempt
            ) from predicate_exc
        if not accepted:
            msg = (
                f"task raised {type(exc).__name__} (kind={kind!r}) rejected by its "
                f"error predicate: {exc}"
            )
            raise FatalTaskError(msg, cause=exc, kind=kind, attempt=attempt) from exc
        return kind

    def _on_retry(self, result: T | None, error: BaseException | None) -> None:
        """Invoke the listeners and then the backoff strategy.

        Errors raised by the callbacks go to the diagnostic sink.
        """
        sink = self.config.diagnostic_sink
        self.config.listener(
            result, error, on_error=functools.partial(_report, sink, LISTENER_STAGE)
        )
        self.config.backoff(
            result, error, on_error=functools.partial(_report, sink, BACKOFF_STAGE)
        )


def _report(
    sink: Callable[[str, BaseException], None], stage: str, error: BaseException
) -> None:
    try:
        sink(stage, error)
    except Exception:
        logger.exception(f"Diagnostic sink failed while reporting a retry {stage} error")
