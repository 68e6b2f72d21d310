r"""Diagnostic sink for errors raised by retry listeners and backoff
strategies.

These errors never change the control flow of the retry loop. They are
passed to a diagnostic sink, a callable taking the stage name
(``"listener"`` or ``"backoff"``) and the error. The default sink logs the
error with its traceback.
"""

from __future__ import annotations

__all__ = ["BACKOFF_STAGE", "LISTENER_STAGE", "DiagnosticSink", "log_callback_error"]

import logging
from collections.abc import Callable

logger: logging.Logger = logging.getLogger(__name__)

LISTENER_STAGE = "listener"
BACKOFF_STAGE = "backoff"

DiagnosticSink = Callable[[str, BaseException], None]


def log_callback_error(stage: str, error: BaseException) -> None:
    """Log an error raised by a retry callback.

    Args:
        stage: The callback stage that raised the error.
        error: The suppressed error.

    Example:
        ```pycon
        >>> from aretry.diagnostics import log_callback_error
        >>> log_callback_error("listener", RuntimeError("listener failed"))

        ```
    """
    logger.warning(
        f"Suppressed {type(error).__name__} raised by retry {stage}: {error}",
        exc_info=(type(error), error, error.__traceback__),
    )
