r"""Error kinds used to decide whether a failed attempt is retried.

An error kind is any hashable tag (a string, an ``Enum`` member, ...). The
executor never matches on the Python type of the raised error: it reads the
kind tag attached to the error at the point it was raised or wrapped. A
custom resolver can be configured to compute the kind instead, for
example ``classify_httpx_error`` for errors raised by ``httpx``.

Example:
    ```pycon
    >>> from aretry.kinds import KindedError, get_error_kind, tag_error_kind
    >>> get_error_kind(KindedError("boom", kind="transient"))
    'transient'
    >>> err = tag_error_kind(OSError("disk busy"), "io")
    >>> get_error_kind(err)
    'io'
    >>> get_error_kind(ValueError("untagged")) is None
    True

    ```
"""

from __future__ import annotations

__all__ = [
    "ERROR_KIND_ATTR",
    "HttpxErrorKind",
    "KindedError",
    "classify_httpx_error",
    "get_error_kind",
    "tag_error_kind",
]

from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

import httpx

if TYPE_CHECKING:
    from collections.abc import Hashable

ERROR_KIND_ATTR = "error_kind"

E = TypeVar("E", bound=BaseException)


class KindedError(Exception):
    """Exception carrying an explicit error kind.

    Args:
        message: A descriptive error message.
        kind: The error kind tag.
    """

    def __init__(self, message: str, kind: Hashable) -> None:
        super().__init__(message)
        self.message = message
        self.error_kind = kind

    @property
    def kind(self) -> Hashable:
        return self.error_kind


def tag_error_kind(error: E, kind: Hashable) -> E:
    """Attach an error kind to an existing exception.

    Args:
        error: The exception to tag. It is modified in place.
        kind: The error kind tag.

    Returns:
        The same exception, so the call can be used in a ``raise``
        statement.

    Example:
        ```pycon
        >>> from aretry.kinds import tag_error_kind
        >>> try:
        ...     raise tag_error_kind(TimeoutError("slow"), "timeout")
        ... except TimeoutError as exc:
        ...     exc.error_kind
        ...
        'timeout'

        ```
    """
    setattr(error, ERROR_KIND_ATTR, kind)
    return error


def get_error_kind(error: BaseException) -> Any:
    """Return the error kind attached to an exception.

    Args:
        error: The exception to inspect.

    Returns:
        The error kind tag, or ``None`` if the exception is not tagged.
    """
    return getattr(error, ERROR_KIND_ATTR, None)


class HttpxErrorKind(Enum):
    """Error kinds for the exceptions raised by ``httpx``.

    Attributes:
        TIMEOUT: Connect, read, write or pool timeout.
        TRANSPORT: Connection or protocol level failure.
        SERVER_ERROR: Response with a 5xx status code.
        RATE_LIMITED: Response with the 429 status code.
        CLIENT_ERROR: Any other response with a 4xx status code.
    """

    TIMEOUT = "timeout"
    TRANSPORT = "transport"
    SERVER_ERROR = "server_error"
    RATE_LIMITED = "rate_limited"
    CLIENT_ERROR = "client_error"


def classify_httpx_error(error: BaseException) -> Any:
    """Resolve the kind of an error raised while calling ``httpx``.

    An explicit tag attached with ``tag_error_kind`` always wins. Errors
    that do not come from ``httpx`` and carry no tag have no kind.

    Args:
        error: The exception raised by the task.

    Returns:
        A ``HttpxErrorKind`` member, the explicit tag, or ``None``.

    Example:
        ```pycon
        >>> import httpx
        >>> from aretry.kinds import classify_httpx_error
        >>> classify_httpx_error(httpx.ReadTimeout("too slow"))
        <HttpxErrorKind.TIMEOUT: 'timeout'>
        >>> classify_httpx_error(httpx.ConnectError("refused"))
        <HttpxErrorKind.TRANSPORT: 'transport'>

        ```
    """
    kind = get_error_kind(error)
    if kind is not None:
        return kind
    if isinstance(error, httpx.TimeoutException):
        return HttpxErrorKind.TIMEOUT
    if isinstance(error, httpx.HTTPStatusError):
        status_code = error.response.status_code
        if status_code == 429:
            return HttpxErrorKind.RATE_LIMITED
        if status_code >= 500:
            return HttpxErrorKind.SERVER_ERROR
        return HttpxErrorKind.CLIENT_ERROR
    if isinstance(error, httpx.TransportError):
        return HttpxErrorKind.TRANSPORT
    return None
