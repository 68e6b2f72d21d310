r"""Shared test helpers for building tasks with scripted outcomes."""

from __future__ import annotations

__all__ = ["Kind", "kinded", "scripted_task"]

from enum import Enum
from typing import Any
from unittest.mock import Mock

from aretry.kinds import tag_error_kind


class Kind(Enum):
    """Error kinds used across the tests."""

    TRANSIENT = "transient"
    THROTTLED = "throttled"
    PERMANENT = "permanent"


def kinded(kind: Any, message: str = "boom", error_type: type[Exception] = RuntimeError) -> Exception:
    """Create an exception tagged with ``kind``."""
    return tag_error_kind(error_type(message), kind)


def scripted_task(*outcomes: Any) -> Mock:
    """Create a task returning or raising the given outcomes in order.

    Exceptions in ``outcomes`` are raised, any other value is returned.
    The returned ``Mock`` records the calls.
    """
    return Mock(side_effect=list(outcomes))
