from __future__ import annotations

from unittest.mock import Mock

import pytest


@pytest.fixture
def mock_listener() -> Mock:
    """Create a mock retry listener."""
    return Mock(return_value=None)


@pytest.fixture
def mock_backoff() -> Mock:
    """Create a mock backoff strategy."""
    return Mock(return_value=None)


@pytest.fixture
def mock_sink() -> Mock:
    """Create a mock diagnostic sink."""
    return Mock(return_value=None)
