r"""Unit tests for the retry builder."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from aretry import ConfigurationError, RetryBuilder, RetryConfig, RetryExecutor
from aretry.diagnostics import log_callback_error
from aretry.kinds import get_error_kind
from tests.helpers import Kind


def test_new_builder_returns_fresh_builder() -> None:
    """Test that new_builder creates independent builders."""
    first = RetryBuilder.new_builder()
    second = RetryBuilder.new_builder()
    assert isinstance(first, RetryBuilder)
    assert first is not second


def test_build_defaults() -> None:
    """Test the configuration produced by an empty builder."""
    config = RetryBuilder().build_config()

    assert isinstance(config, RetryConfig)
    assert config.max_attempts == 0
    assert config.retryable_kinds == frozenset()
    assert dict(config.kind_predicates) == {}
    assert len(config.listener) == 0
    assert len(config.backoff) == 0
    assert config.result_predicate("anything") is False
    assert config.kind_resolver is get_error_kind
    assert config.diagnostic_sink is log_callback_error
    assert config.raise_on_exhaustion is False


def test_build_returns_executor() -> None:
    """Test that build binds an executor to the configuration."""
    executor = RetryBuilder().with_max_attempts(4).build()
    assert isinstance(executor, RetryExecutor)
    assert executor.config.max_attempts == 4


def test_fluent_methods_return_builder() -> None:
    """Test that every configuration method returns the same builder."""
    builder = RetryBuilder()
    assert builder.retry_if_condition(lambda x: False) is builder
    assert builder.retry_if_error_kind(Kind.TRANSIENT) is builder
    assert builder.retry_with_error_predicate(Kind.TRANSIENT, lambda exc: True) is builder
    assert builder.with_retry_listener(Mock()) is builder
    assert builder.with_backoff_strategy(Mock()) is builder
    assert builder.with_max_attempts(1) is builder
    assert builder.with_kind_resolver(None) is builder
    assert builder.with_diagnostic_sink(None) is builder
    assert builder.raise_on_exhaustion() is builder


#########################################
#     Tests for None arguments          #
#########################################


def test_retry_if_condition_none_is_noop() -> None:
    config = RetryBuilder().retry_if_condition(None).build_config()
    assert config.result_predicate.predicates == ()


def test_retry_if_error_kind_none_is_noop() -> None:
    config = RetryBuilder().retry_if_error_kind(None).build_config()
    assert config.retryable_kinds == frozenset()


@pytest.mark.parametrize(
    ("kind", "predicate"),
    [(None, lambda exc: True), (Kind.TRANSIENT, None), (None, None)],
)
def test_retry_with_error_predicate_none_is_noop(kind: Kind | None, predicate: object) -> None:
    config = RetryBuilder().retry_with_error_predicate(kind, predicate).build_config()
    assert dict(config.kind_predicates) == {}


def test_with_retry_listener_none_is_noop() -> None:
    config = RetryBuilder().with_retry_listener(None).build_config()
    assert len(config.listener) == 0


def test_with_backoff_strategy_none_raises() -> None:
    """Test that the backoff strategy is required."""
    with pytest.raises(ConfigurationError, match=r"backoff strategy is required"):
        RetryBuilder().with_backoff_strategy(None)


#########################################
#     Tests for merging rules           #
#########################################


def test_retry_if_condition_merges_with_or() -> None:
    config = (
        RetryBuilder()
        .retry_if_condition(lambda x: x < 0)
        .retry_if_condition(lambda x: x > 100)
        .build_config()
    )
    assert config.result_predicate(-1) is True
    assert config.result_predicate(101) is True
    assert config.result_predicate(50) is False


def test_retry_if_error_kind_deduplicates() -> None:
    config = (
        RetryBuilder()
        .retry_if_error_kind(Kind.TRANSIENT)
        .retry_if_error_kind(Kind.TRANSIENT)
        .retry_if_error_kind(Kind.THROTTLED)
        .build_config()
    )
    assert config.retryable_kinds == frozenset({Kind.TRANSIENT, Kind.THROTTLED})


def test_retry_with_error_predicate_merges_per_kind() -> None:
    config = (
        RetryBuilder()
        .retry_if_error_kind(Kind.TRANSIENT)
        .retry_if_error_kind(Kind.THROTTLED)
        .retry_with_error_predicate(Kind.TRANSIENT, lambda exc: "a" in str(exc))
        .retry_with_error_predicate(Kind.TRANSIENT, lambda exc: "b" in str(exc))
        .retry_with_error_predicate(Kind.THROTTLED, lambda exc: False)
        .build_config()
    )
    transient = config.get_kind_predicate(Kind.TRANSIENT)
    assert len(transient.predicates) == 2
    assert transient(RuntimeError("a")) is True
    assert transient(RuntimeError("b")) is True
    assert transient(RuntimeError("c")) is False
    assert config.get_kind_predicate(Kind.THROTTLED)(RuntimeError("a")) is False
    assert config.get_kind_predicate(Kind.PERMANENT) is None


def test_listeners_and_backoff_are_chained() -> None:
    first, second = Mock(), Mock()
    config = (
        RetryBuilder()
        .with_retry_listener(first)
        .with_retry_listener(second)
        .with_backoff_strategy(second)
        .build_config()
    )
    assert config.listener.callbacks == (first, second)
    assert config.backoff.callbacks == (second,)


def test_with_max_attempts_last_value_wins() -> None:
    config = RetryBuilder().with_max_attempts(5).with_max_attempts(2).build_config()
    assert config.max_attempts == 2


@pytest.mark.parametrize("count", [-1, -10])
def test_with_max_attempts_negative_raises(count: int) -> None:
    with pytest.raises(ConfigurationError, match=rf"max_attempts must be >= 0, got {count}"):
        RetryBuilder().with_max_attempts(count)


def test_with_max_attempts_non_integer_raises() -> None:
    with pytest.raises(ConfigurationError, match=r"max_attempts must be an integer"):
        RetryBuilder().with_max_attempts(1.5)


def test_with_kind_resolver_and_sink() -> None:
    resolver, sink = Mock(), Mock()
    config = (
        RetryBuilder()
        .with_kind_resolver(resolver)
        .with_diagnostic_sink(sink)
        .raise_on_exhaustion()
        .build_config()
    )
    assert config.kind_resolver is resolver
    assert config.diagnostic_sink is sink
    assert config.raise_on_exhaustion is True


#########################################
#     Tests for build validation        #
#########################################


def test_build_dangling_predicate_raises() -> None:
    """Test that a predicate for an unregistered kind fails the build."""
    builder = (
        RetryBuilder()
        .retry_if_error_kind(Kind.TRANSIENT)
        .retry_with_error_predicate(Kind.THROTTLED, lambda exc: True)
    )
    with pytest.raises(ConfigurationError, match=r"Kind.THROTTLED") as exc_info:
        builder.build()
    assert exc_info.value.dangling_kinds == frozenset({Kind.THROTTLED})


def test_build_config_returns_error_instead_of_raising() -> None:
    outcome = RetryBuilder().retry_with_error_predicate("io", lambda exc: True).build_config()
    assert isinstance(outcome, ConfigurationError)
    assert outcome.dangling_kinds == frozenset({"io"})


def test_build_predicate_registered_before_kind() -> None:
    """Test that registration order does not matter for validation."""
    executor = (
        RetryBuilder()
        .retry_with_error_predicate(Kind.TRANSIENT, lambda exc: True)
        .retry_if_error_kind(Kind.TRANSIENT)
        .build()
    )
    assert executor.config.is_retryable_kind(Kind.TRANSIENT)


def test_built_config_is_isolated_from_builder() -> None:
    """Test that changing the builder after build does not affect the
    configuration."""
    builder = RetryBuilder().retry_if_error_kind(Kind.TRANSIENT)
    config = builder.build_config()
    builder.retry_if_error_kind(Kind.THROTTLED).with_max_attempts(3)

    assert config.retryable_kinds == frozenset({Kind.TRANSIENT})
    assert config.max_attempts == 0


def test_with_kind_resolver_non_callable_raises() -> None:
    with pytest.raises(ConfigurationError, match=r"kind resolver must be callable, got 42"):
        RetryBuilder().with_kind_resolver(42)


def test_with_diagnostic_sink_non_callable_raises() -> None:
    with pytest.raises(ConfigurationError, match=r"diagnostic sink must be callable"):
        RetryBuilder().with_diagnostic_sink("stderr")


def test_with_kind_resolver_none_restores_default() -> None:
    config = RetryBuilder().with_kind_resolver(Mock()).with_kind_resolver(None).build_config()
    assert config.kind_resolver is get_error_kind
