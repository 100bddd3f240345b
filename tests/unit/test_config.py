"""Tests for core/config.py — ClientConfig defaults and from_env()."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from countwerk_sdk.core.config import DEFAULT_BASE_URL, ClientConfig
from countwerk_sdk.resilience.retry import RetryPolicy

_ENV_VARS = (
    "COUNTWERK_BASE_URL",
    "COUNTWERK_API_KEY",
    "COUNTWERK_TIMEOUT",
    "COUNTWERK_MAX_RETRIES",
    "COUNTWERK_LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


# ---------------------------------------------------------------------------
# Defaults and validation
# ---------------------------------------------------------------------------


def test_defaults() -> None:
    config = ClientConfig()
    assert config.base_url == DEFAULT_BASE_URL
    assert config.api_key == ""
    assert config.timeout == 10.0
    assert config.max_retries == 3
    assert config.log_level == "INFO"


def test_timeout_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        ClientConfig(timeout=0)


def test_max_retries_upper_bound() -> None:
    with pytest.raises(ValidationError):
        ClientConfig(max_retries=11)


def test_effective_retry_policy_from_max_retries() -> None:
    policy = ClientConfig(max_retries=5).effective_retry_policy()
    assert policy.max_retries == 5
    assert policy.backoff_base == pytest.approx(0.2)


def test_explicit_retry_policy_wins() -> None:
    custom = RetryPolicy(max_retries=1, backoff_base=0.0)
    assert ClientConfig(max_retries=5, retry_policy=custom).effective_retry_policy() is custom


# ---------------------------------------------------------------------------
# from_env()
# ---------------------------------------------------------------------------


def test_from_env_defaults_when_not_set(clean_env: pytest.MonkeyPatch) -> None:
    assert ClientConfig.from_env() == ClientConfig()


def test_from_env_reads_all_variables(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("COUNTWERK_BASE_URL", "https://billing.internal/")
    clean_env.setenv("COUNTWERK_API_KEY", "ck_live_123")
    clean_env.setenv("COUNTWERK_TIMEOUT", "2.5")
    clean_env.setenv("COUNTWERK_MAX_RETRIES", "0")
    clean_env.setenv("COUNTWERK_LOG_LEVEL", "debug")

    config = ClientConfig.from_env()
    assert config.base_url == "https://billing.internal/"
    assert config.api_key == "ck_live_123"
    assert config.timeout == 2.5
    assert config.max_retries == 0
    assert config.log_level == "DEBUG"


def test_from_env_ignores_empty_values(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("COUNTWERK_API_KEY", "")
    clean_env.setenv("COUNTWERK_TIMEOUT", "")
    config = ClientConfig.from_env()
    assert config.api_key == ""
    assert config.timeout == 10.0


def test_from_env_rejects_bad_number(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("COUNTWERK_MAX_RETRIES", "many")
    with pytest.raises(ValueError):
        ClientConfig.from_env()


def test_from_env_rejects_unknown_log_level(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("COUNTWERK_LOG_LEVEL", "verbose")
    with pytest.raises(ValidationError):
        ClientConfig.from_env()
