from __future__ import annotations

import pytest

from rsmkit.config import (
    ConfigurationError,
    MissingConfigurationError,
    get_cluster_config,
    get_reconcile_config,
    require_env_var,
    require_env_vars,
)
from rsmkit.config.env import float_env_var, int_env_var, optional_env_var
from rsmkit.domain.model import DEFAULT_FINALIZER


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_reports_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_A", raising=False)
    monkeypatch.setenv("MISSING_B", "  ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError):
        require_env_var("EXAMPLE_VAR")


def test_optional_env_var_falls_back_on_blank(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "")

    assert optional_env_var("EXAMPLE_VAR", "fallback") == "fallback"


def test_int_env_var_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_INT", "four")

    with pytest.raises(ConfigurationError, match="EXAMPLE_INT must be an integer"):
        int_env_var("EXAMPLE_INT", 1)


def test_int_env_var_enforces_minimum(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_INT", "0")

    with pytest.raises(ConfigurationError, match=">= 1"):
        int_env_var("EXAMPLE_INT", 4, minimum=1)


def test_float_env_var_rejects_non_positive(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_FLOAT", "-2")

    with pytest.raises(ConfigurationError, match="must be positive"):
        float_env_var("EXAMPLE_FLOAT", 1.0)


def test_reconcile_config_defaults() -> None:
    config = get_reconcile_config()

    assert config.finalizer == DEFAULT_FINALIZER
    assert config.field_manager == "rsmkit"
    assert config.transform_parallelism == 4


def test_reconcile_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RSMKIT_FINALIZER", "example.com/cleanup")
    monkeypatch.setenv("RSMKIT_FIELD_MANAGER", "operator")
    monkeypatch.setenv("RSMKIT_TRANSFORM_PARALLELISM", "2")

    config = get_reconcile_config()

    assert config.finalizer == "example.com/cleanup"
    assert config.field_manager == "operator"
    assert config.transform_parallelism == 2


def test_cluster_config_requires_api_url() -> None:
    with pytest.raises(MissingConfigurationError, match="RSMKIT_API_URL"):
        get_cluster_config()


def test_cluster_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RSMKIT_API_URL", "https://cluster.example")
    monkeypatch.setenv("RSMKIT_API_TOKEN", "  secret  ")
    monkeypatch.setenv("RSMKIT_API_TIMEOUT", "2.5")
    monkeypatch.setenv("RSMKIT_API_VERSION", "v1beta1")

    config = get_cluster_config()

    assert config.api_url == "https://cluster.example"
    assert config.token == "secret"
    assert config.timeout_seconds == 2.5
    assert config.api_prefix == "/apis/rsmkit.io/v1beta1"


def test_cluster_config_treats_blank_token_as_absent(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RSMKIT_API_URL", "https://cluster.example")
    monkeypatch.setenv("RSMKIT_API_TOKEN", "   ")

    assert get_cluster_config().token is None
