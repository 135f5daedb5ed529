"""Tests for configuration models."""

import pytest
from pydantic import ValidationError

from patchmerge.core.config import (
    Config,
    EngineConfig,
    ProviderConfig,
    State,
)
from patchmerge.core.log import ConsoleSink, Logger


def _quiet(tmp_path, **fields):
    return Config(
        logger=Logger(console=ConsoleSink(enabled=False)),
        log_root=tmp_path,
        **fields,
    )


def test_engine_defaults():
    engine = EngineConfig()

    assert engine.acceptance_confidence == 0.7
    assert engine.similarity_threshold == 0.8
    assert engine.min_preservation == 0.3
    assert engine.min_integration == 0.5


def test_provider_credential_is_secret():
    provider = ProviderConfig(
        name="alpha",
        endpoint="https://alpha.example.com/v1",
        credential="sk-hidden",
        model="alpha-chat",
    )

    assert "sk-hidden" not in repr(provider)
    assert provider.credential.get_secret_value() == "sk-hidden"
    assert provider.max_output_tokens == 4000
    assert provider.temperature == 0.1


def test_provider_temperature_is_bounded():
    with pytest.raises(ValidationError):
        ProviderConfig(
            name="alpha",
            endpoint="https://alpha.example.com/v1",
            credential="sk",
            model="m",
            temperature=1.5,
        )


def test_config_keeps_providers_in_order(tmp_path):
    config = _quiet(tmp_path, providers=[
        {"name": "alpha", "endpoint": "https://a/v1",
         "credential": "sk-a", "model": "a"},
        {"name": "beta", "endpoint": "https://b/v1",
         "credential": "sk-b", "model": "b"},
    ])

    assert [p.name for p in config.providers] == ["alpha", "beta"]
    assert config.providers[1].model == "b"
    config.close()


def test_environment_fills_values_yaml_leaves_unset(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PATCHMERGE_CONFIG__LOG_ROOT", str(tmp_path / "logs"))
    monkeypatch.setenv(
        "PATCHMERGE_CONFIG__ENGINE__ACCEPTANCE_CONFIDENCE", "0.95"
    )

    state = State()

    assert state.config.log_root == tmp_path / "logs"
    # YAML outranks the environment
    assert state.config.engine.acceptance_confidence == 0.7
    state.config.close()


def test_init_arguments_outrank_yaml(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    state = State(config=_quiet(tmp_path, run_name="explicit"))

    assert state.config.run_name == "explicit"
    state.config.close()
