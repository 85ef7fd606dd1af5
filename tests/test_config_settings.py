import pytest
from pydantic import ValidationError

from suisage.config import Settings


def test_atoma_key_from_sdk_variable(monkeypatch):
    """The Atoma SDK's bearer token variable is accepted as the API key."""

    monkeypatch.delenv("ATOMA_API_KEY", raising=False)
    monkeypatch.setenv("ATOMASDK_BEARER_AUTH", "sdk-token")

    settings = Settings(_env_file=None)

    assert settings.atoma_api_key == "sdk-token"
    assert settings.has_atoma_key


def test_atoma_key_direct_env(monkeypatch):
    monkeypatch.setenv("ATOMA_API_KEY", "primary-key")
    monkeypatch.delenv("ATOMASDK_BEARER_AUTH", raising=False)

    settings = Settings(_env_file=None)

    assert settings.atoma_api_key == "primary-key"


def test_defaults(monkeypatch):
    monkeypatch.delenv("QUERY_TIMEOUT_SECONDS", raising=False)
    monkeypatch.delenv("DEFAULT_NETWORK", raising=False)

    settings = Settings(_env_file=None)

    assert settings.query_timeout_seconds == 30.0
    assert settings.default_network == "MAINNET"
    assert settings.symbols_file.name == "symbols.yaml"
    assert settings.symbols_file.exists()


def test_aftermath_url_for(monkeypatch):
    monkeypatch.setenv("AFTERMATH_TESTNET_URL", "https://testnet.example/api")

    settings = Settings(_env_file=None)

    assert settings.aftermath_url_for("testnet") == "https://testnet.example/api"
    assert settings.aftermath_url_for("MAINNET") == settings.aftermath_mainnet_url


def test_provider_for_model():
    settings = Settings(_env_file=None)

    assert settings.resolve_provider_for_model("meta-llama/Llama-3.3-70B-Instruct") == "atoma"
    assert settings.resolve_provider_for_model("CLAUDE-SONNET-4-20250514") == "anthropic"
    assert settings.resolve_provider_for_model("gpt-4o") is None
    assert settings.resolve_provider_for_model("") is None


def test_default_model_prefers_flagged_entry():
    settings = Settings(
        _env_file=None,
        provider_models_catalog={
            "atoma": [
                {"id": "small", "default": "false"},
                {"id": "large", "default": "yes"},
            ],
            "anthropic": [{"id": "first"}],
        },
    )

    assert settings.resolve_default_model("atoma") == "large"
    assert settings.resolve_default_model("anthropic") == "first"
    assert settings.resolve_default_model("unknown") == settings.llm_model


def test_query_timeout_must_be_positive(monkeypatch):
    monkeypatch.setenv("QUERY_TIMEOUT_SECONDS", "0")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
