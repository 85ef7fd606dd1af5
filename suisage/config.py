from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]
PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=3001, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: Optional[bool] = Field(
        default=None,
        description="Force JSON (true) or console (false) log lines; unset picks by level",
    )
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")

    # LLM Provider Settings
    llm_provider: str = Field(default="anthropic", description="Default LLM provider")
    anthropic_api_key: str = Field(default="", description="Anthropic API key")
    atoma_api_key: str = Field(
        default="",
        description="Atoma API key",
        validation_alias=AliasChoices("atoma_api_key", "ATOMA_API_KEY", "ATOMASDK_BEARER_AUTH"),
    )
    atoma_base_url: str = Field(default="https://api.atoma.network", description="Atoma API base URL")

    # LLM Configuration
    llm_model: str = Field(default="claude-sonnet-4-20250514", description="Default LLM model")
    llm_max_tokens: int = Field(default=1000, description="Maximum tokens for the plan completion")
    llm_temperature: float = Field(default=0.3, description="LLM temperature setting")
    llm_timeout_seconds: float = Field(default=40.0, description="LLM request timeout")
    provider_models_catalog: Dict[str, List[Dict[str, Any]]] = Field(
        default_factory=lambda: {
            "anthropic": [
                {
                    "id": "claude-sonnet-4-20250514",
                    "label": "Claude Sonnet 4",
                    "description": "Balanced depth and latency for daily use.",
                    "default": True,
                },
            ],
            "atoma": [
                {
                    "id": "meta-llama/Llama-3.3-70B-Instruct",
                    "label": "Llama 3.3 70B Instruct",
                    "description": "Open-weights model served by Atoma.",
                    "default": True,
                }
            ],
        },
        description="Provider models metadata surfaced to clients",
    )

    # Market data (Aftermath Finance)
    aftermath_mainnet_url: str = Field(
        default="https://aftermath.finance/api",
        description="Aftermath REST API base URL for MAINNET",
    )
    aftermath_testnet_url: str = Field(
        default="https://testnet.aftermath.finance/api",
        description="Aftermath REST API base URL for TESTNET",
    )
    aftermath_timeout_seconds: float = Field(default=15.0, description="Aftermath request timeout")
    default_network: str = Field(default="MAINNET", description="Network used when a tool call omits one")

    # Query pipeline
    query_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Wall-clock budget for one query, enforced by the request handler",
    )
    symbols_file: Path = Field(
        default=PACKAGE_DIR / "data" / "symbols.yaml",
        description="YAML file mapping coin symbols to canonical coin types",
    )

    @property
    def has_anthropic_key(self) -> bool:
        return bool(self.anthropic_api_key)

    @property
    def has_atoma_key(self) -> bool:
        return bool(self.atoma_api_key)

    @property
    def has_llm_key(self) -> bool:
        """Check if we have an API key for the configured LLM provider"""
        if self.llm_provider.lower() in ["anthropic", "claude"]:
            return self.has_anthropic_key
        elif self.llm_provider.lower() == "atoma":
            return self.has_atoma_key
        return False

    def aftermath_url_for(self, network: str) -> str:
        if network.upper() == "TESTNET":
            return self.aftermath_testnet_url
        return self.aftermath_mainnet_url

    def resolve_default_model(self, provider: str) -> str:
        provider_lower = provider.lower()
        options = self.provider_models_catalog.get(provider_lower, [])
        for option in options:
            default_flag = option.get("default")
            if isinstance(default_flag, str):
                is_default = default_flag.lower() in {"true", "1", "yes"}
            else:
                is_default = bool(default_flag)
            if is_default:
                return option.get("id", self.llm_model)
        if options:
            return options[0].get("id", self.llm_model)
        return self.llm_model

    def resolve_provider_for_model(self, model_id: str) -> Optional[str]:
        target = (model_id or "").strip().lower()
        if not target:
            return None
        for provider, options in self.provider_models_catalog.items():
            for option in options:
                option_id = option.get("id")
                if option_id and option_id.lower() == target:
                    return provider
        return None


settings = Settings()
