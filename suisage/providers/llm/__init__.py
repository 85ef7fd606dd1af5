from typing import Any, Dict, Type, Optional

from .base import (
    LLMMessage,
    LLMProvider,
    LLMProviderAPIError,
    LLMProviderAuthError,
    LLMProviderError,
    LLMProviderRateLimitError,
    LLMResponse,
)
from .anthropic import AnthropicProvider
from .atoma import AtomaProvider

PROVIDER_ALIAS_MAP: Dict[str, str] = {
    "claude": "anthropic",
    "atomasdk": "atoma",
}

PROVIDER_DISPLAY_NAMES: Dict[str, str] = {
    "anthropic": "Anthropic Claude",
    "atoma": "Atoma Network",
}


def canonical_provider_name(name: str) -> str:
    """Normalize provider aliases to their canonical identifier."""

    return PROVIDER_ALIAS_MAP.get(name.lower(), name.lower())


# Registry of available LLM providers
PROVIDER_REGISTRY: Dict[str, Type[LLMProvider]] = {
    "anthropic": AnthropicProvider,
    "atoma": AtomaProvider,
}


class LLMProviderFactory:
    """Factory for creating LLM provider instances."""

    @staticmethod
    def create_provider(
        provider_name: str,
        api_key: str,
        model: Optional[str] = None,
        **kwargs,
    ) -> LLMProvider:
        """Create an LLM provider instance."""

        provider_key = canonical_provider_name(provider_name)
        if provider_key not in PROVIDER_REGISTRY:
            available_providers = ", ".join(PROVIDER_REGISTRY.keys())
            raise ValueError(
                f"Unsupported provider '{provider_name}'. "
                f"Available providers: {available_providers}"
            )

        if not model:
            raise ValueError(f"No model provided for provider '{provider_key}'.")

        provider_class = PROVIDER_REGISTRY[provider_key]
        return provider_class(api_key=api_key, model=model, **kwargs)


def get_available_providers() -> Dict[str, Dict[str, Any]]:
    """Return metadata about supported LLM providers."""

    from ...config import settings  # Local import to avoid circular dependency

    providers_info: Dict[str, Dict[str, Any]] = {}
    for provider_name in PROVIDER_REGISTRY:
        display_name = PROVIDER_DISPLAY_NAMES.get(provider_name, provider_name.title())
        providers_info[provider_name] = {
            "default_model": settings.resolve_default_model(provider_name),
            "display_name": display_name,
            "models": settings.provider_models_catalog.get(provider_name, []),
            "configured": bool(_api_key_for(provider_name, settings)),
        }
    return providers_info


def _api_key_for(provider_name: str, settings) -> Optional[str]:
    if provider_name == "anthropic":
        return settings.anthropic_api_key
    if provider_name == "atoma":
        return settings.atoma_api_key
    return None


def get_llm_provider(
    provider_name: Optional[str] = None,
    model: Optional[str] = None,
    **kwargs,
) -> LLMProvider:
    """Instantiate an LLM provider according to configuration overrides.

    A model id listed under another provider in the models catalog switches
    the provider, unless one was named explicitly. A model the chosen
    provider does not list falls back to that provider's default.
    """

    from ...config import settings

    provider_input = (provider_name or "").strip().lower() or None
    model_input = (model or "").strip() or None

    resolved_provider = canonical_provider_name(provider_input or settings.llm_provider)
    if provider_input is None and model_input:
        detected_provider = settings.resolve_provider_for_model(model_input)
        if detected_provider:
            resolved_provider = canonical_provider_name(detected_provider)

    api_key = _api_key_for(resolved_provider, settings)
    if not api_key:
        raise ValueError(f"No API key configured for provider: {resolved_provider}")

    resolved_model = model_input or (settings.llm_model or "").strip() or None
    allowed_ids = {
        entry.get("id")
        for entry in settings.provider_models_catalog.get(resolved_provider, [])
        if entry.get("id")
    }
    if resolved_model is None or (allowed_ids and resolved_model not in allowed_ids):
        resolved_model = settings.resolve_default_model(resolved_provider)

    kwargs.setdefault("max_tokens", settings.llm_max_tokens)
    kwargs.setdefault("temperature", settings.llm_temperature)
    kwargs.setdefault("timeout", settings.llm_timeout_seconds)
    if resolved_provider == "atoma":
        kwargs.setdefault("base_url", settings.atoma_base_url)

    return LLMProviderFactory.create_provider(
        provider_name=resolved_provider,
        api_key=api_key,
        model=resolved_model,
        **kwargs,
    )


__all__ = [
    "LLMProvider",
    "LLMMessage",
    "LLMResponse",
    "LLMProviderError",
    "LLMProviderAPIError",
    "LLMProviderAuthError",
    "LLMProviderRateLimitError",
    "AnthropicProvider",
    "AtomaProvider",
    "LLMProviderFactory",
    "get_available_providers",
    "get_llm_provider",
    "PROVIDER_REGISTRY",
    "canonical_provider_name",
]
