import time
from typing import Any, Dict, List, Optional, Tuple

import anthropic
from anthropic import AsyncAnthropic

from .base import (
    LLMMessage,
    LLMProvider,
    LLMProviderAPIError,
    LLMProviderAuthError,
    LLMProviderError,
    LLMProviderRateLimitError,
    LLMResponse,
)


def _split_system(messages: List[LLMMessage]) -> Tuple[Optional[str], List[Dict[str, str]]]:
    """Anthropic takes the system prompt as a separate argument."""
    system_parts = [msg.content for msg in messages if msg.role == "system" and msg.content]
    turns = [
        {"role": msg.role, "content": msg.content or ""}
        for msg in messages
        if msg.role != "system"
    ]
    return ("\n\n".join(system_parts) or None), turns


class AnthropicProvider(LLMProvider):
    """Anthropic Claude LLM provider"""

    name = "anthropic"

    def __init__(self, api_key: str, model: Optional[str] = None, **kwargs):
        if not model:
            raise ValueError("AnthropicProvider requires a model to be specified")

        super().__init__(api_key, model, **kwargs)

    def _setup_client(self, **kwargs) -> None:
        self.client = kwargs.get("client") or AsyncAnthropic(
            api_key=self.api_key,
            timeout=kwargs.get("timeout", 40.0),
        )

    async def generate_response(
        self,
        messages: List[LLMMessage],
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        **kwargs
    ) -> LLMResponse:
        """Generate a response from Claude"""
        start_time = time.time()
        system, turns = _split_system(messages)

        params: Dict[str, Any] = {
            "model": self.model,
            "messages": turns,
            "max_tokens": max_tokens or self.max_tokens,
            **kwargs,
        }
        if system:
            params["system"] = system
        if temperature is not None:
            params["temperature"] = temperature

        try:
            message = await self.client.messages.create(**params)
        except anthropic.AuthenticationError as e:
            await self._handle_error(LLMProviderAuthError(f"Authentication failed: {e}"), "generate_response")
        except anthropic.RateLimitError as e:
            await self._handle_error(LLMProviderRateLimitError(f"Rate limit exceeded: {e}"), "generate_response")
        except anthropic.APIError as e:
            await self._handle_error(LLMProviderAPIError(f"API error: {e}"), "generate_response")

        text = "".join(getattr(block, "text", "") for block in message.content or [])
        usage = getattr(message, "usage", None)
        return self._create_response(
            content=text,
            tokens_used=usage.output_tokens if usage else None,
            finish_reason=getattr(message, "stop_reason", None),
            response_time_ms=self._measure_time(start_time),
        )

    async def close(self) -> None:
        await self.client.close()

    async def health_check(self) -> Dict[str, Any]:
        """Check if Anthropic API is healthy"""
        status: Dict[str, Any] = {"provider": self.name, "model": self.model}
        try:
            await self.generate_response(
                messages=[LLMMessage(role="user", content="Hello")],
                max_tokens=10,
                temperature=0,
            )
        except LLMProviderAuthError:
            return {**status, "status": "error", "error": "Authentication failed"}
        except LLMProviderRateLimitError:
            return {**status, "status": "degraded", "error": "Rate limit exceeded"}
        except LLMProviderError as e:
            return {**status, "status": "error", "error": str(e)}
        return {**status, "status": "healthy"}
