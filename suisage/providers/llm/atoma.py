"""Async LLM provider for the Atoma OpenAI-compatible chat completion API."""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional, Union

import httpx
from pydantic import BaseModel, ValidationError

from .base import (
    LLMMessage,
    LLMProvider,
    LLMProviderAPIError,
    LLMProviderAuthError,
    LLMProviderError,
    LLMProviderRateLimitError,
    LLMResponse,
)

DEFAULT_ATOMA_MODEL = "meta-llama/Llama-3.3-70B-Instruct"
CHAT_COMPLETIONS_PATH = "/v1/chat/completions"


class _ContentPart(BaseModel):
    type: str = "text"
    text: Optional[str] = None


class _ChoiceMessage(BaseModel):
    role: str = "assistant"
    content: Union[str, List[Union[_ContentPart, str]], None] = None

    def text(self) -> str:
        if self.content is None:
            return ""
        if isinstance(self.content, str):
            return self.content
        return "".join(
            part if isinstance(part, str) else (part.text or "")
            for part in self.content
        )


class _Choice(BaseModel):
    message: _ChoiceMessage = _ChoiceMessage()
    finish_reason: Optional[str] = None


class _Usage(BaseModel):
    total_tokens: Optional[int] = None


class _ChatCompletion(BaseModel):
    choices: List[_Choice] = []
    usage: Optional[_Usage] = None


class AtomaProvider(LLMProvider):
    """Chat completions served by the Atoma network.

    Speaks the OpenAI wire format with a bearer token. An ``httpx.AsyncClient``
    may be injected through ``client``; otherwise one is created and owned.
    """

    name = "atoma"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_ATOMA_MODEL,
        *,
        base_url: Optional[str] = None,
        timeout: float = 40.0,
        **kwargs: Any,
    ) -> None:
        self.base_url = (base_url or "https://api.atoma.network").rstrip("/")
        self.timeout = timeout
        super().__init__(api_key, model, **kwargs)

    def _setup_client(self, **kwargs: Any) -> None:
        client = kwargs.get("client")
        if client is None:
            client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Authorization": f"Bearer {self.api_key}", "Accept": "application/json"},
            )
        self._client = client

    @staticmethod
    def _error_for(response: httpx.Response) -> LLMProviderError:
        status = response.status_code
        if status in (401, 403):
            return LLMProviderAuthError(f"Atoma rejected the API key ({status})")
        if status == 429:
            return LLMProviderRateLimitError("Atoma rate limit exceeded")
        return LLMProviderAPIError(f"Atoma API error ({status}): {response.text[:200]}")

    async def _chat(self, payload: Dict[str, Any]) -> _ChatCompletion:
        try:
            response = await self._client.post(CHAT_COMPLETIONS_PATH, json=payload)
        except httpx.RequestError as exc:
            raise LLMProviderAPIError(f"Atoma request error: {exc}") from exc

        if response.is_error:
            raise self._error_for(response)

        try:
            return _ChatCompletion.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise LLMProviderAPIError("Atoma returned an unreadable completion") from exc

    async def generate_response(
        self,
        messages: List[LLMMessage],
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        start_time = time.time()

        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [msg.model_dump() for msg in messages],
            **{key: value for key, value in kwargs.items() if value is not None},
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        if temperature is not None:
            payload["temperature"] = temperature

        completion = await self._chat(payload)
        if not completion.choices:
            raise LLMProviderError("Atoma response missing choices")

        choice = completion.choices[0]
        return self._create_response(
            content=choice.message.text(),
            tokens_used=completion.usage.total_tokens if completion.usage else None,
            finish_reason=choice.finish_reason,
            response_time_ms=self._measure_time(start_time),
        )

    async def health_check(self) -> Dict[str, Any]:
        status: Dict[str, Any] = {"provider": self.name, "model": self.model}
        try:
            await self.generate_response([LLMMessage(role="user", content="ping")], max_tokens=4, temperature=0.0)
        except LLMProviderRateLimitError:
            return {**status, "status": "degraded", "error": "rate_limited"}
        except LLMProviderError as exc:
            return {**status, "status": "error", "error": str(exc)}
        return {**status, "status": "healthy"}

    async def __aenter__(self) -> "AtomaProvider":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()
