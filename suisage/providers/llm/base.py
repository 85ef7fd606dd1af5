from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from pydantic import BaseModel
import time
import logging


class LLMMessage(BaseModel):
    """Standardized message format for LLM communication"""
    role: str  # "system", "user", "assistant"
    content: Optional[str] = None


class LLMResponse(BaseModel):
    """Standardized response from LLM providers"""
    content: Optional[str] = None
    tokens_used: Optional[int] = None
    model: Optional[str] = None
    finish_reason: Optional[str] = None
    response_time_ms: Optional[float] = None


class LLMProvider(ABC):
    """Abstract base class for LLM providers

    The query pipeline only needs ``complete(prompt) -> text``; providers
    implement ``generate_response`` over their own wire format and the base
    class adapts it.
    """

    name: str = "llm"

    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        max_tokens: int = 1000,
        temperature: float = 0.3,
        **kwargs,
    ):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.logger = logging.getLogger(f"{self.__class__.__name__}")
        self._setup_client(**kwargs)

    @abstractmethod
    def _setup_client(self, **kwargs) -> None:
        """Initialize the provider-specific client"""
        pass

    @abstractmethod
    async def generate_response(
        self,
        messages: List[LLMMessage],
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        **kwargs
    ) -> LLMResponse:
        """Generate a response from the LLM

        Args:
            messages: List of messages in the conversation
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature
            **kwargs: Additional provider-specific parameters

        Returns:
            LLMResponse with the completion text
        """
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Check if the provider is healthy and responding"""
        pass

    async def close(self) -> None:
        """Release network resources held by the client"""
        pass

    async def complete(self, prompt: str) -> str:
        """Send one user prompt and return the completion text.

        Raises LLMProviderError (or a subclass) on transport, auth or rate
        limit failures. An empty completion is returned as ``""``; deciding
        whether that is usable is the caller's job.
        """
        start_time = time.time()
        response = await self.generate_response(
            messages=[LLMMessage(role="user", content=prompt)],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        self.logger.debug(
            f"{self.name} completion finished in {self._measure_time(start_time):.0f}ms "
            f"(tokens={response.tokens_used}, finish={response.finish_reason})"
        )
        return response.content or ""

    def _create_response(self, content: str, **metadata) -> LLMResponse:
        """Helper method to create standardized responses"""
        return LLMResponse(
            content=content,
            model=self.model,
            **metadata
        )

    def _measure_time(self, start_time: float) -> float:
        """Helper to measure response time in milliseconds"""
        return (time.time() - start_time) * 1000

    async def _handle_error(self, error: Exception, context: str = "") -> None:
        """Standardized error handling and logging"""
        self.logger.error(f"LLM Provider error in {context}: {str(error)}")
        raise error


class LLMProviderError(Exception):
    """Base exception for LLM provider errors"""
    pass


class LLMProviderRateLimitError(LLMProviderError):
    """Raised when hitting rate limits"""
    pass


class LLMProviderAuthError(LLMProviderError):
    """Raised when authentication fails"""
    pass


class LLMProviderAPIError(LLMProviderError):
    """Raised when API request fails"""
    pass
