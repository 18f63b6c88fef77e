"""Claude AI client for Mojo Writer."""

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

import anthropic
from anthropic import AsyncAnthropic
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..errors import ProviderAuthInvalid, ProviderGenericFailure, ProviderRateLimited

logger = logging.getLogger(__name__)

STREAMING_THRESHOLD = 10000


@dataclass(frozen=True)
class GenerationRequest:
    """A single prompt sent to the generation provider."""

    prompt: str
    system: str = ""
    schema: Optional[Dict[str, Any]] = None
    max_tokens: Optional[int] = None
    fast: bool = False


class GenerationClient(Protocol):
    """Anything that can turn a GenerationRequest into text."""

    async def generate(self, request: GenerationRequest) -> str:
        ...


def system_prompt(request: GenerationRequest) -> str:
    """System prompt for a request; a schema adds a JSON-only answer instruction."""
    if request.schema is None:
        return request.system
    instruction = (
        "Respond only with JSON that matches this schema, without commentary:\n"
        f"{json.dumps(request.schema, indent=2)}"
    )
    return f"{request.system}\n\n{instruction}" if request.system else instruction


def _map_provider_error(exc: Exception) -> Exception:
    if isinstance(exc, anthropic.RateLimitError):
        return ProviderRateLimited(str(exc))
    if isinstance(exc, (anthropic.AuthenticationError, anthropic.PermissionDeniedError)):
        return ProviderAuthInvalid(str(exc))
    return ProviderGenericFailure(str(exc))


class ClaudeClient:
    """Client for interacting with Claude AI API with streaming support."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "claude-opus-4-20250514",
        fast_model: str = "claude-3-5-sonnet-20241022",
        max_tokens: int = 8000,
    ):
        """Initialize Claude client with async support."""
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise ProviderAuthInvalid(
                "ANTHROPIC_API_KEY environment variable or api_key parameter is required",
                user_message="No API key configured. Set ANTHROPIC_API_KEY or add api_key to mojowriter.yaml.",
            )

        self.client = AsyncAnthropic(api_key=self.api_key)
        self.model = model
        self.fast_model = fast_model
        self.max_tokens = max_tokens

    async def generate(self, request: GenerationRequest) -> str:
        """Send a request and return the generated text, raising GenerationError subclasses."""
        try:
            return await self._make_request(request)
        except anthropic.APIError as e:
            logger.error(f"API request failed: {e}")
            raise _map_provider_error(e) from e

    @retry(
        retry=retry_if_exception_type(anthropic.APIConnectionError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=4, max=10),
        reraise=True,
    )
    async def _make_request(self, request: GenerationRequest) -> str:
        """Make a request with retries on connection failures only."""
        model = self.fast_model if request.fast else self.model
        max_tokens = request.max_tokens or self.max_tokens
        messages: List[Dict[str, str]] = [{"role": "user", "content": request.prompt}]
        system = system_prompt(request)

        # Long outputs go through streaming to avoid request timeouts
        if max_tokens > STREAMING_THRESHOLD:
            return await self._make_streaming_request(model, max_tokens, messages, system)

        kwargs: Dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "messages": messages,
            "timeout": 600.0,
        }
        if system:
            kwargs["system"] = system
        response = await self.client.messages.create(**kwargs)
        return "".join(block.text for block in response.content if getattr(block, "type", "") == "text")

    async def _make_streaming_request(
        self,
        model: str,
        max_tokens: int,
        messages: List[Dict[str, str]],
        system: str = "",
    ) -> str:
        """Make a streaming request to Claude API for long operations."""
        full_response = []
        kwargs: Dict[str, Any] = {"model": model, "max_tokens": max_tokens, "messages": messages}
        if system:
            kwargs["system"] = system

        async with self.client.messages.stream(**kwargs) as stream:
            async for text in stream.text_stream:
                full_response.append(text)

        return ''.join(full_response)
