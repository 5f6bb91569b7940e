"""
Chat completion providers for the block generator.

Two implementations share one call shape: an OpenAI-compatible HTTP endpoint
(OpenAI, OpenRouter, ...) called with httpx, and Anthropic via its SDK.
"""
from typing import Optional, Protocol

import httpx
from anthropic import AsyncAnthropic, APIError

from config import settings
from logging_config import logger


class CompletionError(Exception):
    """The completion provider could not produce a response"""


class CompletionProvider(Protocol):
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float,
        max_tokens: int,
        json_mode: bool = True
    ) -> str:
        ...


class OpenAICompletionProvider:
    """Chat completions against an OpenAI-compatible endpoint"""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 120.0
    ):
        self.api_key = api_key
        self.model = model
        self.url = f"{base_url.rstrip('/')}/chat/completions"
        self.timeout = timeout

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float,
        max_tokens: int,
        json_mode: bool = True
    ) -> str:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt}
            ],
            "temperature": temperature,
            "max_tokens": max_tokens
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        logger.info("Calling completion API", provider="openai", model=self.model)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.url,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json"
                    },
                    json=payload
                )
        except httpx.HTTPError as e:
            logger.error("Completion request failed", provider="openai", error=str(e))
            raise CompletionError(f"Completion request failed: {e}") from e

        if response.status_code != 200:
            logger.error(
                "Completion API error",
                provider="openai",
                status_code=response.status_code,
                body=response.text[:500]
            )
            raise CompletionError(f"Completion API error {response.status_code}")

        result = response.json()
        choices = result.get("choices") or [{}]
        return (choices[0].get("message") or {}).get("content") or ""


class AnthropicCompletionProvider:
    """Messages API via the Anthropic SDK"""

    def __init__(self, api_key: str, model: str, client: Optional[AsyncAnthropic] = None):
        if client is None and not api_key:
            raise ValueError("ANTHROPIC_API_KEY not configured")

        self.client = client or AsyncAnthropic(api_key=api_key)
        self.model = model

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float,
        max_tokens: int,
        json_mode: bool = True
    ) -> str:
        messages = [{"role": "user", "content": user_prompt}]
        # Prefill the opening brace so the reply is a bare JSON object
        if json_mode:
            messages.append({"role": "assistant", "content": "{"})

        logger.info("Calling completion API", provider="anthropic", model=self.model)

        try:
            response = await self.client.messages.create(
                model=self.model,
                system=system_prompt,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=messages
            )
        except APIError as e:
            logger.error("Completion request failed", provider="anthropic", error=str(e))
            raise CompletionError(f"Completion request failed: {e}") from e

        text = ""
        for block in response.content:
            if hasattr(block, "text"):
                text += block.text

        if json_mode and text:
            text = "{" + text
        return text


def get_completion_provider() -> CompletionProvider:
    """Provider selected by COMPLETION_PROVIDER"""
    if settings.COMPLETION_PROVIDER == "anthropic":
        return AnthropicCompletionProvider(
            api_key=settings.ANTHROPIC_API_KEY,
            model=settings.CLAUDE_MODEL
        )

    return OpenAICompletionProvider(
        api_key=settings.OPENAI_API_KEY,
        model=settings.GENERATION_MODEL,
        base_url=settings.OPENAI_BASE_URL,
        timeout=settings.COMPLETION_TIMEOUT
    )
