"""Upstream completion clients for OpenAI and Anthropic.

Both clients expose the same two calls: ``complete`` returns a finished text
blob (used for action-item extraction) and ``stream`` yields text deltas (used
for the summary relay). SDK-level retries are disabled; one upstream call per
user request.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any

import anthropic
import openai
from anthropic import AsyncAnthropic
from anthropic.types import TextBlock
from openai import AsyncOpenAI

from meeting_maestro.errors import UpstreamFailureError, UpstreamUnavailableError
from meeting_maestro.llm.credentials import LLMConfig, Provider, validate_api_key

logger = logging.getLogger(__name__)


class CompletionClient:
    """Common interface for a text-completion provider."""

    provider: Provider

    async def complete(
        self,
        *,
        model: str,
        system: str,
        user: str,
        max_tokens: int,
        temperature: float,
        json_mode: bool = False,
    ) -> str:
        raise NotImplementedError

    def stream(
        self,
        *,
        model: str,
        system: str,
        user: str,
        max_tokens: int,
        temperature: float,
    ) -> AsyncIterator[str]:
        raise NotImplementedError


class OpenAICompletionClient(CompletionClient):
    provider = Provider.OPENAI

    def __init__(self, api_key: str, client: AsyncOpenAI | None = None) -> None:
        self._client = client or AsyncOpenAI(api_key=api_key, max_retries=0)

    async def complete(
        self,
        *,
        model: str,
        system: str,
        user: str,
        max_tokens: int,
        temperature: float,
        json_mode: bool = False,
    ) -> str:
        kwargs: dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                max_tokens=max_tokens,
                temperature=temperature,
                **kwargs,
            )
        except openai.APIError as exc:
            raise UpstreamFailureError(f"OpenAI completion failed: {exc.message}") from exc

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def stream(
        self,
        *,
        model: str,
        system: str,
        user: str,
        max_tokens: int,
        temperature: float,
    ) -> AsyncIterator[str]:
        try:
            stream = await self._client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                max_tokens=max_tokens,
                temperature=temperature,
                stream=True,
            )
        except openai.APIError as exc:
            raise UpstreamFailureError(f"OpenAI stream failed: {exc.message}") from exc

        try:
            async for chunk in stream:
                if not chunk.choices:
                    continue
                yield chunk.choices[0].delta.content or ""
        except openai.APIError as exc:
            raise UpstreamFailureError(f"OpenAI stream interrupted: {exc.message}") from exc
        finally:
            # Releases the HTTP connection when the consumer stops early.
            await stream.close()


class AnthropicCompletionClient(CompletionClient):
    provider = Provider.ANTHROPIC

    def __init__(self, api_key: str, client: AsyncAnthropic | None = None) -> None:
        self._client = client or AsyncAnthropic(api_key=api_key, max_retries=0)

    async def complete(
        self,
        *,
        model: str,
        system: str,
        user: str,
        max_tokens: int,
        temperature: float,
        json_mode: bool = False,
    ) -> str:
        # Anthropic has no JSON response mode; the system prompt carries the format.
        try:
            response = await self._client.messages.create(
                model=model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system,
                messages=[{"role": "user", "content": user}],
            )
        except anthropic.APIError as exc:
            raise UpstreamFailureError(f"Anthropic completion failed: {exc.message}") from exc

        return "".join(block.text for block in response.content if isinstance(block, TextBlock))

    async def stream(
        self,
        *,
        model: str,
        system: str,
        user: str,
        max_tokens: int,
        temperature: float,
    ) -> AsyncIterator[str]:
        try:
            async with self._client.messages.stream(
                model=model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system,
                messages=[{"role": "user", "content": user}],
            ) as stream:
                async for text in stream.text_stream:
                    yield text
        except anthropic.APIError as exc:
            raise UpstreamFailureError(f"Anthropic stream failed: {exc.message}") from exc


def build_completion_client(config: LLMConfig) -> CompletionClient:
    """Validate *config* and construct the matching client.

    Raises:
        UpstreamUnavailableError: If the configured key is missing or malformed.
    """
    validation = validate_api_key(config.api_key, config.provider)
    if not validation.valid:
        logger.warning(
            "Upstream %s client unavailable: %s", config.provider.value, validation.reason
        )
        raise UpstreamUnavailableError(
            f"{config.provider.value} API configuration error: {validation.reason}",
            validation=validation,
        )

    api_key = config.api_key.strip()
    if config.provider is Provider.ANTHROPIC:
        return AnthropicCompletionClient(api_key)
    return OpenAICompletionClient(api_key)
