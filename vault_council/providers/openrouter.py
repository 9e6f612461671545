"""OpenRouter gateway using the openai SDK (OpenAI-compatible API)."""

import asyncio
import logging
import os
import time

from openai import AsyncOpenAI

from config.config_loader import OpenRouterConfig
from vault_council.errors import ConfigurationFailure, EmptyResponseFailure, TransportFailure
from vault_council.providers.base import ModelGateway, build_messages

logger = logging.getLogger(__name__)


class OpenRouterGateway(ModelGateway):
    """Single-call gateway to OpenRouter's chat completions endpoint."""

    def __init__(
        self,
        config: OpenRouterConfig,
        api_key: str | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._config = config
        self._api_key = (api_key if api_key is not None else os.environ.get(config.api_key_env, "")).strip()
        if client is None:
            if not self._api_key:
                raise ConfigurationFailure(f"Missing API key: {config.api_key_env}")
            # No SDK-level retries: a failed call is terminal for that model.
            client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=config.base_url,
                max_retries=0,
                default_headers={
                    "HTTP-Referer": config.referer,
                    "X-Title": config.title,
                },
            )
        self._client = client

    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def call(
        self,
        model: str,
        user_message: str,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 4000,
    ) -> str:
        messages = [turn.as_dict() for turn in build_messages(user_message, system_prompt)]
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=model,
                    messages=messages,
                    temperature=temperature,
                    max_tokens=max_tokens,
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise TransportFailure(model, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            logger.debug("OpenRouter API error for model %s: %r", model, exc)
            raise TransportFailure(model, str(exc) or type(exc).__name__) from exc

        latency = time.monotonic() - start

        choice = response.choices[0] if response.choices else None
        if choice is None:
            raise EmptyResponseFailure(model)
        content = choice.message.content if choice.message else None
        if not content:
            raise EmptyResponseFailure(model, "Empty response content")

        usage = response.usage
        logger.info(
            "%s: %.2fs, prompt=%s completion=%s total=%s tokens",
            model,
            latency,
            usage.prompt_tokens if usage else None,
            usage.completion_tokens if usage else None,
            usage.total_tokens if usage else None,
        )
        return content
