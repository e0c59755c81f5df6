# zchat/ai/client.py
"""
Model backends that turn a request into a shell command.

Every backend exposes one coroutine, ``generate_command(query, context)``.
``create_command_generator`` picks the backend named by the configuration.
"""
import asyncio
import random  # For jitter in retries
from typing import Callable, Dict, Protocol

import anthropic
import google.generativeai as genai
import requests
from google.generativeai.types import GenerationConfig

from zchat.ai.errors import GenerationError
from zchat.ai.parser import parse_command_from_response
from zchat.ai.prompts import build_full_prompt, build_system_prompt
from zchat.config import AppConfig, ConfigError
from zchat.constants import (
    MAX_OUTPUT_TOKENS,
    MODEL_TEMPERATURE,
    PROVIDER_ANTHROPIC,
    PROVIDER_GEMINI,
    PROVIDER_OLLAMA,
)
from zchat.context.collector import SystemContext
from zchat.utils.logging import get_logger

logger = get_logger(__name__)


class CommandGenerator(Protocol):
    async def generate_command(self, query: str, context: SystemContext) -> str:
        ...


class OllamaClient:
    """Local models served by Ollama's /api/generate endpoint."""

    def __init__(self, base_url: str, model: str, timeout: float):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout

    async def generate_command(self, query: str, context: SystemContext) -> str:
        payload = {
            "model": self.model,
            "prompt": build_full_prompt(query, context),
            "stream": False,
        }
        url = f"{self.base_url}/api/generate"
        logger.debug(f"OLLAMA REQUEST to {url} with model {self.model}")

        try:
            response = await asyncio.to_thread(
                requests.post, url, json=payload, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise GenerationError(f"API request failed: {e}") from e

        if response.status_code != 200:
            raise GenerationError(
                f"API request failed with status {response.status_code}: {response.text}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise GenerationError(f"failed to decode response: {e}") from e

        return parse_command_from_response(data.get("response", ""))


class AnthropicClient:
    """Anthropic messages API."""

    def __init__(self, api_key: str, model: str, timeout: float):
        self.model = model
        self._client = anthropic.Anthropic(api_key=api_key, timeout=timeout)

    async def generate_command(self, query: str, context: SystemContext) -> str:
        logger.debug(f"ANTHROPIC REQUEST with model {self.model}")
        try:
            message = await asyncio.to_thread(
                self._client.messages.create,
                model=self.model,
                max_tokens=MAX_OUTPUT_TOKENS,
                system=build_system_prompt(context),
                messages=[{"role": "user", "content": query}],
            )
        except anthropic.APIError as e:
            raise GenerationError(f"API request failed: {e}") from e

        if not message.content:
            raise GenerationError("received empty response from API")

        text = getattr(message.content[0], "text", None) or ""
        return parse_command_from_response(text)


class GeminiClient:
    """Google Gemini models."""

    def __init__(self, api_key: str, model: str, max_retries: int = 1):
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(model)
        self.max_retries = max_retries
        logger.debug(f"Gemini API client initialized with model: {model}")

    async def generate_command(self, query: str, context: SystemContext) -> str:
        prompt = build_full_prompt(query, context)
        generation_config = GenerationConfig(
            temperature=MODEL_TEMPERATURE,
            max_output_tokens=MAX_OUTPUT_TOKENS,
        )
        base_delay = 2
        last_exception = None

        for attempt in range(self.max_retries + 1):
            try:
                logger.debug(
                    f"GEMINI API REQUEST (Attempt {attempt + 1}/{self.max_retries + 1}) "
                    f"PROMPT ({len(prompt)} chars)"
                )
                response = await asyncio.to_thread(
                    self.model.generate_content,
                    prompt,
                    generation_config=generation_config,
                )

                feedback = getattr(response, "prompt_feedback", None)
                if feedback and getattr(feedback, "block_reason", None):
                    # A blocked prompt will be blocked again; do not retry
                    raise GenerationError(f"Prompt blocked by API safety filters: {feedback.block_reason}")

                text = getattr(response, "text", "") or ""
                return parse_command_from_response(text)

            except GenerationError:
                raise
            except Exception as e:
                logger.warning(
                    f"Error calling Gemini API (Attempt {attempt + 1}/{self.max_retries + 1}): "
                    f"{type(e).__name__} - {e}"
                )
                last_exception = e

            if attempt < self.max_retries:
                delay = base_delay * (2 ** attempt) + random.uniform(0, 0.5)
                logger.info(f"Retrying Gemini API call in {delay:.2f} seconds")
                await asyncio.sleep(delay)

        raise GenerationError(
            f"Failed to generate command with Gemini API after {self.max_retries + 1} attempts: "
            f"{last_exception}"
        )


_FACTORIES: Dict[str, Callable[[AppConfig], CommandGenerator]] = {
    PROVIDER_OLLAMA: lambda cfg: OllamaClient(cfg.ollama_url, cfg.resolved_model, cfg.request_timeout),
    PROVIDER_ANTHROPIC: lambda cfg: AnthropicClient(cfg.api_key, cfg.resolved_model, cfg.request_timeout),
    PROVIDER_GEMINI: lambda cfg: GeminiClient(cfg.api_key, cfg.resolved_model),
}


def create_command_generator(config: AppConfig) -> CommandGenerator:
    """
    Build the backend selected by ``config.provider``.

    Raises:
        ConfigError: If the provider is unknown.
    """
    factory = _FACTORIES.get(config.provider)
    if factory is None:
        raise ConfigError(f"Unknown provider: {config.provider}")
    logger.debug(f"Using provider {config.provider} with model {config.resolved_model}")
    return factory(config)
