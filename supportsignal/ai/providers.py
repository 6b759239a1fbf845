"""OpenRouter and Anthropic provider integrations."""

import time
from typing import Any, Dict, Optional

import httpx

from supportsignal.ai.base import AIProvider, AIRequest, AIResponse
from supportsignal.core.exceptions import APIClientError
from supportsignal.utils.logging import get_logger

LOGGER = get_logger(__name__)

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1000

# USD per 1K tokens, matched by substring against the requested model
OPENROUTER_RATES: Dict[str, float] = {
    "gpt-5-nano": 0.00005,
    "gpt-5-mini": 0.00025,
    "gpt-5-chat": 0.00125,
    "gpt-5": 0.00125,
    "gpt-4.1-nano": 0.002,
    "gpt-4o-mini": 0.00015,
    "gpt-4o": 0.005,
    "gpt-4": 0.03,
    "anthropic/claude-3-haiku": 0.00025,
    "anthropic/claude-3-sonnet": 0.003,
}
OPENROUTER_DEFAULT_RATE = 0.002

OPENROUTER_MODELS = [
    "openai/gpt-5-nano",
    "openai/gpt-5-mini",
    "openai/gpt-5-chat",
    "openai/gpt-5",
    "openai/gpt-4.1-nano",
    "openai/gpt-4",
    "openai/gpt-4o-mini",
    "openai/gpt-4o",
    "anthropic/claude-3-haiku",
    "anthropic/claude-3.5-haiku",
    "anthropic/claude-3.5-sonnet",
    "anthropic/claude-sonnet-4",
    "anthropic/claude-sonnet-4.5",
    "anthropic/claude-haiku-4.5",
]

ANTHROPIC_MODELS = ["claude-3-sonnet", "claude-3-haiku", "claude-3-opus"]

ANTHROPIC_MODEL_MAP: Dict[str, str] = {
    "claude-3-sonnet": "claude-3-sonnet-20240229",
    "claude-3-haiku": "claude-3-haiku-20240307",
    "claude-3-opus": "claude-3-opus-20240229",
}
ANTHROPIC_DEFAULT_MODEL = "claude-3-sonnet-20240229"
ANTHROPIC_VERSION = "2023-06-01"

# (input, output) USD per 1K tokens
ANTHROPIC_RATES: Dict[str, tuple[float, float]] = {
    "claude-3-sonnet-20240229": (0.003, 0.015),
    "claude-3-haiku-20240307": (0.00025, 0.00125),
    "claude-3-opus-20240229": (0.015, 0.075),
}


def openrouter_cost(tokens: Optional[int], model: str) -> Optional[float]:
    """Estimate the cost of an OpenRouter call from the static rate table.

    Args:
        tokens: Total tokens reported by the API
        model: Requested model name

    Returns:
        Estimated USD cost, or None when no token count is available
    """
    if not tokens:
        return None

    rate = OPENROUTER_DEFAULT_RATE
    # Longest key first so "gpt-4o-mini" wins over "gpt-4o" and "gpt-4"
    for key in sorted(OPENROUTER_RATES, key=len, reverse=True):
        if key in model:
            rate = OPENROUTER_RATES[key]
            break

    return (tokens / 1000) * rate


def anthropic_cost(
    input_tokens: Optional[int], output_tokens: Optional[int], model: str
) -> Optional[float]:
    """Estimate the cost of an Anthropic call from input/output token rates."""
    if not input_tokens and not output_tokens:
        return None

    input_rate, output_rate = ANTHROPIC_RATES.get(model, ANTHROPIC_RATES[ANTHROPIC_DEFAULT_MODEL])
    return ((input_tokens or 0) / 1000) * input_rate + ((output_tokens or 0) / 1000) * output_rate


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def _sampling_params(request: AIRequest) -> Dict[str, Any]:
    """Temperature and max_tokens, keeping explicit zero values."""
    return {
        "temperature": request.temperature if request.temperature is not None else DEFAULT_TEMPERATURE,
        "max_tokens": request.max_tokens if request.max_tokens is not None else DEFAULT_MAX_TOKENS,
    }


def build_chat_payload(request: AIRequest, model: Optional[str] = None) -> Dict[str, Any]:
    """Build an OpenRouter chat completions request body.

    Args:
        request: The AI request
        model: Overrides ``request.model`` when given
    """
    payload: Dict[str, Any] = {
        "model": model or request.model,
        "messages": [{"role": "user", "content": request.prompt}],
        **_sampling_params(request),
    }
    if request.output_schema:
        payload["response_format"] = {
            "type": "json_schema",
            "json_schema": request.output_schema,
        }
    return payload


class OpenRouterProvider(AIProvider):
    """Provider backed by the OpenRouter chat completions API."""

    REFERER = "https://supportsignal.com.au"
    TITLE = "SupportSignal AI Integration"

    def build_payload(self, request: AIRequest) -> Dict[str, Any]:
        return build_chat_payload(request)

    async def send_request(self, request: AIRequest) -> AIResponse:
        start = time.monotonic()
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.REFERER,
            "X-Title": self.TITLE,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.config.base_url}/chat/completions",
                    headers=headers,
                    json=self.build_payload(request),
                )

            if response.status_code >= 400:
                raise APIClientError(
                    f"OpenRouter API error: {response.status_code} - {response.text}"
                )

            data = response.json()
            choices = data.get("choices") or []
            if not choices or not choices[0].get("message"):
                raise APIClientError("Invalid response format from OpenRouter API")

            tokens = (data.get("usage") or {}).get("total_tokens")
            return AIResponse(
                success=True,
                content=choices[0]["message"].get("content") or "",
                model=request.model,
                correlation_id=request.correlation_id,
                tokens_used=tokens,
                cost=openrouter_cost(tokens, request.model),
                processing_time_ms=_elapsed_ms(start),
                provider=self.get_name(),
            )

        except Exception as e:
            LOGGER.warning(
                f"OpenRouter request failed: {e}",
                extra={"correlation_id": request.correlation_id, "model": request.model},
            )
            return AIResponse(
                success=False,
                model=request.model,
                correlation_id=request.correlation_id,
                processing_time_ms=_elapsed_ms(start),
                error=str(e) or "Unknown OpenRouter error",
                provider=self.get_name(),
            )


class AnthropicProvider(AIProvider):
    """Provider backed by the Anthropic messages API."""

    async def send_request(self, request: AIRequest) -> AIResponse:
        start = time.monotonic()
        anthropic_model = ANTHROPIC_MODEL_MAP.get(request.model, ANTHROPIC_DEFAULT_MODEL)
        payload = {
            "model": anthropic_model,
            **_sampling_params(request),
            "messages": [{"role": "user", "content": request.prompt}],
        }
        headers = {
            "Content-Type": "application/json",
            "x-api-key": self.config.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.config.base_url}/messages", headers=headers, json=payload
                )

            if response.status_code >= 400:
                raise APIClientError(
                    f"Anthropic API error: {response.status_code} - {response.text}"
                )

            data = response.json()
            content = data.get("content") or []
            if not content or not content[0].get("text"):
                raise APIClientError("Invalid response format from Anthropic API")

            usage = data.get("usage") or {}
            input_tokens = usage.get("input_tokens")
            output_tokens = usage.get("output_tokens")
            tokens = None
            if input_tokens is not None or output_tokens is not None:
                tokens = (input_tokens or 0) + (output_tokens or 0)

            return AIResponse(
                success=True,
                content=content[0]["text"],
                model=request.model,
                correlation_id=request.correlation_id,
                tokens_used=tokens,
                cost=anthropic_cost(input_tokens, output_tokens, anthropic_model),
                processing_time_ms=_elapsed_ms(start),
                provider=self.get_name(),
            )

        except Exception as e:
            LOGGER.warning(
                f"Anthropic request failed: {e}",
                extra={"correlation_id": request.correlation_id, "model": request.model},
            )
            return AIResponse(
                success=False,
                model=request.model,
                correlation_id=request.correlation_id,
                processing_time_ms=_elapsed_ms(start),
                error=str(e) or "Unknown Anthropic error",
                provider=self.get_name(),
            )
