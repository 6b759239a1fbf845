"""Priority-ordered dispatch across AI providers with model fallback."""

from typing import Any, Dict, List, Optional, Sequence

from supportsignal.ai.base import AIProvider, AIRequest, AIResponse, ProviderConfig
from supportsignal.ai.providers import (
    ANTHROPIC_MODELS,
    OPENROUTER_MODELS,
    AnthropicProvider,
    OpenRouterProvider,
)
from supportsignal.utils.logging import get_logger

LOGGER = get_logger(__name__)

NO_PROVIDERS_ERROR = (
    "CONFIGURATION ERROR: No AI providers configured. "
    "Please verify OPENROUTER_API_KEY is set."
)


class MultiProviderAIManager:
    """Dispatch requests to the highest-priority provider that succeeds.

    Providers are tried strictly sequentially in ascending priority order.
    The requested model is attempted across all providers first, then the
    configured fallback model if it differs.
    """

    def __init__(self, providers: Sequence[AIProvider], fallback_model: Optional[str] = None):
        """Initialize the manager.

        Args:
            providers: Provider integrations, in any order
            fallback_model: Model to try when the requested model fails everywhere
        """
        self.providers: List[AIProvider] = sorted(providers, key=lambda p: p.get_priority())
        self.fallback_model = fallback_model

    def _models_to_try(self, model: str) -> List[str]:
        models = [model]
        if self.fallback_model and self.fallback_model != model:
            models.append(self.fallback_model)
        return models

    async def send_request(self, request: AIRequest) -> AIResponse:
        """Send a request, falling back across providers and models.

        Args:
            request: The AI request

        Returns:
            The first successful provider response, or a synthetic failure
            response carrying an aggregated error message.
        """
        log_extra = {"correlation_id": request.correlation_id}
        enabled = [p for p in self.providers if p.is_enabled()]

        if not enabled:
            LOGGER.error("No AI providers available", extra=log_extra)
            return AIResponse(
                success=False,
                model=request.model,
                correlation_id=request.correlation_id,
                error=NO_PROVIDERS_ERROR,
            )

        models = self._models_to_try(request.model)
        last_error = ""
        attempted = False

        for index, model in enumerate(models):
            LOGGER.info(
                f"Attempting {'primary' if index == 0 else 'fallback'} model: {model}",
                extra={**log_extra, "model": model},
            )

            for provider in enabled:
                if not provider.supports_model(model):
                    LOGGER.debug(f"Provider {provider.get_name()} does not support model {model}")
                    continue

                attempted = True
                model_request = AIRequest(
                    prompt=request.prompt,
                    model=model,
                    correlation_id=request.correlation_id,
                    temperature=request.temperature,
                    max_tokens=request.max_tokens,
                    output_schema=request.output_schema,
                    metadata=request.metadata,
                )

                try:
                    response = await provider.send_request(model_request)
                except Exception as e:
                    last_error = str(e) or "Unknown error"
                    LOGGER.error(
                        f"Provider {provider.get_name()} raised for model {model}: {last_error}",
                        extra=log_extra,
                    )
                    continue

                if response.success:
                    LOGGER.info(
                        f"Request successful with provider: {provider.get_name()}, model: {model}",
                        extra={
                            **log_extra,
                            "used_fallback": index > 0,
                            "processing_time_ms": response.processing_time_ms,
                        },
                    )
                    return response

                last_error = response.error or "Unknown error"
                LOGGER.warning(
                    f"Provider {provider.get_name()} failed for model {model}: {last_error}",
                    extra=log_extra,
                )

        if not attempted:
            last_error = f"No enabled provider supports model {', '.join(models)}"

        error = (
            f"SYSTEM ERROR: Both primary model ({request.model}) and fallback model "
            f"({self.fallback_model or request.model}) failed across all providers. "
            f"Last error: {last_error}"
        )
        LOGGER.error(
            "Complete AI system failure",
            extra={
                **log_extra,
                "providers": [p.get_name() for p in enabled],
                "last_error": last_error,
            },
        )
        return AIResponse(
            success=False,
            model=request.model,
            correlation_id=request.correlation_id,
            error=error,
        )

    def get_provider_status(self) -> List[Dict[str, Any]]:
        """Describe every configured provider for monitoring."""
        return [
            {
                "name": provider.get_name(),
                "enabled": provider.is_enabled(),
                "priority": provider.get_priority(),
                "models": list(provider.config.models),
            }
            for provider in self.providers
        ]

    def get_available_models(self) -> List[str]:
        """Union of models served by enabled providers, in priority order."""
        models: List[str] = []
        for provider in self.providers:
            if not provider.is_enabled():
                continue
            for model in provider.config.models:
                if model not in models:
                    models.append(model)
        return models


def create_ai_manager(ai_settings) -> MultiProviderAIManager:
    """Build a manager from settings, registering only providers with keys.

    Args:
        ai_settings: ``AISettings`` instance

    Returns:
        Configured MultiProviderAIManager
    """
    timeout = ai_settings.timeout_ms / 1000
    providers: List[AIProvider] = []

    if ai_settings.openrouter_api_key:
        providers.append(OpenRouterProvider(
            ProviderConfig(
                name="openrouter",
                api_key=ai_settings.openrouter_api_key,
                base_url=ai_settings.openrouter_base_url,
                models=list(OPENROUTER_MODELS),
                priority=1,
            ),
            timeout=timeout,
        ))

    if ai_settings.anthropic_api_key:
        providers.append(AnthropicProvider(
            ProviderConfig(
                name="anthropic",
                api_key=ai_settings.anthropic_api_key,
                base_url=ai_settings.anthropic_base_url,
                models=list(ANTHROPIC_MODELS),
                priority=2,
            ),
            timeout=timeout,
        ))

    LOGGER.info(f"Initialized AI manager with providers: {[p.get_name() for p in providers]}")
    return MultiProviderAIManager(providers, fallback_model=ai_settings.fallback_model)
