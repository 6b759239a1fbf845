"""Provider status, health and connectivity checks for the AI layer."""

from typing import Optional

from supportsignal.ai.base import AIRequest
from supportsignal.ai.client import OpenRouterClient, generate_correlation_id
from supportsignal.ai.service import AIService, get_ai_service
from supportsignal.core.config import settings
from supportsignal.schemas.ai import (
    AIHealthSummary,
    ConnectivityTestResult,
    ProviderOverview,
    ProviderStatus,
)
from supportsignal.utils.logging import get_logger

LOGGER = get_logger(__name__)

CONNECTIVITY_TEST_MODEL = "openai/gpt-4.1-nano"
CONNECTIVITY_TEST_PROMPT = 'Test message - respond with "OK"'
PREVIEW_LENGTH = 100


class AIMonitoringService:
    """Read-only view over the AI dispatcher plus live connectivity probes."""

    def __init__(self, ai_service: Optional[AIService] = None, ai_settings=None):
        self.ai_service = ai_service or get_ai_service()
        self.ai_settings = ai_settings or settings.ai

    def get_provider_overview(self) -> ProviderOverview:
        manager = self.ai_service.manager
        return ProviderOverview(
            providers=[ProviderStatus(**p) for p in manager.get_provider_status()],
            available_models=manager.get_available_models(),
            has_openrouter_key=bool(self.ai_settings.openrouter_api_key),
            has_anthropic_key=bool(self.ai_settings.anthropic_api_key),
        )

    def get_health(self) -> AIHealthSummary:
        providers = [ProviderStatus(**p) for p in self.ai_service.manager.get_provider_status()]
        enabled = [p for p in providers if p.enabled]
        return AIHealthSummary(
            status="healthy" if enabled else "no_providers",
            provider_count=len(providers),
            enabled_provider_count=len(enabled),
            providers=providers,
            suggested_test_model=CONNECTIVITY_TEST_MODEL,
            metrics=self.ai_service.get_metrics(),
        )

    async def test_connectivity(
        self,
        model: str = CONNECTIVITY_TEST_MODEL,
        prompt: str = CONNECTIVITY_TEST_PROMPT,
        use_retry_client: bool = False,
    ) -> ConnectivityTestResult:
        """Send a tiny request and report the outcome.

        Args:
            model: Model to probe
            prompt: Probe prompt
            use_retry_client: Call OpenRouter directly through ``OpenRouterClient``
                (bounded retry, no provider fallback) instead of the manager

        Returns:
            The probe result; failures are reported, never raised
        """
        request = AIRequest(
            prompt=prompt,
            model=model,
            correlation_id=generate_correlation_id(),
            temperature=0.1,
            max_tokens=10,
            metadata={"test": True},
        )

        if use_retry_client:
            if not self.ai_settings.openrouter_api_key:
                return ConnectivityTestResult(
                    success=False,
                    model=model,
                    provider="openrouter",
                    error="OpenRouter API key is not configured",
                    correlation_id="",
                )
            client = OpenRouterClient(
                api_key=self.ai_settings.openrouter_api_key,
                base_url=self.ai_settings.openrouter_base_url,
                default_model=model,
                max_retries=self.ai_settings.max_retries,
                timeout_ms=self.ai_settings.timeout_ms,
            )
            response = await client.send_request(request)
        else:
            response = await self.ai_service.manager.send_request(request)

        LOGGER.info(
            f"Connectivity test for {model}: {'ok' if response.success else 'failed'}",
            extra={"correlation_id": response.correlation_id, "provider": response.provider},
        )
        return ConnectivityTestResult(
            success=response.success,
            model=model,
            provider=response.provider,
            response_preview=response.content[:PREVIEW_LENGTH] if response.success else None,
            processing_time_ms=response.processing_time_ms,
            tokens_used=response.tokens_used,
            cost=response.cost,
            error=response.error,
            correlation_id=response.correlation_id,
        )
