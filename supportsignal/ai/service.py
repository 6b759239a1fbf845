"""Process-wide AI facade combining dispatch with rate, budget and circuit guards."""

from typing import Any, Dict, Optional

from supportsignal.ai.base import AIRequest, AIResponse
from supportsignal.ai.circuit_breaker import CircuitBreaker
from supportsignal.ai.client import CostTracker, RateLimiter, generate_correlation_id
from supportsignal.ai.manager import MultiProviderAIManager, create_ai_manager
from supportsignal.utils.logging import get_logger

LOGGER = get_logger(__name__)

RATE_LIMITED_ERROR = "Rate limit exceeded. Please wait before making more AI requests."
BUDGET_EXCEEDED_ERROR = "Daily cost limit exceeded. AI requests are paused until tomorrow."
CIRCUIT_OPEN_ERROR = "AI service temporarily unavailable. Please try again shortly."


class AIService:
    """Guarded entry point for every AI request made by the application."""

    def __init__(
        self,
        manager: MultiProviderAIManager,
        rate_limiter: Optional[RateLimiter] = None,
        cost_tracker: Optional[CostTracker] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
        default_model: str = "openai/gpt-5-nano",
    ):
        self.manager = manager
        self.rate_limiter = rate_limiter or RateLimiter()
        self.cost_tracker = cost_tracker or CostTracker()
        self.circuit_breaker = circuit_breaker or CircuitBreaker()
        self.default_model = default_model

    def _rejected(self, request: AIRequest, error: str) -> AIResponse:
        LOGGER.warning(error, extra={"correlation_id": request.correlation_id})
        return AIResponse(
            success=False,
            model=request.model,
            correlation_id=request.correlation_id,
            error=error,
        )

    async def generate(self, request: AIRequest, rate_key: str = "global") -> AIResponse:
        """Dispatch a request through the provider manager.

        Args:
            request: The AI request; empty model and correlation id are filled in
            rate_key: Key for the sliding-window rate limit (usually the user id)

        Returns:
            The manager's response, or a failure response when a guard rejects it
        """
        if not request.model:
            request.model = self.default_model
        if not request.correlation_id:
            request.correlation_id = generate_correlation_id()

        if not self.rate_limiter.is_allowed(rate_key):
            return self._rejected(request, RATE_LIMITED_ERROR)
        if not self.cost_tracker.is_within_daily_limit():
            return self._rejected(request, BUDGET_EXCEEDED_ERROR)
        if not self.circuit_breaker.can_execute():
            return self._rejected(request, CIRCUIT_OPEN_ERROR)

        response = await self.manager.send_request(request)

        if response.success:
            self.circuit_breaker.record_success()
        else:
            self.circuit_breaker.record_failure()
        self.cost_tracker.track_request(response.cost)

        return response

    def get_metrics(self) -> Dict[str, Any]:
        return {
            "cost": self.cost_tracker.get_metrics(),
            "circuit_breaker": self.circuit_breaker.get_metrics(),
        }


_ai_service: Optional[AIService] = None


def get_ai_service() -> AIService:
    """Return the process-wide AIService, building it from settings on first use."""
    global _ai_service
    if _ai_service is None:
        from supportsignal.core.config import settings

        ai = settings.ai
        _ai_service = AIService(
            manager=create_ai_manager(ai),
            rate_limiter=RateLimiter(ai.rate_limit_window_ms, ai.rate_limit_max_requests),
            cost_tracker=CostTracker(ai.daily_cost_limit),
            circuit_breaker=CircuitBreaker(
                ai.circuit_failure_threshold,
                ai.circuit_success_threshold,
                ai.circuit_timeout_ms,
            ),
            default_model=ai.default_model,
        )
    return _ai_service
