from supportsignal.ai.base import AIProvider, AIRequest, AIResponse, ProviderConfig
from supportsignal.ai.circuit_breaker import CircuitBreaker, CircuitState
from supportsignal.ai.client import CostTracker, OpenRouterClient, RateLimiter, generate_correlation_id
from supportsignal.ai.fallback import FallbackHandler
from supportsignal.ai.manager import MultiProviderAIManager, create_ai_manager
from supportsignal.ai.providers import AnthropicProvider, OpenRouterProvider
from supportsignal.ai.service import AIService, get_ai_service

__all__ = [
    "AIProvider",
    "AIRequest",
    "AIResponse",
    "AIService",
    "AnthropicProvider",
    "CircuitBreaker",
    "CircuitState",
    "CostTracker",
    "FallbackHandler",
    "MultiProviderAIManager",
    "OpenRouterClient",
    "OpenRouterProvider",
    "ProviderConfig",
    "RateLimiter",
    "create_ai_manager",
    "generate_correlation_id",
    "get_ai_service",
]
