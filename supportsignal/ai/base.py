"""Common request/response records and the provider interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class AIRequest:
    """A single prompt to be sent to an LLM provider."""

    prompt: str
    model: str
    correlation_id: str = ""
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    output_schema: Optional[Dict[str, Any]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AIResponse:
    """Provider-independent result of an AI request.

    Failures are represented with ``success=False`` and an ``error`` message
    rather than exceptions, so callers can fall back without try/except.
    """

    success: bool
    content: str = ""
    model: str = ""
    correlation_id: str = ""
    tokens_used: Optional[int] = None
    cost: Optional[float] = None
    processing_time_ms: int = 0
    error: Optional[str] = None
    provider: Optional[str] = None
    finish_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "content": self.content,
            "model": self.model,
            "correlation_id": self.correlation_id,
            "tokens_used": self.tokens_used,
            "cost": self.cost,
            "processing_time_ms": self.processing_time_ms,
            "error": self.error,
            "provider": self.provider,
            "finish_reason": self.finish_reason,
        }


@dataclass
class ProviderConfig:
    """Static configuration of one provider integration."""

    name: str
    api_key: str
    base_url: str
    models: List[str]
    priority: int
    enabled: bool = True


class AIProvider(ABC):
    """Base class for LLM provider integrations."""

    def __init__(self, config: ProviderConfig, timeout: float = 30.0):
        """Initialize the provider.

        Args:
            config: Provider configuration
            timeout: Per-call HTTP timeout in seconds
        """
        self.config = config
        self.timeout = timeout

    @abstractmethod
    async def send_request(self, request: AIRequest) -> AIResponse:
        """Perform one HTTP call and map the result to an AIResponse."""
        pass

    def get_name(self) -> str:
        return self.config.name

    def is_enabled(self) -> bool:
        return self.config.enabled

    def get_priority(self) -> int:
        return self.config.priority

    def supports_model(self, model: str) -> bool:
        """Check whether this provider can serve ``model``.

        A configured model matches when it equals the requested name or is
        contained in it, so ``claude-3-haiku`` also matches
        ``anthropic/claude-3-haiku``.
        """
        return any(supported == model or supported in model for supported in self.config.models)
