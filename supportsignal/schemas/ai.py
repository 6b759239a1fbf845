"""AI monitoring and connectivity schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ProviderStatus(BaseModel):
    name: str
    enabled: bool
    priority: int
    models: List[str]


class ProviderOverview(BaseModel):
    providers: List[ProviderStatus]
    available_models: List[str]
    has_openrouter_key: bool
    has_anthropic_key: bool


class ConnectivityTestRequest(BaseModel):
    model: str = Field(default="openai/gpt-4.1-nano", description="Model to probe")
    prompt: str = Field(default='Test message - respond with "OK"')
    use_retry_client: bool = Field(
        default=False,
        description="Probe OpenRouter directly with the retrying client instead of the provider chain",
    )


class ConnectivityTestResult(BaseModel):
    success: bool
    model: str
    provider: Optional[str] = None
    response_preview: Optional[str] = None
    processing_time_ms: int = 0
    tokens_used: Optional[int] = None
    cost: Optional[float] = None
    error: Optional[str] = None
    correlation_id: str


class AIHealthSummary(BaseModel):
    status: str = Field(..., description="healthy | no_providers")
    provider_count: int
    enabled_provider_count: int
    providers: List[ProviderStatus]
    suggested_test_model: str = "openai/gpt-4.1-nano"
    metrics: Dict[str, Any] = Field(default_factory=dict)


class AIRequestLogResponse(BaseModel):
    id: UUID
    correlation_id: str
    operation: str
    model: str
    prompt_template: Optional[str] = None
    processing_time_ms: int = 0
    tokens_used: Optional[int] = None
    cost_usd: Optional[float] = None
    success: bool
    error_message: Optional[str] = None
    user_id: Optional[UUID] = None
    incident_id: Optional[UUID] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, protected_namespaces=())


__all__ = [
    "AIHealthSummary",
    "AIRequestLogResponse",
    "ConnectivityTestRequest",
    "ConnectivityTestResult",
    "ProviderOverview",
    "ProviderStatus",
]
