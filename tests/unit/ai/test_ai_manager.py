"""Tests for priority-ordered provider dispatch."""

from typing import List, Optional

import pytest

from supportsignal.ai.base import AIProvider, AIRequest, AIResponse, ProviderConfig
from supportsignal.ai.manager import NO_PROVIDERS_ERROR, MultiProviderAIManager, create_ai_manager


class FakeProvider(AIProvider):
    """Provider returning canned outcomes and recording the models it was asked for."""

    def __init__(
        self,
        name: str,
        priority: int,
        models: List[str],
        succeed: bool = True,
        enabled: bool = True,
        raises: Optional[Exception] = None,
    ):
        super().__init__(ProviderConfig(name, "key", "https://example.test", models, priority, enabled))
        self.succeed = succeed
        self.raises = raises
        self.calls: List[str] = []

    async def send_request(self, request: AIRequest) -> AIResponse:
        self.calls.append(request.model)
        if self.raises:
            raise self.raises
        if self.succeed:
            return AIResponse(
                success=True,
                content=f"{self.get_name()} says hi",
                model=request.model,
                correlation_id=request.correlation_id,
                provider=self.get_name(),
            )
        return AIResponse(success=False, model=request.model, error=f"{self.get_name()} failed")


def _request(model: str = "openai/gpt-5-nano") -> AIRequest:
    return AIRequest(prompt="hello", model=model, correlation_id="ai-1-abc")


class TestMultiProviderAIManager:
    """Tests for MultiProviderAIManager.send_request."""

    @pytest.mark.asyncio
    async def test_uses_lowest_priority_number_first(self):
        first = FakeProvider("first", 1, ["openai/gpt-5-nano"])
        second = FakeProvider("second", 2, ["openai/gpt-5-nano"])
        manager = MultiProviderAIManager([second, first])

        response = await manager.send_request(_request())

        assert response.success is True
        assert response.provider == "first"
        assert first.calls == ["openai/gpt-5-nano"]
        assert second.calls == []

    @pytest.mark.asyncio
    async def test_falls_through_to_next_provider_on_failure(self):
        first = FakeProvider("first", 1, ["openai/gpt-5-nano"], succeed=False)
        second = FakeProvider("second", 2, ["openai/gpt-5-nano"])
        manager = MultiProviderAIManager([first, second])

        response = await manager.send_request(_request())

        assert response.success is True
        assert response.provider == "second"
        assert len(first.calls) == 1

    @pytest.mark.asyncio
    async def test_provider_exception_is_treated_as_failure(self):
        first = FakeProvider("first", 1, ["openai/gpt-5-nano"], raises=RuntimeError("boom"))
        second = FakeProvider("second", 2, ["openai/gpt-5-nano"])
        manager = MultiProviderAIManager([first, second])

        response = await manager.send_request(_request())

        assert response.provider == "second"

    @pytest.mark.asyncio
    async def test_skips_providers_that_do_not_support_model(self):
        anthropic = FakeProvider("anthropic", 1, ["claude-3-haiku"])
        openrouter = FakeProvider("openrouter", 2, ["openai/gpt-5-nano"])
        manager = MultiProviderAIManager([anthropic, openrouter])

        response = await manager.send_request(_request())

        assert response.provider == "openrouter"
        assert anthropic.calls == []

    @pytest.mark.asyncio
    async def test_disabled_provider_is_never_called(self):
        disabled = FakeProvider("disabled", 1, ["openai/gpt-5-nano"], enabled=False)
        enabled = FakeProvider("enabled", 2, ["openai/gpt-5-nano"])
        manager = MultiProviderAIManager([disabled, enabled])

        response = await manager.send_request(_request())

        assert response.provider == "enabled"
        assert disabled.calls == []

    @pytest.mark.asyncio
    async def test_tries_fallback_model_after_primary_fails_everywhere(self):
        provider = FakeProvider("openrouter", 1, ["openai/gpt-5-nano", "openai/gpt-4.1-nano"], succeed=False)
        manager = MultiProviderAIManager([provider], fallback_model="openai/gpt-4.1-nano")

        response = await manager.send_request(_request())

        assert response.success is False
        assert provider.calls == ["openai/gpt-5-nano", "openai/gpt-4.1-nano"]
        assert "SYSTEM ERROR" in response.error
        assert "openrouter failed" in response.error

    @pytest.mark.asyncio
    async def test_fallback_model_not_retried_when_same_as_primary(self):
        provider = FakeProvider("openrouter", 1, ["openai/gpt-5-nano"], succeed=False)
        manager = MultiProviderAIManager([provider], fallback_model="openai/gpt-5-nano")

        await manager.send_request(_request())

        assert provider.calls == ["openai/gpt-5-nano"]

    @pytest.mark.asyncio
    async def test_no_enabled_providers_returns_configuration_error(self):
        manager = MultiProviderAIManager([])

        response = await manager.send_request(_request())

        assert response.success is False
        assert response.error == NO_PROVIDERS_ERROR
        assert response.correlation_id == "ai-1-abc"

    @pytest.mark.asyncio
    async def test_unsupported_model_reports_aggregated_error(self):
        provider = FakeProvider("anthropic", 1, ["claude-3-haiku"])
        manager = MultiProviderAIManager([provider])

        response = await manager.send_request(_request("openai/gpt-5-nano"))

        assert response.success is False
        assert "No enabled provider supports model" in response.error


class TestProviderStatus:
    """Tests for status reporting and settings-driven construction."""

    def test_available_models_only_from_enabled_providers(self):
        manager = MultiProviderAIManager([
            FakeProvider("a", 1, ["m1", "m2"]),
            FakeProvider("b", 2, ["m2", "m3"]),
            FakeProvider("c", 3, ["m4"], enabled=False),
        ])

        assert manager.get_available_models() == ["m1", "m2", "m3"]
        assert [p["name"] for p in manager.get_provider_status()] == ["a", "b", "c"]

    def test_create_ai_manager_registers_only_configured_keys(self):
        class AISettingsStub:
            openrouter_api_key = "or-key"
            openrouter_base_url = "https://openrouter.ai/api/v1"
            anthropic_api_key = ""
            anthropic_base_url = "https://api.anthropic.com/v1"
            timeout_ms = 30000
            fallback_model = "openai/gpt-4.1-nano"

        manager = create_ai_manager(AISettingsStub())

        status = manager.get_provider_status()
        assert [p["name"] for p in status] == ["openrouter"]
        assert status[0]["priority"] == 1
        assert manager.fallback_model == "openai/gpt-4.1-nano"

    def test_supports_model_matches_by_substring(self):
        provider = FakeProvider("anthropic", 1, ["claude-3-haiku"])

        assert provider.supports_model("claude-3-haiku")
        assert provider.supports_model("anthropic/claude-3-haiku")
        assert not provider.supports_model("openai/gpt-4o")
