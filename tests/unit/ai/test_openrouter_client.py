"""Tests for provider HTTP integrations and the retrying OpenRouter client."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from supportsignal.ai.base import AIRequest, ProviderConfig
from supportsignal.ai.client import OpenRouterClient, generate_correlation_id
from supportsignal.ai.providers import (
    AnthropicProvider,
    OpenRouterProvider,
    anthropic_cost,
    openrouter_cost,
)

OK_BODY = {
    "choices": [{"message": {"content": "OK"}, "finish_reason": "stop"}],
    "usage": {"total_tokens": 1000},
}


def _request(**overrides) -> AIRequest:
    fields = dict(prompt="Say OK", model="openai/gpt-4o-mini", correlation_id="ai-1-test")
    fields.update(overrides)
    return AIRequest(**fields)


class TestCostEstimation:
    """Tests for static cost tables."""

    def test_openrouter_cost_prefers_most_specific_rate(self):
        assert openrouter_cost(1000, "openai/gpt-4o-mini") == pytest.approx(0.00015)
        assert openrouter_cost(1000, "openai/gpt-4o") == pytest.approx(0.005)

    def test_openrouter_cost_uses_default_rate_for_unknown_model(self):
        assert openrouter_cost(2000, "mistral/unknown") == pytest.approx(0.004)

    def test_openrouter_cost_without_tokens_is_none(self):
        assert openrouter_cost(None, "openai/gpt-4o") is None
        assert openrouter_cost(0, "openai/gpt-4o") is None

    def test_anthropic_cost_splits_input_and_output(self):
        cost = anthropic_cost(1000, 1000, "claude-3-haiku-20240307")
        assert cost == pytest.approx(0.00025 + 0.00125)


class TestOpenRouterProvider:
    """Tests for the OpenRouter provider."""

    def _provider(self) -> OpenRouterProvider:
        return OpenRouterProvider(
            ProviderConfig("openrouter", "or-key", "https://openrouter.ai/api/v1", ["openai/gpt-4o-mini"], 1)
        )

    def test_payload_applies_defaults_and_schema(self):
        payload = self._provider().build_payload(_request(output_schema={"name": "questions"}))

        assert payload["temperature"] == 0.7
        assert payload["max_tokens"] == 1000
        assert payload["messages"] == [{"role": "user", "content": "Say OK"}]
        assert payload["response_format"] == {"type": "json_schema", "json_schema": {"name": "questions"}}

    def test_payload_keeps_explicit_zero_temperature(self):
        payload = self._provider().build_payload(_request(temperature=0.0, max_tokens=0))

        assert payload["temperature"] == 0.0
        assert payload["max_tokens"] == 0


    @pytest.mark.asyncio
    async def test_successful_call_maps_content_tokens_and_cost(self):
        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = httpx.Response(200, json=OK_BODY)

            response = await self._provider().send_request(_request())

        assert response.success is True
        assert response.content == "OK"
        assert response.tokens_used == 1000
        assert response.cost == pytest.approx(0.00015)
        assert response.provider == "openrouter"
        assert mock_post.call_args.args[0] == "https://openrouter.ai/api/v1/chat/completions"

    @pytest.mark.asyncio
    async def test_http_error_becomes_failure_response(self):
        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = httpx.Response(500, text="upstream down")

            response = await self._provider().send_request(_request())

        assert response.success is False
        assert "500" in response.error

    @pytest.mark.asyncio
    async def test_missing_choices_is_invalid_format(self):
        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = httpx.Response(200, json={"choices": []})

            response = await self._provider().send_request(_request())

        assert response.success is False
        assert "Invalid response format" in response.error


class TestAnthropicProvider:
    """Tests for the Anthropic provider."""

    @pytest.mark.asyncio
    async def test_maps_model_alias_and_sums_tokens(self):
        provider = AnthropicProvider(
            ProviderConfig("anthropic", "an-key", "https://api.anthropic.com/v1", ["claude-3-haiku"], 2)
        )
        body = {
            "content": [{"type": "text", "text": "Hello"}],
            "usage": {"input_tokens": 10, "output_tokens": 5},
        }

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = httpx.Response(200, json=body)

            response = await provider.send_request(_request(model="claude-3-haiku"))

        sent = mock_post.call_args.kwargs
        assert sent["json"]["model"] == "claude-3-haiku-20240307"
        assert sent["headers"]["x-api-key"] == "an-key"
        assert response.success is True
        assert response.content == "Hello"
        assert response.tokens_used == 15

    @pytest.mark.asyncio
    async def test_zero_temperature_is_sent_as_zero(self):
        provider = AnthropicProvider(
            ProviderConfig("anthropic", "an-key", "https://api.anthropic.com/v1", ["claude-3-haiku"], 2)
        )
        body = {"content": [{"type": "text", "text": "Hello"}], "usage": {}}

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = httpx.Response(200, json=body)

            await provider.send_request(_request(model="claude-3-haiku", temperature=0.0))

        assert mock_post.call_args.kwargs["json"]["temperature"] == 0.0



class TestOpenRouterClient:
    """Tests for bounded retry in OpenRouterClient."""

    def _client(self, max_retries: int = 3) -> OpenRouterClient:
        return OpenRouterClient(api_key="or-key", max_retries=max_retries, timeout_ms=1000)

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self):
        client = self._client()
        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post, \
                patch.object(OpenRouterClient, "_wait_before_retry", new_callable=AsyncMock) as mock_wait:
            mock_post.return_value = httpx.Response(200, json=OK_BODY)

            response = await client.send_request(_request())

        assert response.success is True
        assert response.finish_reason == "stop"
        assert mock_post.await_count == 1
        mock_wait.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retries_up_to_max_attempts(self):
        client = self._client(max_retries=3)
        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post, \
                patch.object(OpenRouterClient, "_wait_before_retry", new_callable=AsyncMock) as mock_wait:
            mock_post.return_value = httpx.Response(503, text="busy")

            response = await client.send_request(_request())

        assert response.success is False
        assert "503" in response.error
        assert mock_post.await_count == 3
        assert [c.args[0] for c in mock_wait.await_args_list] == [1, 2]

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failure(self):
        client = self._client()
        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post, \
                patch.object(OpenRouterClient, "_wait_before_retry", new_callable=AsyncMock):
            mock_post.side_effect = [
                httpx.Response(502, text="bad gateway"),
                httpx.Response(200, json=OK_BODY),
            ]

            response = await client.send_request(_request())

        assert response.success is True
        assert mock_post.await_count == 2

    @pytest.mark.asyncio
    async def test_authentication_failure_is_not_retried(self):
        client = self._client()
        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post, \
                patch.object(OpenRouterClient, "_wait_before_retry", new_callable=AsyncMock) as mock_wait:
            mock_post.return_value = httpx.Response(401, text="bad key")

            response = await client.send_request(_request())

        assert response.success is False
        assert "401" in response.error
        assert mock_post.await_count == 1
        mock_wait.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_timeout_is_retried(self):
        client = self._client(max_retries=2)
        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post, \
                patch.object(OpenRouterClient, "_wait_before_retry", new_callable=AsyncMock):
            mock_post.side_effect = httpx.ReadTimeout("slow")

            response = await client.send_request(_request())

        assert response.success is False
        assert "timeout" in response.error
        assert mock_post.await_count == 2

    @pytest.mark.asyncio
    async def test_payload_carries_output_schema_and_zero_temperature(self):
        client = self._client()
        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = httpx.Response(200, json=OK_BODY)

            await client.send_request(_request(output_schema={"name": "questions"}, temperature=0.0))

        sent = mock_post.call_args.kwargs["json"]
        assert sent["response_format"] == {"type": "json_schema", "json_schema": {"name": "questions"}}
        assert sent["temperature"] == 0.0
        assert sent["model"] == "openai/gpt-4o-mini"


    @pytest.mark.asyncio
    async def test_empty_model_uses_client_default(self):
        client = self._client()
        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = httpx.Response(200, json=OK_BODY)

            response = await client.send_request(_request(model=""))

        assert response.model == "openai/gpt-5-nano"
        assert mock_post.call_args.kwargs["json"]["model"] == "openai/gpt-5-nano"


def test_correlation_id_format():
    correlation_id = generate_correlation_id()
    prefix, millis, suffix = correlation_id.split("-")

    assert prefix == "ai"
    assert millis.isdigit()
    assert len(suffix) == 9
    assert correlation_id != generate_correlation_id()
