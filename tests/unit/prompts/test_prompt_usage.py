"""Tests for prompt usage statistics and workflow prompt resolution."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from supportsignal.core.exceptions import ConflictError, ValidationError
from supportsignal.prompts.defaults import CLARIFICATION_PROMPT_NAME
from supportsignal.schemas.prompts import PromptCreate
from supportsignal.services.prompt_service import PromptService, next_usage_stats

VARIABLES = {
    "participant_name": "Emma Johnson",
    "reporter_name": "Sarah Thompson",
    "event_date_time": "2025-01-15T14:30",
    "incident_location": "Kitchen",
    "narrative_phase": "during_event",
    "existing_narrative": "She slipped.",
}


class TestUsageStats:
    """Tests for running usage averages."""

    def test_first_use(self):
        stats = next_usage_stats(0, None, None, 200, True)

        assert stats == {"usage_count": 1, "average_response_time": 200, "success_rate": 1.0}

    def test_running_average_and_success_rate(self):
        stats = next_usage_stats(3, 100.0, 1.0, 500, False)

        assert stats["usage_count"] == 4
        assert stats["average_response_time"] == pytest.approx(200.0)
        assert stats["success_rate"] == pytest.approx(0.75)

    def test_zero_success_rate_is_kept(self):
        stats = next_usage_stats(2, 100.0, 0.0, 100, True)

        assert stats["success_rate"] == pytest.approx(1 / 3)


class TestPromptService:
    """Tests for PromptService with a mocked repository."""

    @pytest.fixture
    def service(self) -> PromptService:
        service = PromptService(MagicMock())
        service.repository = AsyncMock()
        return service

    @pytest.mark.asyncio
    async def test_resolve_prefers_phase_specific_prompt(self, service):
        stored = SimpleNamespace(
            prompt_name=f"{CLARIFICATION_PROMPT_NAME}_during_event",
            prompt_version="v2.0.0",
            prompt_template="Ask about {{participant_name}} in {{incident_location}}",
            ai_model="openai/gpt-4o-mini",
            max_tokens=500,
            temperature=0.3,
        )
        service.repository.get_active_by_name.side_effect = lambda name: stored if name.endswith("_during_event") else None

        resolved = await service.resolve_workflow_prompt(
            [f"{CLARIFICATION_PROMPT_NAME}_during_event", CLARIFICATION_PROMPT_NAME],
            VARIABLES,
            CLARIFICATION_PROMPT_NAME,
        )

        assert resolved.prompt_name == f"{CLARIFICATION_PROMPT_NAME}_during_event"
        assert resolved.text == "Ask about Emma Johnson in Kitchen"
        assert resolved.model == "openai/gpt-4o-mini"

    @pytest.mark.asyncio
    async def test_resolve_falls_back_to_builtin_template(self, service):
        service.repository.get_active_by_name.return_value = None

        resolved = await service.resolve_workflow_prompt(
            [CLARIFICATION_PROMPT_NAME], VARIABLES, CLARIFICATION_PROMPT_NAME
        )

        assert resolved.prompt_version == "default"
        assert "Emma Johnson" in resolved.text
        assert "She slipped." in resolved.text
        assert "{{" not in resolved.text

    @pytest.mark.asyncio
    async def test_create_rejects_bad_syntax(self, service):
        with pytest.raises(ValidationError):
            await service.create_prompt(PromptCreate(prompt_name="p", prompt_template="{{}}"))

    @pytest.mark.asyncio
    async def test_create_rejects_duplicate_version(self, service):
        service.repository.get_all.return_value = [SimpleNamespace()]

        with pytest.raises(ConflictError):
            await service.create_prompt(PromptCreate(prompt_name="p", prompt_template="Hi {{name}}"))

    @pytest.mark.asyncio
    async def test_update_usage_without_active_prompt(self, service):
        service.repository.get_active_by_name.return_value = None

        assert await service.update_usage("missing", 100, True) is False
        service.repository.update_instance.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_seed_skips_existing_prompts(self, service):
        service.repository.get_active_by_name.side_effect = (
            lambda name: SimpleNamespace() if name == CLARIFICATION_PROMPT_NAME else None
        )

        created = await service.seed_default_prompts()

        assert CLARIFICATION_PROMPT_NAME not in created
        assert created
        assert service.repository.create.await_count == len(created)
