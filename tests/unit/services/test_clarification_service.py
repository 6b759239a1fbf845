"""Tests for clarification question generation, answers and enhancement."""

import json
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from supportsignal.ai.base import AIResponse
from supportsignal.ai.fallback import FallbackHandler
from supportsignal.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from supportsignal.schemas.incidents import AnswerSubmit
from supportsignal.services.clarification_service import (
    FALLBACK_MODEL,
    ClarificationService,
    answer_metrics,
    narrative_hash,
    parse_questions,
)
from supportsignal.services.enhancement_service import (
    MOCK_MODEL,
    EnhancementService,
    mock_enhancement,
)
from supportsignal.services.prompt_service import ResolvedPrompt


async def _apply(instance, **fields):
    for key, value in fields.items():
        setattr(instance, key, value)
    return instance


def _question_row(incident_id, phase, row):
    return SimpleNamespace(
        id=uuid4(),
        incident_id=incident_id,
        phase=phase,
        is_active=True,
        generated_at=datetime.now(timezone.utc),
        **row,
    )


def _ai_service(response: AIResponse) -> MagicMock:
    ai_service = MagicMock()
    ai_service.generate = AsyncMock(return_value=response)
    return ai_service


def _resolved(name: str) -> ResolvedPrompt:
    return ResolvedPrompt(prompt_name=name, prompt_version="v1.0.0", text="prompt text")


@pytest.fixture(autouse=True)
def frontline_owns_incident(frontline_user, incident_record):
    incident_record.created_by = frontline_user.id


class TestQuestionParsing:
    """Tests for AI output parsing helpers."""

    def test_parses_objects_inside_code_fence(self):
        raw = '```json\n[{"question": "Who was present?", "purpose": "witnesses"}, "Was first aid given?"]\n```'

        questions = parse_questions(raw, "during_event")

        assert questions == [
            {"question_id": "during_event_q1", "question_text": "Who was present?", "question_order": 1},
            {"question_id": "during_event_q2", "question_text": "Was first aid given?", "question_order": 2},
        ]

    def test_accepts_question_text_key(self):
        questions = parse_questions('[{"question_text": "When?"}]', "end_event")

        assert questions[0]["question_text"] == "When?"

    def test_rejects_non_array(self):
        with pytest.raises(ValueError):
            parse_questions('{"question": "Who?"}', "before_event")

    def test_rejects_invalid_json(self):
        with pytest.raises(ValueError):
            parse_questions("Here are some questions", "before_event")

    def test_answer_metrics(self):
        assert answer_metrics("  Two staff were present.  ") == {
            "character_count": 23,
            "word_count": 4,
            "is_complete": True,
        }
        assert answer_metrics("yes")["is_complete"] is False
        assert answer_metrics("   ")["word_count"] == 0

    def test_narrative_hash_is_stable(self):
        assert narrative_hash("abc") == narrative_hash("abc")
        assert narrative_hash("abc") != narrative_hash("abd")
        assert len(narrative_hash("abc")) == 64


class TestClarificationService:
    """Tests for ClarificationService.generate_questions and answers."""

    def _service(self, ai_response, incident_record, narrative_record) -> ClarificationService:
        service = ClarificationService(MagicMock(), ai_service=_ai_service(ai_response))
        service.incident_repository = AsyncMock()
        service.incident_repository.get_by_id.return_value = incident_record
        service.incident_repository.update_instance.side_effect = _apply
        service.narrative_repository = AsyncMock()
        service.narrative_repository.get_by_incident.return_value = narrative_record
        service.question_repository = AsyncMock()
        service.question_repository.list_for_incident.return_value = []
        service.question_repository.replace_for_phase.side_effect = (
            lambda incident_id, phase, rows: [_question_row(incident_id, phase, r) for r in rows]
        )
        service.answer_repository = AsyncMock()
        service.prompt_service = AsyncMock()
        service.prompt_service.resolve_workflow_prompt.return_value = _resolved("generate_clarification_questions")
        service.log_service = AsyncMock()
        return service

    @pytest.mark.asyncio
    async def test_generates_questions_from_ai(self, frontline_user, incident_record, narrative_record):
        content = json.dumps([{"question": "What was on the floor?"}, {"question": "Who mopped last?"}])
        response = AIResponse(success=True, content=content, model="openai/gpt-5-nano", correlation_id="ai-1-x")
        service = self._service(response, incident_record, narrative_record)

        result = await service.generate_questions(incident_record.id, "during_event", frontline_user)

        assert result.cached is False
        assert result.fallback is False
        assert result.correlation_id == "ai-1-x"
        assert [q.question_text for q in result.questions] == ["What was on the floor?", "Who mopped last?"]
        assert result.questions[0].ai_model == "openai/gpt-5-nano"
        assert incident_record.questions_generated is True
        stored_rows = service.question_repository.replace_for_phase.await_args.args[2]
        assert {r["narrative_hash"] for r in stored_rows} == {narrative_hash(narrative_record.during_event)}
        service.prompt_service.update_usage.assert_awaited_once()
        service.log_service.log_request.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_uses_predefined_questions_when_ai_fails(self, frontline_user, incident_record, narrative_record):
        service = self._service(AIResponse(success=False, error="down"), incident_record, narrative_record)

        result = await service.generate_questions(incident_record.id, "during_event", frontline_user)

        assert result.fallback is True
        assert [q.question_text for q in result.questions] == FallbackHandler.questions_for_phase("during_event")
        assert all(q.ai_model == FALLBACK_MODEL for q in result.questions)
        args = service.prompt_service.update_usage.await_args.args
        assert args[2] is False

    @pytest.mark.asyncio
    async def test_unparseable_output_uses_predefined_questions(self, frontline_user, incident_record, narrative_record):
        response = AIResponse(success=True, content="Sorry, I cannot help", model="m")
        service = self._service(response, incident_record, narrative_record)

        result = await service.generate_questions(incident_record.id, "before_event", frontline_user)

        assert result.fallback is True

    @pytest.mark.asyncio
    async def test_returns_cached_questions_for_unchanged_narrative(
        self, frontline_user, incident_record, narrative_record
    ):
        service = self._service(AIResponse(success=True, content="[]"), incident_record, narrative_record)
        cached = _question_row(
            incident_record.id,
            "during_event",
            {"question_id": "during_event_q1", "question_text": "Cached?", "question_order": 1,
             "ai_model": "m", "prompt_version": "v1.0.0",
             "narrative_hash": narrative_hash(narrative_record.during_event)},
        )
        service.question_repository.list_for_incident.return_value = [cached]

        result = await service.generate_questions(incident_record.id, "during_event", frontline_user)

        assert result.cached is True
        assert result.questions[0].question_text == "Cached?"
        service.ai_service.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_force_regenerate_ignores_cache(self, frontline_user, incident_record, narrative_record):
        response = AIResponse(success=True, content='["New?"]', model="m")
        service = self._service(response, incident_record, narrative_record)
        service.question_repository.list_for_incident.return_value = [
            SimpleNamespace(narrative_hash=narrative_hash(narrative_record.during_event))
        ]

        result = await service.generate_questions(
            incident_record.id, "during_event", frontline_user, force_regenerate=True
        )

        assert result.cached is False
        assert result.questions[0].question_text == "New?"

    @pytest.mark.asyncio
    async def test_each_phase_keeps_its_own_cache(self, frontline_user, incident_record, narrative_record):
        response = AIResponse(success=True, content='["Anything else?"]', model="m")
        service = self._service(response, incident_record, narrative_record)
        active = {}

        async def _list(incident_id, phase=None, active_only=True):
            return active.get(phase, [])

        async def _replace(incident_id, phase, rows):
            active[phase] = [_question_row(incident_id, phase, r) for r in rows]
            return active[phase]

        service.question_repository.list_for_incident.side_effect = _list
        service.question_repository.replace_for_phase.side_effect = _replace

        first = await service.generate_questions(incident_record.id, "before_event", frontline_user)
        second = await service.generate_questions(incident_record.id, "during_event", frontline_user)
        again = await service.generate_questions(incident_record.id, "before_event", frontline_user)

        assert first.cached is False
        assert second.cached is False
        assert again.cached is True
        assert service.ai_service.generate.await_count == 2

    @pytest.mark.asyncio
    async def test_edited_narrative_regenerates(self, frontline_user, incident_record, narrative_record):
        response = AIResponse(success=True, content='["Fresh?"]', model="m")
        service = self._service(response, incident_record, narrative_record)
        service.question_repository.list_for_incident.return_value = [
            SimpleNamespace(narrative_hash=narrative_hash("an older version of the text"))
        ]

        result = await service.generate_questions(incident_record.id, "during_event", frontline_user)

        assert result.cached is False
        assert result.questions[0].question_text == "Fresh?"

    @pytest.mark.asyncio
    async def test_other_workers_cannot_generate_questions(
        self, frontline_user, incident_record, narrative_record
    ):
        incident_record.created_by = uuid4()
        service = self._service(AIResponse(success=True, content='["Q?"]'), incident_record, narrative_record)

        with pytest.raises(PermissionDeniedError):
            await service.generate_questions(incident_record.id, "during_event", frontline_user)
        service.ai_service.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_phase_is_rejected(self, frontline_user, incident_record, narrative_record):
        service = self._service(AIResponse(success=True), incident_record, narrative_record)

        with pytest.raises(ValidationError, match="post_event"):
            await service.generate_questions(incident_record.id, "post_event", frontline_user)

    @pytest.mark.asyncio
    async def test_submit_answer_upserts(self, frontline_user, incident_record, narrative_record):
        service = self._service(AIResponse(success=True), incident_record, narrative_record)
        existing = SimpleNamespace(id=uuid4(), incident_id=incident_record.id, question_id="during_event_q1")
        service.answer_repository.get_for_question.return_value = existing
        service.answer_repository.update_instance.side_effect = _apply

        answer = await service.submit_answer(
            incident_record.id,
            AnswerSubmit(question_id="during_event_q1", answer_text="Water from the sink", phase="during_event"),
            frontline_user,
        )

        assert answer.answer_text == "Water from the sink"
        assert answer.word_count == 4
        assert answer.is_complete is True
        assert answer.answered_by == frontline_user.id
        service.answer_repository.create.assert_not_awaited()


class TestEnhancement:
    """Tests for narrative enhancement."""

    def test_mock_enhancement_tidies_and_appends_answers(self):
        text = mock_enhancement(
            "she slipped near the sink",
            [("Was the floor wet?", "yes, from a leak"), ("Anyone else?", "  ")],
        )

        assert text == (
            "She slipped near the sink.\n\n"
            "**ADDITIONAL CLARIFICATIONS**\n\n"
            "**Q: Was the floor wet?**\nA: Yes, from a leak."
        )

    def test_mock_enhancement_without_answers(self):
        assert mock_enhancement("Done!", []) == "Done!"

    def _service(self, ai_response, incident_record, narrative_record) -> EnhancementService:
        service = EnhancementService(MagicMock(), ai_service=_ai_service(ai_response))
        service.incident_repository = AsyncMock()
        service.incident_repository.get_by_id.return_value = incident_record
        service.incident_repository.update_instance.side_effect = _apply
        service.narrative_repository = AsyncMock()
        service.narrative_repository.get_by_incident.return_value = narrative_record
        service.narrative_repository.update_instance.side_effect = _apply
        service.question_repository = AsyncMock()
        service.question_repository.list_for_incident.return_value = [
            SimpleNamespace(question_id="during_event_q1", question_text="Was the floor wet?"),
            SimpleNamespace(question_id="during_event_q2", question_text="Who was nearby?"),
        ]
        service.answer_repository = AsyncMock()
        service.answer_repository.list_for_incident.return_value = [
            SimpleNamespace(question_id="during_event_q1", answer_text="Yes, water from the sink"),
        ]
        service.prompt_service = AsyncMock()
        service.prompt_service.resolve_workflow_prompt.return_value = _resolved("enhance_narrative")
        service.log_service = AsyncMock()
        return service

    @pytest.mark.asyncio
    async def test_stores_ai_enhancement(self, frontline_user, incident_record, narrative_record):
        response = AIResponse(success=True, content=" Enhanced text. ", model="openai/gpt-5-nano", correlation_id="c1")
        service = self._service(response, incident_record, narrative_record)

        result = await service.enhance_phase(incident_record.id, "during_event", frontline_user)

        assert result.success is True
        assert result.enhanced_content == "Enhanced text."
        assert result.ai_model_used == "openai/gpt-5-nano"
        assert narrative_record.during_event_extra == "Enhanced text."
        assert narrative_record.enhanced_at is not None
        assert incident_record.narrative_enhanced is True

        variables = service.prompt_service.resolve_workflow_prompt.await_args.args[1]
        assert variables["phase_clarification_responses"] == "Q: Was the floor wet?\nA: Yes, water from the sink"

    @pytest.mark.asyncio
    async def test_falls_back_to_mock_enhancement(self, frontline_user, incident_record, narrative_record):
        service = self._service(AIResponse(success=False, error="down"), incident_record, narrative_record)

        result = await service.enhance_phase(incident_record.id, "during_event", frontline_user)

        assert result.success is False
        assert result.ai_model_used == MOCK_MODEL
        assert result.correlation_id.startswith("ai-")
        assert "**ADDITIONAL CLARIFICATIONS**" in result.enhanced_content
        assert narrative_record.during_event_extra == result.enhanced_content

    @pytest.mark.asyncio
    async def test_requires_narrative(self, frontline_user, incident_record, narrative_record):
        service = self._service(AIResponse(success=True), incident_record, narrative_record)
        service.narrative_repository.get_by_incident.return_value = None

        with pytest.raises(NotFoundError):
            await service.enhance_phase(incident_record.id, "during_event", frontline_user)

    @pytest.mark.asyncio
    async def test_other_workers_cannot_enhance(self, frontline_user, incident_record, narrative_record):
        incident_record.created_by = uuid4()
        service = self._service(AIResponse(success=True, content="x"), incident_record, narrative_record)

        with pytest.raises(PermissionDeniedError):
            await service.enhance_phase(incident_record.id, "during_event", frontline_user)
        assert narrative_record.during_event_extra is None
