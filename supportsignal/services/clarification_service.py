"""Clarification questions: AI generation per narrative phase and answers."""

import hashlib
import json
import re
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from supportsignal.ai.base import AIRequest
from supportsignal.ai.fallback import FallbackHandler
from supportsignal.ai.service import AIService, get_ai_service
from supportsignal.core.exceptions import ValidationError
from supportsignal.prompts.defaults import CLARIFICATION_PROMPT_NAME
from supportsignal.repositories.clarification_repository import (
    ClarificationAnswerRepository,
    ClarificationQuestionRepository,
)
from supportsignal.repositories.incident_repository import IncidentRepository, NarrativeRepository
from supportsignal.schemas.auth import CurrentUser
from supportsignal.schemas.incidents import (
    AnswerResponse,
    AnswerSubmit,
    QuestionGenerationResult,
    QuestionResponse,
)
from supportsignal.services.ai_request_log_service import AIRequestLogService
from supportsignal.services.incident_service import load_incident_for_user
from supportsignal.services.prompt_service import PromptService
from supportsignal.utils.logging import get_logger

LOGGER = get_logger(__name__)

FALLBACK_MODEL = "fallback"
MIN_COMPLETE_ANSWER_LENGTH = 10
CODE_FENCE_REGEX = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def narrative_hash(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def parse_questions(raw: str, phase: str) -> List[Dict[str, Any]]:
    """Parse an AI response into question rows.

    The response must be a JSON array, optionally wrapped in a markdown code
    fence. Items may be objects with ``question`` or ``question_text`` keys,
    or bare strings.

    Args:
        raw: Model output
        phase: Narrative phase, used to build ``{phase}_q{n}`` ids

    Returns:
        Dicts with ``question_id``, ``question_text`` and ``question_order``

    Raises:
        ValueError: If the content is not a JSON array
    """
    cleaned = CODE_FENCE_REGEX.sub("", raw.strip()).strip()
    parsed = json.loads(cleaned)
    if not isinstance(parsed, list):
        raise ValueError("AI response must be an array of questions")

    questions = []
    for index, item in enumerate(parsed, start=1):
        if isinstance(item, dict):
            text = item.get("question") or item.get("question_text") or str(item)
        else:
            text = str(item)
        questions.append({
            "question_id": f"{phase}_q{index}",
            "question_text": text,
            "question_order": index,
        })
    return questions


def answer_metrics(answer_text: str) -> Dict[str, Any]:
    text = answer_text.strip()
    return {
        "character_count": len(text),
        "word_count": len(text.split()) if text else 0,
        "is_complete": len(text) > MIN_COMPLETE_ANSWER_LENGTH,
    }


class ClarificationService:
    """Service for clarification question generation and answers."""

    def __init__(self, db_session: AsyncSession, ai_service: Optional[AIService] = None):
        """Initialize service with database session.

        Args:
            db_session: SQLAlchemy async session
            ai_service: AI facade; defaults to the process-wide instance
        """
        self.question_repository = ClarificationQuestionRepository(db_session)
        self.answer_repository = ClarificationAnswerRepository(db_session)
        self.incident_repository = IncidentRepository(db_session)
        self.narrative_repository = NarrativeRepository(db_session)
        self.prompt_service = PromptService(db_session)
        self.log_service = AIRequestLogService(db_session)
        self.ai_service = ai_service or get_ai_service()

    async def generate_questions(
        self, incident_id: UUID, phase: str, user: CurrentUser, force_regenerate: bool = False
    ) -> QuestionGenerationResult:
        """Generate (or reuse) clarification questions for one phase.

        Cached questions are returned while the phase narrative is unchanged;
        each question row carries the hash of the text it was generated from.
        When the AI call fails or returns something unparseable, predefined
        questions are stored instead so the workflow can continue.

        Raises:
            ValidationError: If the phase narrative is empty
        """
        incident = await load_incident_for_user(self.incident_repository, incident_id, user)
        narrative = await self.narrative_repository.get_by_incident(incident_id)
        content = (getattr(narrative, phase, "") or "") if narrative else ""
        if not content.strip():
            raise ValidationError(f"Narrative content is required for phase {phase}")

        content_hash = narrative_hash(content)
        existing = await self.question_repository.list_for_incident(incident_id, phase=phase, active_only=True)
        if existing and not force_regenerate and all(q.narrative_hash == content_hash for q in existing):
            LOGGER.info(f"Returning cached questions for incident {incident_id} phase {phase}")
            return QuestionGenerationResult(
                questions=[QuestionResponse.model_validate(q) for q in existing],
                cached=True,
            )

        resolved = await self.prompt_service.resolve_workflow_prompt(
            [f"{CLARIFICATION_PROMPT_NAME}_{phase}", CLARIFICATION_PROMPT_NAME],
            {
                "participant_name": incident.participant_name,
                "reporter_name": incident.reporter_name,
                "event_date_time": incident.event_date_time,
                "incident_location": incident.location,
                "narrative_phase": phase,
                "existing_narrative": content,
            },
            CLARIFICATION_PROMPT_NAME,
        )

        request = AIRequest(
            prompt=resolved.text,
            model=resolved.model or "",
            temperature=resolved.temperature,
            max_tokens=resolved.max_tokens,
            metadata={"operation": "generate_clarification_questions", "phase": phase},
        )
        started = time.monotonic()
        response = await self.ai_service.generate(request, rate_key=str(user.id))
        elapsed_ms = int((time.monotonic() - started) * 1000)

        rows, ai_model, used_fallback = self._questions_from_response(response.success, response.content, phase)
        if not used_fallback:
            ai_model = response.model

        stored = await self.question_repository.replace_for_phase(
            incident_id,
            phase,
            [
                dict(row, ai_model=ai_model, prompt_version=resolved.prompt_version, narrative_hash=content_hash)
                for row in rows
            ],
        )
        await self.incident_repository.update_instance(incident, questions_generated=True)

        await self.prompt_service.update_usage(resolved.prompt_name, elapsed_ms, not used_fallback)
        await self.log_service.log_request(
            "generate_clarification_questions",
            response,
            prompt_template=resolved.prompt_name,
            input_data={"phase": phase, "narrative_length": len(content)},
            output_data={"question_count": len(stored), "fallback": used_fallback},
            user_id=user.id,
            incident_id=incident_id,
        )

        return QuestionGenerationResult(
            questions=[QuestionResponse.model_validate(q) for q in stored],
            cached=False,
            fallback=used_fallback,
            correlation_id=response.correlation_id,
        )

    def _questions_from_response(
        self, success: bool, content: str, phase: str
    ) -> Tuple[List[Dict[str, Any]], str, bool]:
        if success:
            try:
                rows = parse_questions(content, phase)
                if rows:
                    return rows, "", False
                LOGGER.warning(f"AI returned no questions for phase {phase}")
            except (ValueError, TypeError) as e:
                LOGGER.error(f"Failed to parse question generation output for {phase}: {e}")

        rows = [
            {"question_id": f"{phase}_q{i}", "question_text": text, "question_order": i}
            for i, text in enumerate(FallbackHandler.questions_for_phase(phase), start=1)
        ]
        return rows, FALLBACK_MODEL, True

    async def list_questions(
        self, incident_id: UUID, user: CurrentUser, phase: Optional[str] = None
    ) -> List[QuestionResponse]:
        await load_incident_for_user(self.incident_repository, incident_id, user)
        questions = await self.question_repository.list_for_incident(incident_id, phase=phase, active_only=True)
        return [QuestionResponse.model_validate(q) for q in questions]

    async def list_answers(
        self, incident_id: UUID, user: CurrentUser, phase: Optional[str] = None
    ) -> List[AnswerResponse]:
        await load_incident_for_user(self.incident_repository, incident_id, user)
        answers = await self.answer_repository.list_for_incident(incident_id, phase=phase)
        return [AnswerResponse.model_validate(a) for a in answers]

    async def submit_answer(self, incident_id: UUID, data: AnswerSubmit, user: CurrentUser) -> AnswerResponse:
        """Create or replace the answer to one question."""
        await load_incident_for_user(self.incident_repository, incident_id, user)

        fields = dict(
            answer_text=data.answer_text,
            phase=data.phase,
            answered_at=datetime.now(timezone.utc),
            answered_by=user.id,
            **answer_metrics(data.answer_text),
        )
        existing = await self.answer_repository.get_for_question(incident_id, data.question_id)
        if existing:
            answer = await self.answer_repository.update_instance(existing, **fields)
        else:
            answer = await self.answer_repository.create(
                incident_id=incident_id, question_id=data.question_id, **fields
            )

        LOGGER.info(
            f"Answer saved for {data.question_id}",
            extra={"incident_id": str(incident_id), "is_complete": answer.is_complete},
        )
        return AnswerResponse.model_validate(answer)
