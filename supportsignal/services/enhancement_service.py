"""Narrative enhancement: merge clarification answers into a phase narrative."""

import re
import time
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from supportsignal.ai.base import AIRequest
from supportsignal.ai.client import generate_correlation_id
from supportsignal.ai.service import AIService, get_ai_service
from supportsignal.core.exceptions import NotFoundError
from supportsignal.prompts.defaults import ENHANCEMENT_PROMPT_NAME
from supportsignal.repositories.clarification_repository import (
    ClarificationAnswerRepository,
    ClarificationQuestionRepository,
)
from supportsignal.repositories.incident_repository import IncidentRepository, NarrativeRepository
from supportsignal.schemas.auth import CurrentUser
from supportsignal.schemas.incidents import EnhancementResult, NarrativeResponse
from supportsignal.services.ai_request_log_service import AIRequestLogService
from supportsignal.services.incident_service import load_incident_for_user
from supportsignal.services.prompt_service import PromptService
from supportsignal.utils.logging import get_logger

LOGGER = get_logger(__name__)

MOCK_MODEL = "mock-service"
NO_RESPONSES_TEXT = "No clarification responses provided."
TERMINAL_PUNCTUATION = re.compile(r"[.!?]$")


def _tidy_sentence(text: str) -> str:
    text = text.strip()
    if not text:
        return text
    text = text[0].upper() + text[1:]
    if not TERMINAL_PUNCTUATION.search(text):
        text += "."
    return text


def mock_enhancement(original: str, qa_pairs: List[Tuple[str, str]]) -> str:
    """Grammar-tidy the original text and append answered questions."""
    sections = [_tidy_sentence(original)] if original.strip() else []
    qa_content = "\n\n".join(
        f"**Q: {question}**\nA: {_tidy_sentence(answer)}"
        for question, answer in qa_pairs
        if answer.strip()
    )
    if qa_content:
        sections.append(f"**ADDITIONAL CLARIFICATIONS**\n\n{qa_content}")
    return "\n\n".join(sections)


class EnhancementService:
    """Service for AI narrative enhancement."""

    def __init__(self, db_session: AsyncSession, ai_service: Optional[AIService] = None):
        self.incident_repository = IncidentRepository(db_session)
        self.narrative_repository = NarrativeRepository(db_session)
        self.question_repository = ClarificationQuestionRepository(db_session)
        self.answer_repository = ClarificationAnswerRepository(db_session)
        self.prompt_service = PromptService(db_session)
        self.log_service = AIRequestLogService(db_session)
        self.ai_service = ai_service or get_ai_service()

    async def _qa_pairs(self, incident_id: UUID, phase: str) -> List[Tuple[str, str]]:
        questions = await self.question_repository.list_for_incident(incident_id, phase=phase, active_only=True)
        answers = {
            a.question_id: a.answer_text
            for a in await self.answer_repository.list_for_incident(incident_id, phase=phase)
        }
        return [
            (q.question_text, answers[q.question_id].strip())
            for q in questions
            if (answers.get(q.question_id) or "").strip()
        ]

    async def enhance_phase(self, incident_id: UUID, phase: str, user: CurrentUser) -> EnhancementResult:
        """Enhance one phase and store it in ``{phase}_extra``.

        Falls back to a deterministic mock enhancement when the AI call fails.

        Raises:
            NotFoundError: If the incident or its narrative does not exist
        """
        incident = await load_incident_for_user(self.incident_repository, incident_id, user)
        narrative = await self.narrative_repository.get_by_incident(incident_id)
        if not narrative:
            raise NotFoundError("Narrative not found. Create narrative first.")

        original = getattr(narrative, phase) or ""
        qa_pairs = await self._qa_pairs(incident_id, phase)
        responses_text = "\n\n".join(f"Q: {q}\nA: {a}" for q, a in qa_pairs) or NO_RESPONSES_TEXT

        resolved = await self.prompt_service.resolve_workflow_prompt(
            [ENHANCEMENT_PROMPT_NAME],
            {
                "participant_name": incident.participant_name,
                "reporter_name": incident.reporter_name,
                "event_date_time": incident.event_date_time,
                "incident_location": incident.location,
                "narrative_phase": phase,
                "phase_original_narrative": original,
                "phase_clarification_responses": responses_text,
            },
            ENHANCEMENT_PROMPT_NAME,
        )

        started = time.monotonic()
        response = await self.ai_service.generate(
            AIRequest(
                prompt=resolved.text,
                model=resolved.model or "",
                temperature=resolved.temperature,
                max_tokens=resolved.max_tokens,
                metadata={"operation": "enhance_narrative", "phase": phase},
            ),
            rate_key=str(user.id),
        )
        elapsed_ms = int((time.monotonic() - started) * 1000)

        success = response.success and bool(response.content.strip())
        if success:
            enhanced = response.content.strip()
            model_used = response.model
        else:
            LOGGER.warning(
                f"AI enhancement unavailable, using mock enhancement: {response.error}",
                extra={"incident_id": str(incident_id), "phase": phase},
            )
            enhanced = mock_enhancement(original, qa_pairs)
            model_used = MOCK_MODEL

        narrative = await self.narrative_repository.update_instance(
            narrative, enhanced_at=datetime.now(timezone.utc), **{f"{phase}_extra": enhanced}
        )
        await self.incident_repository.update_instance(incident, narrative_enhanced=True)

        await self.prompt_service.update_usage(resolved.prompt_name, elapsed_ms, success)
        await self.log_service.log_request(
            "enhance_narrative",
            response,
            prompt_template=resolved.prompt_name,
            input_data={"phase": phase, "narrative_length": len(original), "clarifications_count": len(qa_pairs)},
            output_data={"enhanced_content_length": len(enhanced), "mock": not success},
            user_id=user.id,
            incident_id=incident_id,
        )

        return EnhancementResult(
            phase=phase,
            enhanced_content=enhanced,
            ai_model_used=model_used,
            success=success,
            correlation_id=response.correlation_id or generate_correlation_id(),
            processing_time_ms=elapsed_ms,
            narrative=NarrativeResponse.model_validate(narrative),
        )
