"""Repositories for clarification questions and answers."""

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from supportsignal.database.models import ClarificationAnswer, ClarificationQuestion
from supportsignal.repositories.base_repository import BaseRepository


class ClarificationQuestionRepository(BaseRepository[ClarificationQuestion]):
    """Repository for ClarificationQuestion entity operations."""

    model = ClarificationQuestion

    async def list_for_incident(
        self, incident_id: UUID, phase: Optional[str] = None, active_only: bool = True
    ) -> List[ClarificationQuestion]:
        """Questions for an incident ordered by phase then question order."""
        try:
            stmt = select(ClarificationQuestion).where(ClarificationQuestion.incident_id == incident_id)
            if phase:
                stmt = stmt.where(ClarificationQuestion.phase == phase)
            if active_only:
                stmt = stmt.where(ClarificationQuestion.is_active.is_(True))
            stmt = stmt.order_by(ClarificationQuestion.phase, ClarificationQuestion.question_order)
            result = await self.session.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise self._fail("listing", e) from e

    async def replace_for_phase(
        self, incident_id: UUID, phase: str, questions: List[Dict[str, Any]]
    ) -> List[ClarificationQuestion]:
        """Deactivate a phase's existing questions and insert a new set atomically.

        Args:
            incident_id: Incident the questions belong to
            phase: Narrative phase
            questions: Column values for each new question

        Returns:
            The inserted questions
        """
        try:
            await self.session.execute(
                update(ClarificationQuestion)
                .where(
                    ClarificationQuestion.incident_id == incident_id,
                    ClarificationQuestion.phase == phase,
                )
                .values(is_active=False)
            )
            created = [ClarificationQuestion(incident_id=incident_id, phase=phase, **q) for q in questions]
            self.session.add_all(created)
            await self.session.flush()
            await self.session.commit()
            return created
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise self._fail("replacing", e) from e


class ClarificationAnswerRepository(BaseRepository[ClarificationAnswer]):
    """Repository for ClarificationAnswer entity operations."""

    model = ClarificationAnswer

    async def get_for_question(self, incident_id: UUID, question_id: str) -> Optional[ClarificationAnswer]:
        try:
            stmt = select(ClarificationAnswer).where(
                ClarificationAnswer.incident_id == incident_id,
                ClarificationAnswer.question_id == question_id,
            )
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._fail("retrieving", e) from e

    async def list_for_incident(self, incident_id: UUID, phase: Optional[str] = None) -> List[ClarificationAnswer]:
        try:
            stmt = select(ClarificationAnswer).where(ClarificationAnswer.incident_id == incident_id)
            if phase:
                stmt = stmt.where(ClarificationAnswer.phase == phase)
            result = await self.session.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise self._fail("listing", e) from e
