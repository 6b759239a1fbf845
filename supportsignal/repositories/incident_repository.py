"""Repository for incidents and their narratives."""

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from supportsignal.database.models import Incident, IncidentNarrative
from supportsignal.repositories.base_repository import BaseRepository


class IncidentRepository(BaseRepository[Incident]):
    """Repository for Incident entity operations."""

    model = Incident

    async def list_for_company(
        self,
        company_id: UUID,
        overall_status: Optional[str] = None,
        created_by: Optional[UUID] = None,
        limit: int = 100,
    ) -> List[Incident]:
        """Most recent incidents for a company."""
        try:
            stmt = select(Incident).where(Incident.company_id == company_id)
            if overall_status:
                stmt = stmt.where(Incident.overall_status == overall_status)
            if created_by:
                stmt = stmt.where(Incident.created_by == created_by)
            stmt = stmt.order_by(Incident.created_at.desc()).limit(limit)
            result = await self.session.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise self._fail("listing", e) from e

    async def get_dashboard_counts(self, company_id: UUID, recent_since: datetime) -> Dict[str, int]:
        """Aggregate workflow counters for a company in one query."""
        try:
            stmt = select(
                func.count().label("total_incidents"),
                func.count().filter(Incident.overall_status == "capture_pending").label("captures_pending"),
                func.count().filter(Incident.overall_status == "analysis_pending").label("analysis_pending"),
                func.count().filter(Incident.overall_status == "completed").label("completed"),
                func.count().filter(Incident.created_at > recent_since).label("recent_incidents"),
                func.count().filter(Incident.questions_generated.is_(True)).label("questions_generated"),
                func.count().filter(Incident.narrative_enhanced.is_(True)).label("narratives_enhanced"),
                func.count().filter(Incident.analysis_generated.is_(True)).label("analysis_generated"),
            ).where(Incident.company_id == company_id)
            result = await self.session.execute(stmt)
            return dict(result.one()._mapping)
        except SQLAlchemyError as e:
            raise self._fail("aggregating", e) from e


class NarrativeRepository(BaseRepository[IncidentNarrative]):
    """Repository for IncidentNarrative entity operations."""

    model = IncidentNarrative

    async def get_by_incident(self, incident_id: UUID) -> Optional[IncidentNarrative]:
        try:
            stmt = select(IncidentNarrative).where(IncidentNarrative.incident_id == incident_id)
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._fail("retrieving", e) from e
