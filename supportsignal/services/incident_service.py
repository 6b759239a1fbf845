"""Incident service: creation, workflow status and dashboard statistics."""

from datetime import datetime, timedelta, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from supportsignal.core.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from supportsignal.core.permissions import Permissions, has_permission
from supportsignal.database.models import Incident
from supportsignal.repositories.incident_repository import IncidentRepository
from supportsignal.repositories.participant_repository import ParticipantRepository
from supportsignal.schemas.auth import CurrentUser
from supportsignal.schemas.incidents import DashboardStats, IncidentCreate, IncidentResponse
from supportsignal.utils.logging import get_logger

LOGGER = get_logger(__name__)

RECENT_WINDOW = timedelta(days=30)


def compute_overall_status(capture_status: str, analysis_status: str) -> str:
    """Derive the overall workflow status from the two phase statuses."""
    if capture_status == "completed" and analysis_status == "completed":
        return "completed"
    if capture_status == "completed":
        return "analysis_pending"
    return "capture_pending"


def can_view_incident(incident: Incident, user: CurrentUser) -> bool:
    """Creators always see their incident; others need company-wide view."""
    return incident.created_by == user.id or has_permission(
        user.role, Permissions.VIEW_ALL_COMPANY_INCIDENTS
    )


async def load_incident_for_user(
    repository: IncidentRepository, incident_id: UUID, user: CurrentUser
) -> Incident:
    """Fetch an incident the caller is allowed to see.

    Raises:
        NotFoundError: If the incident does not exist
        PermissionDeniedError: If it belongs to another company, or to another
            user and the caller lacks company-wide view
    """
    incident = await repository.get_by_id(incident_id)
    if not incident:
        raise NotFoundError("Incident not found")
    if incident.company_id != user.company_id:
        raise PermissionDeniedError("Access denied: incident belongs to different company")
    if not can_view_incident(incident, user):
        raise PermissionDeniedError("Access denied: you can only view your own incidents")
    return incident


class IncidentService:
    """Service for incident lifecycle operations."""

    def __init__(self, db_session: AsyncSession):
        """Initialize service with database session.

        Args:
            db_session: SQLAlchemy async session
        """
        self.repository = IncidentRepository(db_session)
        self.participant_repository = ParticipantRepository(db_session)

    async def create_incident(self, data: IncidentCreate, user: CurrentUser) -> IncidentResponse:
        """Open a draft incident in the caller's company.

        Raises:
            ValidationError: If the caller has no company or the participant is not usable
        """
        if not user.company_id:
            raise ValidationError("User must be associated with a company to create incidents")

        if data.participant_id:
            participant = await self.participant_repository.get_by_id(data.participant_id)
            if not participant or participant.company_id != user.company_id:
                raise ValidationError("Participant not found")
            if participant.status == "discharged":
                raise ValidationError("Cannot report incidents for a discharged participant")

        incident = await self.repository.create(
            company_id=user.company_id,
            reporter_name=data.reporter_name.strip(),
            participant_id=data.participant_id,
            participant_name=data.participant_name.strip(),
            event_date_time=data.event_date_time,
            location=data.location.strip(),
            capture_status="draft",
            analysis_status="not_started",
            overall_status="capture_pending",
            created_by=user.id,
        )
        LOGGER.info(
            f"Incident created {incident.id}",
            extra={"company_id": str(user.company_id), "created_by": str(user.id)},
        )
        return IncidentResponse.model_validate(incident)

    async def get_incident(self, incident_id: UUID, user: CurrentUser) -> IncidentResponse:
        incident = await load_incident_for_user(self.repository, incident_id, user)
        return IncidentResponse.model_validate(incident)

    async def list_incidents(
        self, user: CurrentUser, overall_status: Optional[str] = None, limit: int = 100
    ) -> List[IncidentResponse]:
        """List company incidents; callers without company-wide view see only their own."""
        if not user.company_id:
            raise ValidationError("User must be associated with a company to view incidents")

        created_by = None
        if not has_permission(user.role, Permissions.VIEW_ALL_COMPANY_INCIDENTS):
            created_by = user.id

        incidents = await self.repository.list_for_company(
            user.company_id, overall_status=overall_status, created_by=created_by, limit=limit
        )
        return [IncidentResponse.model_validate(i) for i in incidents]

    async def update_status(
        self,
        incident_id: UUID,
        user: CurrentUser,
        capture_status: Optional[str] = None,
        analysis_status: Optional[str] = None,
    ) -> IncidentResponse:
        """Update capture and/or analysis status and recompute the overall status.

        Raises:
            PermissionDeniedError: If the incident is not visible to the caller, or
                an analysis status is set without the perform_analysis permission
        """
        if analysis_status is not None and not has_permission(user.role, Permissions.PERFORM_ANALYSIS):
            raise PermissionDeniedError("Insufficient permissions: perform_analysis required")

        incident = await load_incident_for_user(self.repository, incident_id, user)

        capture = capture_status or incident.capture_status
        analysis = analysis_status or incident.analysis_status
        overall = compute_overall_status(capture, analysis)

        incident = await self.repository.update_instance(
            incident,
            capture_status=capture,
            analysis_status=analysis,
            overall_status=overall,
        )
        LOGGER.info(
            f"Incident {incident_id} status: capture={capture} analysis={analysis} overall={overall}"
        )
        return IncidentResponse.model_validate(incident)

    async def get_dashboard(self, user: CurrentUser) -> DashboardStats:
        if not user.company_id:
            raise ValidationError("User must be associated with a company to view incidents")

        since = datetime.now(timezone.utc) - RECENT_WINDOW
        counts = await self.repository.get_dashboard_counts(user.company_id, since)
        return DashboardStats(**counts)
