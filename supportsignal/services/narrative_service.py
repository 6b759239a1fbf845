"""Narrative service: the four-phase incident narrative."""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from supportsignal.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from supportsignal.core.permissions import Permissions, has_permission
from supportsignal.database.models import IncidentNarrative
from supportsignal.repositories.incident_repository import IncidentRepository, NarrativeRepository
from supportsignal.schemas.auth import CurrentUser
from supportsignal.schemas.incidents import NARRATIVE_PHASES, NarrativeCreate, NarrativeResponse, NarrativeUpdate
from supportsignal.services.incident_service import load_incident_for_user
from supportsignal.utils.logging import get_logger

LOGGER = get_logger(__name__)

PHASE_LABELS = {
    "before_event": "Before Event",
    "during_event": "During Event",
    "end_event": "End Event",
    "post_event": "Post Event",
}


def build_consolidated_narrative(narrative: IncidentNarrative) -> str:
    """Join the non-empty phases as ``**Label**: text`` sections."""
    sections = [
        f"**{PHASE_LABELS[phase]}**: {getattr(narrative, phase)}"
        for phase in NARRATIVE_PHASES
        if getattr(narrative, phase)
    ]
    return "\n\n".join(sections)


class NarrativeService:
    """Service for narrative create, update and retrieval."""

    def __init__(self, db_session: AsyncSession):
        self.repository = NarrativeRepository(db_session)
        self.incident_repository = IncidentRepository(db_session)

    async def create_narrative(
        self, incident_id: UUID, data: NarrativeCreate, user: CurrentUser
    ) -> NarrativeResponse:
        """Create the narrative for an incident, or return the existing one."""
        await load_incident_for_user(self.incident_repository, incident_id, user)

        existing = await self.repository.get_by_incident(incident_id)
        if existing:
            return NarrativeResponse.model_validate(existing)

        narrative = await self.repository.create(incident_id=incident_id, version=1, **data.model_dump())
        LOGGER.info(f"Narrative created for incident {incident_id}")
        return NarrativeResponse.model_validate(narrative)

    async def update_narrative(
        self, incident_id: UUID, data: NarrativeUpdate, user: CurrentUser
    ) -> NarrativeResponse:
        """Update the provided phases and bump the version.

        Raises:
            ValidationError: If no phase is provided or capture is completed
            PermissionDeniedError: If the caller may not edit this incident
            NotFoundError: If the narrative has not been created yet
        """
        changes = data.model_dump(exclude_none=True)
        if not changes:
            raise ValidationError("At least one narrative phase must be provided")

        incident = await load_incident_for_user(self.incident_repository, incident_id, user)
        owns_incident = incident.created_by == user.id and has_permission(
            user.role,
            Permissions.EDIT_OWN_INCIDENT_CAPTURE,
            user_id=user.id,
            resource_owner_id=incident.created_by,
        )
        if not owns_incident and not has_permission(user.role, Permissions.VIEW_ALL_COMPANY_INCIDENTS):
            raise PermissionDeniedError("Access denied: you can only edit your own incidents")
        if incident.capture_status == "completed":
            raise ValidationError("Cannot edit narrative: capture phase is completed")

        narrative = await self.repository.get_by_incident(incident_id)
        if not narrative:
            raise NotFoundError("Narrative not found. Create narrative first.")

        version = narrative.version + 1
        narrative = await self.repository.update_instance(
            narrative, version=version, consolidated_narrative=None, **changes
        )
        LOGGER.info(
            f"Narrative updated for incident {incident_id}",
            extra={"version": version, "fields": sorted(changes), "user_id": str(user.id)},
        )
        return NarrativeResponse.model_validate(narrative)

    async def get_narrative(self, incident_id: UUID, user: CurrentUser) -> Optional[NarrativeResponse]:
        """Return the narrative with its consolidated text filled in."""
        await load_incident_for_user(self.incident_repository, incident_id, user)

        narrative = await self.repository.get_by_incident(incident_id)
        if not narrative:
            return None

        if not narrative.consolidated_narrative:
            consolidated = build_consolidated_narrative(narrative)
            if consolidated:
                narrative = await self.repository.update_instance(
                    narrative, consolidated_narrative=consolidated
                )
        return NarrativeResponse.model_validate(narrative)
