"""Participant service: company-scoped NDIS participant records."""

import re
from datetime import date
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from supportsignal.core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from supportsignal.database.models import Participant
from supportsignal.repositories.participant_repository import ParticipantRepository
from supportsignal.schemas.auth import CurrentUser
from supportsignal.schemas.participants import (
    ParticipantCreate,
    ParticipantResponse,
    ParticipantUpdate,
)
from supportsignal.utils.logging import get_logger

LOGGER = get_logger(__name__)

NDIS_NUMBER_REGEX = re.compile(r"^\d{9}$")
PHONE_REGEX = re.compile(r"^[\d\s\-\+\(\)]+$")
MAX_CARE_NOTES = 500

STATUS_MESSAGES = {
    "active": "Participant has been activated and is now available for incident reporting",
    "inactive": "Participant has been set to inactive status",
    "discharged": "Participant has been discharged and is no longer available for new incident reports",
}
STATUS_UNCHANGED_MESSAGE = "Participant status is already set to the requested value"
DUPLICATE_NDIS_MESSAGE = "A participant with this NDIS number already exists in your company"


def _validate_name(value: str, label: str) -> str:
    value = value.strip()
    if len(value) < 2 or len(value) > 50:
        raise ValidationError(f"{label} must be between 2 and 50 characters")
    return value


def _validate_ndis_number(value: str) -> str:
    if not NDIS_NUMBER_REGEX.match(value):
        raise ValidationError("NDIS number must be exactly 9 digits")
    return value


def parse_date_of_birth(value: str, today: Optional[date] = None) -> date:
    """Parse an ISO date of birth, rejecting invalid and future dates."""
    try:
        dob = date.fromisoformat(value.strip()[:10])
    except ValueError as e:
        raise ValidationError("Invalid date of birth or future date not allowed", original_error=e) from e
    if dob > (today or date.today()):
        raise ValidationError("Invalid date of birth or future date not allowed")
    return dob


def _validate_phone(value: Optional[str]) -> Optional[str]:
    if value and not PHONE_REGEX.match(value):
        raise ValidationError("Invalid phone number format")
    return value.strip() if value else value


def _validate_care_notes(value: Optional[str]) -> Optional[str]:
    if value and len(value) > MAX_CARE_NOTES:
        raise ValidationError(f"Care notes must not exceed {MAX_CARE_NOTES} characters")
    return value.strip() if value else value


class ParticipantService:
    """Service for participant CRUD with company isolation."""

    def __init__(self, db_session: AsyncSession):
        """Initialize service with database session.

        Args:
            db_session: SQLAlchemy async session
        """
        self.repository = ParticipantRepository(db_session)

    @staticmethod
    def _require_company(user: CurrentUser, action: str) -> UUID:
        if not user.company_id:
            raise ValidationError(f"User must be associated with a company to {action} participants")
        return user.company_id

    async def _get_owned(self, participant_id: UUID, company_id: UUID) -> Participant:
        participant = await self.repository.get_by_id(participant_id)
        if not participant:
            raise NotFoundError("Participant not found")
        if participant.company_id != company_id:
            raise PermissionDeniedError("Access denied: Participant belongs to a different company")
        return participant

    async def create_participant(self, data: ParticipantCreate, user: CurrentUser) -> ParticipantResponse:
        """Create a participant in the caller's company.

        Args:
            data: Participant details
            user: The authenticated caller

        Returns:
            The created participant

        Raises:
            ValidationError: If the caller has no company or a field is invalid
            ConflictError: If the NDIS number is already used in the company
        """
        company_id = self._require_company(user, "create")

        first_name = _validate_name(data.first_name, "First name")
        last_name = _validate_name(data.last_name, "Last name")
        ndis_number = _validate_ndis_number(data.ndis_number)
        date_of_birth = parse_date_of_birth(data.date_of_birth)
        contact_phone = _validate_phone(data.contact_phone)
        care_notes = _validate_care_notes(data.care_notes)

        if await self.repository.get_by_ndis_number(company_id, ndis_number):
            raise ConflictError(DUPLICATE_NDIS_MESSAGE)

        participant = await self.repository.create(
            company_id=company_id,
            first_name=first_name,
            last_name=last_name,
            date_of_birth=date_of_birth,
            ndis_number=ndis_number,
            contact_phone=contact_phone,
            emergency_contact=data.emergency_contact.strip() if data.emergency_contact else None,
            support_level=data.support_level,
            care_notes=care_notes,
            status=data.status,
            created_by=user.id,
            updated_by=user.id,
        )
        LOGGER.info(
            f"Participant created {participant.id}",
            extra={"company_id": str(company_id), "created_by": str(user.id)},
        )
        return ParticipantResponse.model_validate(participant)

    async def list_participants(
        self,
        user: CurrentUser,
        status: Optional[str] = None,
        support_level: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 100,
    ) -> List[ParticipantResponse]:
        """List the caller's company participants; ``all`` disables a filter."""
        company_id = self._require_company(user, "view")
        participants = await self.repository.list_for_company(
            company_id,
            status=None if status in (None, "all") else status,
            support_level=None if support_level in (None, "all") else support_level,
            search=search.strip() if search and search.strip() else None,
            limit=limit,
        )
        return [ParticipantResponse.model_validate(p) for p in participants]

    async def get_participant(self, participant_id: UUID, user: CurrentUser) -> ParticipantResponse:
        company_id = self._require_company(user, "view")
        participant = await self._get_owned(participant_id, company_id)
        return ParticipantResponse.model_validate(participant)

    async def update_participant(
        self, participant_id: UUID, data: ParticipantUpdate, user: CurrentUser
    ) -> ParticipantResponse:
        """Apply validated changes for the fields present in ``data``."""
        company_id = self._require_company(user, "update")
        participant = await self._get_owned(participant_id, company_id)

        changes: Dict[str, Any] = {}
        provided = data.model_dump(exclude_unset=True)

        if provided.get("first_name") is not None:
            changes["first_name"] = _validate_name(provided["first_name"], "First name")
        if provided.get("last_name") is not None:
            changes["last_name"] = _validate_name(provided["last_name"], "Last name")
        if provided.get("date_of_birth") is not None:
            changes["date_of_birth"] = parse_date_of_birth(provided["date_of_birth"])
        if provided.get("ndis_number") is not None:
            ndis_number = _validate_ndis_number(provided["ndis_number"])
            if ndis_number != participant.ndis_number:
                existing = await self.repository.get_by_ndis_number(company_id, ndis_number)
                if existing and existing.id != participant.id:
                    raise ConflictError(DUPLICATE_NDIS_MESSAGE)
            changes["ndis_number"] = ndis_number
        if "contact_phone" in provided:
            changes["contact_phone"] = _validate_phone(provided["contact_phone"])
        if "emergency_contact" in provided:
            value = provided["emergency_contact"]
            changes["emergency_contact"] = value.strip() if value else value
        if provided.get("support_level") is not None:
            changes["support_level"] = provided["support_level"]
        if "care_notes" in provided:
            changes["care_notes"] = _validate_care_notes(provided["care_notes"])

        participant = await self.repository.update_instance(participant, updated_by=user.id, **changes)
        LOGGER.info(
            f"Participant updated {participant_id}",
            extra={"fields": sorted(changes), "updated_by": str(user.id)},
        )
        return ParticipantResponse.model_validate(participant)

    async def update_status(
        self,
        participant_id: UUID,
        status: str,
        user: CurrentUser,
        reason: Optional[str] = None,
    ) -> Tuple[ParticipantResponse, str]:
        """Change participant status.

        Returns:
            The participant and a status-specific message. Setting the current
            status again is a no-op that still succeeds.

        Raises:
            ValidationError: If discharging without a reason
        """
        company_id = self._require_company(user, "update")
        participant = await self._get_owned(participant_id, company_id)

        if participant.status == status:
            return ParticipantResponse.model_validate(participant), STATUS_UNCHANGED_MESSAGE

        if status == "discharged" and not (reason and reason.strip()):
            raise ValidationError("Reason is required when discharging a participant")

        previous = participant.status
        participant = await self.repository.update_instance(participant, status=status, updated_by=user.id)
        LOGGER.info(
            f"Participant status changed {participant_id}: {previous} -> {status}",
            extra={"reason": reason, "updated_by": str(user.id)},
        )
        message = STATUS_MESSAGES.get(status, "Participant status has been updated successfully")
        return ParticipantResponse.model_validate(participant), message
