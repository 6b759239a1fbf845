"""Repository for participant data access operations."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError

from supportsignal.database.models import Participant
from supportsignal.repositories.base_repository import BaseRepository


class ParticipantRepository(BaseRepository[Participant]):
    """Repository for Participant entity operations."""

    model = Participant

    async def get_by_ndis_number(self, company_id: UUID, ndis_number: str) -> Optional[Participant]:
        """Find a participant by NDIS number within one company."""
        try:
            stmt = select(Participant).where(
                Participant.company_id == company_id,
                Participant.ndis_number == ndis_number,
            )
            result = await self.session.execute(stmt)
            return result.scalars().first()
        except SQLAlchemyError as e:
            raise self._fail("retrieving", e) from e

    async def list_for_company(
        self,
        company_id: UUID,
        status: Optional[str] = None,
        support_level: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 200,
    ) -> List[Participant]:
        """List a company's participants, sorted by last then first name.

        Args:
            company_id: Owning company
            status: Optional status filter
            support_level: Optional support level filter
            search: Case-insensitive match on names, NDIS number or phone
            limit: Maximum rows

        Returns:
            Matching participants
        """
        try:
            stmt = select(Participant).where(Participant.company_id == company_id)
            if status:
                stmt = stmt.where(Participant.status == status)
            if support_level:
                stmt = stmt.where(Participant.support_level == support_level)
            if search:
                pattern = f"%{search.strip()}%"
                stmt = stmt.where(or_(
                    Participant.first_name.ilike(pattern),
                    Participant.last_name.ilike(pattern),
                    Participant.ndis_number.ilike(pattern),
                    Participant.contact_phone.ilike(pattern),
                ))

            stmt = stmt.order_by(Participant.last_name, Participant.first_name).limit(limit)
            result = await self.session.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise self._fail("listing", e) from e
