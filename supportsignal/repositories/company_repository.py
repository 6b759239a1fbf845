"""Repository for company data access operations."""

from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from supportsignal.database.models import Company
from supportsignal.repositories.base_repository import BaseRepository


class CompanyRepository(BaseRepository[Company]):
    """Repository for Company entity operations."""

    model = Company

    async def list_ordered(self) -> List[Company]:
        """All companies ordered by name."""
        try:
            result = await self.session.execute(select(Company).order_by(Company.name))
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise self._fail("listing", e) from e
