"""Company (tenant) management."""

from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from supportsignal.core.exceptions import NotFoundError
from supportsignal.repositories.company_repository import CompanyRepository
from supportsignal.schemas.auth import CurrentUser
from supportsignal.schemas.companies import CompanyCreate, CompanyResponse
from supportsignal.utils.logging import get_logger

LOGGER = get_logger(__name__)


class CompanyService:
    """Service for company operations."""

    def __init__(self, db_session: AsyncSession):
        self.repository = CompanyRepository(db_session)

    async def create_company(self, data: CompanyCreate, user: CurrentUser) -> CompanyResponse:
        company = await self.repository.create(
            name=data.name.strip(),
            contact_email=str(data.contact_email).lower(),
            status=data.status,
            created_by=user.id,
        )
        LOGGER.info(f"Created company {company.id}", extra={"company_name": company.name})
        return CompanyResponse.model_validate(company)

    async def list_companies(self) -> List[CompanyResponse]:
        companies = await self.repository.list_ordered()
        return [CompanyResponse.model_validate(c) for c in companies]

    async def get_company(self, company_id: UUID) -> CompanyResponse:
        company = await self.repository.get_by_id(company_id)
        if not company:
            raise NotFoundError("Company not found")
        return CompanyResponse.model_validate(company)

    async def update_status(self, company_id: UUID, status: str) -> CompanyResponse:
        company = await self.repository.get_by_id(company_id)
        if not company:
            raise NotFoundError("Company not found")

        company = await self.repository.update_instance(company, status=status)
        LOGGER.info(f"Company {company_id} status set to {status}")
        return CompanyResponse.model_validate(company)
