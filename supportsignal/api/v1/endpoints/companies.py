"""Company (tenant) endpoints; restricted to cross-company administrators."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from supportsignal.core.auth import require_permission, require_role
from supportsignal.core.database import get_async_session
from supportsignal.core.exceptions import AppError
from supportsignal.core.permissions import Permissions, Roles
from supportsignal.schemas.auth import CurrentUser
from supportsignal.schemas.common import ApiResponse
from supportsignal.schemas.companies import CompanyCreate, CompanyStatusUpdate
from supportsignal.services.company_service import CompanyService
from supportsignal.utils.responses import app_error_to_http, create_api_response

router = APIRouter()

manage_companies = require_permission(Permissions.MANAGE_ALL_COMPANIES)


async def get_company_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> CompanyService:
    return CompanyService(db_session)


@router.post(
    "/",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a company",
    operation_id="create_company",
)
async def create_company(
    request: Request,
    payload: CompanyCreate,
    current_user: Annotated[CurrentUser, Depends(require_role(Roles.SYSTEM_ADMIN))],
    company_service: Annotated[CompanyService, Depends(get_company_service)],
) -> ApiResponse:
    company = await company_service.create_company(payload, current_user)
    return create_api_response(data=company, message="Company created", request=request)


@router.get("/", response_model=ApiResponse, summary="List companies", operation_id="list_companies")
async def list_companies(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(manage_companies)],
    company_service: Annotated[CompanyService, Depends(get_company_service)],
) -> ApiResponse:
    companies = await company_service.list_companies()
    return create_api_response(data=companies, message=f"Found {len(companies)} companies", request=request)


@router.get("/{company_id}", response_model=ApiResponse, summary="Get a company", operation_id="get_company")
async def get_company(
    request: Request,
    company_id: UUID,
    current_user: Annotated[CurrentUser, Depends(manage_companies)],
    company_service: Annotated[CompanyService, Depends(get_company_service)],
) -> ApiResponse:
    try:
        company = await company_service.get_company(company_id)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=company, message="Company retrieved", request=request)


@router.patch(
    "/{company_id}/status",
    response_model=ApiResponse,
    summary="Change company status",
    operation_id="update_company_status",
)
async def update_company_status(
    request: Request,
    company_id: UUID,
    payload: CompanyStatusUpdate,
    current_user: Annotated[CurrentUser, Depends(require_role(Roles.SYSTEM_ADMIN))],
    company_service: Annotated[CompanyService, Depends(get_company_service)],
) -> ApiResponse:
    try:
        company = await company_service.update_status(company_id, payload.status)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=company, message="Company status updated", request=request)
