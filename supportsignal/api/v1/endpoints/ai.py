"""AI provider monitoring, connectivity testing and request logs."""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from supportsignal.ai.service import AIService, get_ai_service
from supportsignal.core.auth import get_current_user, require_permission
from supportsignal.core.database import get_async_session
from supportsignal.core.permissions import Permissions
from supportsignal.schemas.ai import AIRequestLogResponse, ConnectivityTestRequest
from supportsignal.schemas.auth import CurrentUser
from supportsignal.schemas.common import ApiResponse
from supportsignal.services.ai_monitoring_service import AIMonitoringService
from supportsignal.services.ai_request_log_service import AIRequestLogService
from supportsignal.utils.responses import create_api_response

router = APIRouter()

configure_system = require_permission(Permissions.SYSTEM_CONFIGURATION)


async def get_ai_monitoring_service(
    ai_service: Annotated[AIService, Depends(get_ai_service)]
) -> AIMonitoringService:
    return AIMonitoringService(ai_service)


async def get_ai_request_log_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> AIRequestLogService:
    return AIRequestLogService(db_session)


@router.get(
    "/providers",
    response_model=ApiResponse,
    summary="List configured AI providers",
    operation_id="list_ai_providers",
)
async def list_providers(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    monitoring_service: Annotated[AIMonitoringService, Depends(get_ai_monitoring_service)],
) -> ApiResponse:
    overview = monitoring_service.get_provider_overview()
    return create_api_response(
        data=overview, message=f"Found {len(overview.providers)} providers", request=request
    )


@router.get(
    "/health",
    response_model=ApiResponse,
    summary="AI layer health and metrics",
    operation_id="get_ai_health",
)
async def ai_health(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(configure_system)],
    monitoring_service: Annotated[AIMonitoringService, Depends(get_ai_monitoring_service)],
) -> ApiResponse:
    """Provider status plus circuit breaker, rate limiter and cost tracker metrics."""
    summary = monitoring_service.get_health()
    return create_api_response(data=summary, message=f"AI status: {summary.status}", request=request)


@router.post(
    "/test",
    response_model=ApiResponse,
    summary="Probe AI connectivity",
    operation_id="test_ai_connectivity",
)
async def test_connectivity(
    request: Request,
    payload: ConnectivityTestRequest,
    current_user: Annotated[CurrentUser, Depends(configure_system)],
    monitoring_service: Annotated[AIMonitoringService, Depends(get_ai_monitoring_service)],
) -> ApiResponse:
    """Send a tiny prompt to a model. A failed probe is reported with ``status: false``."""
    result = await monitoring_service.test_connectivity(
        model=payload.model,
        prompt=payload.prompt,
        use_retry_client=payload.use_retry_client,
    )
    message = "Connectivity test passed" if result.success else f"Connectivity test failed: {result.error}"
    return create_api_response(data=result, message=message, status=result.success, request=request)


@router.get(
    "/logs",
    response_model=ApiResponse,
    summary="Recent AI request logs",
    operation_id="list_ai_request_logs",
)
async def list_request_logs(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(configure_system)],
    log_service: Annotated[AIRequestLogService, Depends(get_ai_request_log_service)],
    incident_id: Optional[UUID] = Query(None),
    limit: int = Query(50, ge=1, le=500),
) -> ApiResponse:
    logs = await log_service.list_recent(incident_id=incident_id, limit=limit)
    return create_api_response(
        data=[AIRequestLogResponse.model_validate(log) for log in logs],
        message=f"Found {len(logs)} request logs",
        request=request,
    )
