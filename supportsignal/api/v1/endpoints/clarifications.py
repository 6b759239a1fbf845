"""Clarification question and narrative enhancement endpoints."""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from supportsignal.ai.service import AIService, get_ai_service
from supportsignal.core.auth import get_current_user
from supportsignal.core.database import get_async_session
from supportsignal.core.exceptions import AppError
from supportsignal.schemas.auth import CurrentUser
from supportsignal.schemas.common import ApiResponse
from supportsignal.schemas.incidents import AnswerSubmit, EnhanceRequest, GenerateQuestionsRequest
from supportsignal.services.clarification_service import ClarificationService
from supportsignal.services.enhancement_service import EnhancementService
from supportsignal.utils.logging import get_logger
from supportsignal.utils.responses import app_error_to_http, create_api_response

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_clarification_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)],
    ai_service: Annotated[AIService, Depends(get_ai_service)],
) -> ClarificationService:
    return ClarificationService(db_session, ai_service)


async def get_enhancement_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)],
    ai_service: Annotated[AIService, Depends(get_ai_service)],
) -> EnhancementService:
    return EnhancementService(db_session, ai_service)


@router.post(
    "/{incident_id}/clarifications/questions",
    response_model=ApiResponse,
    summary="Generate clarification questions for a phase",
    operation_id="generate_clarification_questions",
)
async def generate_questions(
    request: Request,
    incident_id: UUID,
    payload: GenerateQuestionsRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    clarification_service: Annotated[ClarificationService, Depends(get_clarification_service)],
) -> ApiResponse:
    """Generate questions from the phase narrative.

    Previously generated questions are returned while the narrative is
    unchanged unless ``force_regenerate`` is set. If the AI is unavailable,
    predefined questions are returned and ``fallback`` is true.
    """
    try:
        result = await clarification_service.generate_questions(
            incident_id, payload.phase, current_user, force_regenerate=payload.force_regenerate
        )
    except AppError as e:
        raise app_error_to_http(e, request) from e

    message = "Cached questions returned" if result.cached else f"Generated {len(result.questions)} questions"
    return create_api_response(data=result, message=message, request=request)


@router.get(
    "/{incident_id}/clarifications/questions",
    response_model=ApiResponse,
    summary="List active clarification questions",
    operation_id="list_clarification_questions",
)
async def list_questions(
    request: Request,
    incident_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    clarification_service: Annotated[ClarificationService, Depends(get_clarification_service)],
    phase: Optional[str] = Query(None),
) -> ApiResponse:
    try:
        questions = await clarification_service.list_questions(incident_id, current_user, phase=phase)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=questions, message=f"Found {len(questions)} questions", request=request)


@router.post(
    "/{incident_id}/clarifications/answers",
    response_model=ApiResponse,
    summary="Submit a clarification answer",
    operation_id="submit_clarification_answer",
)
async def submit_answer(
    request: Request,
    incident_id: UUID,
    payload: AnswerSubmit,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    clarification_service: Annotated[ClarificationService, Depends(get_clarification_service)],
) -> ApiResponse:
    try:
        answer = await clarification_service.submit_answer(incident_id, payload, current_user)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=answer, message="Answer saved", request=request)


@router.get(
    "/{incident_id}/clarifications/answers",
    response_model=ApiResponse,
    summary="List clarification answers",
    operation_id="list_clarification_answers",
)
async def list_answers(
    request: Request,
    incident_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    clarification_service: Annotated[ClarificationService, Depends(get_clarification_service)],
    phase: Optional[str] = Query(None),
) -> ApiResponse:
    try:
        answers = await clarification_service.list_answers(incident_id, current_user, phase=phase)
    except AppError as e:
        raise app_error_to_http(e, request) from e
    return create_api_response(data=answers, message=f"Found {len(answers)} answers", request=request)


@router.post(
    "/{incident_id}/enhancements",
    response_model=ApiResponse,
    summary="Enhance a narrative phase with its clarification answers",
    operation_id="enhance_narrative",
)
async def enhance_narrative(
    request: Request,
    incident_id: UUID,
    payload: EnhanceRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    enhancement_service: Annotated[EnhancementService, Depends(get_enhancement_service)],
) -> ApiResponse:
    try:
        result = await enhancement_service.enhance_phase(incident_id, payload.phase, current_user)
    except AppError as e:
        raise app_error_to_http(e, request) from e

    message = "Narrative enhanced" if result.success else "AI unavailable; basic enhancement applied"
    return create_api_response(data=result, message=message, request=request)
