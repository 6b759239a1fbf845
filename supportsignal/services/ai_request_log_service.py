"""Audit log of dispatched AI requests."""

from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from supportsignal.ai.base import AIResponse
from supportsignal.core.exceptions import DatabaseError
from supportsignal.database.models import AIRequestLog
from supportsignal.repositories.ai_request_log_repository import AIRequestLogRepository
from supportsignal.utils.logging import get_logger

LOGGER = get_logger(__name__)


class AIRequestLogService:
    """Service for recording and reading AI request audit rows."""

    def __init__(self, db_session: AsyncSession):
        self.repository = AIRequestLogRepository(db_session)

    async def log_request(
        self,
        operation: str,
        response: AIResponse,
        prompt_template: Optional[str] = None,
        input_data: Optional[Dict[str, Any]] = None,
        output_data: Optional[Dict[str, Any]] = None,
        user_id: Optional[UUID] = None,
        incident_id: Optional[UUID] = None,
    ) -> Optional[AIRequestLog]:
        """Persist one AI call.

        Audit failures are logged and swallowed so they never fail the
        user-facing operation.
        """
        try:
            return await self.repository.create(
                correlation_id=response.correlation_id,
                operation=operation,
                model=response.model or "unknown",
                prompt_template=prompt_template,
                input_data=input_data,
                output_data=output_data,
                processing_time_ms=response.processing_time_ms,
                tokens_used=response.tokens_used,
                cost_usd=Decimal(str(response.cost)) if response.cost is not None else None,
                success=response.success,
                error_message=response.error,
                user_id=user_id,
                incident_id=incident_id,
            )
        except DatabaseError as e:
            LOGGER.error(
                f"Failed to record AI request log: {e.message}",
                extra={"correlation_id": response.correlation_id, "operation": operation},
            )
            return None

    async def list_recent(self, incident_id: Optional[UUID] = None, limit: int = 50) -> List[AIRequestLog]:
        return await self.repository.list_recent(incident_id=incident_id, limit=limit)
