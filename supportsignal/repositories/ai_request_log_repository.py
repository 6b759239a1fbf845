"""Repository for AI request audit rows."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from supportsignal.database.models import AIRequestLog
from supportsignal.repositories.base_repository import BaseRepository


class AIRequestLogRepository(BaseRepository[AIRequestLog]):
    """Repository for AIRequestLog entity operations."""

    model = AIRequestLog

    async def list_recent(self, incident_id: Optional[UUID] = None, limit: int = 50) -> List[AIRequestLog]:
        try:
            stmt = select(AIRequestLog)
            if incident_id:
                stmt = stmt.where(AIRequestLog.incident_id == incident_id)
            stmt = stmt.order_by(AIRequestLog.created_at.desc()).limit(limit)
            result = await self.session.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise self._fail("listing", e) from e
