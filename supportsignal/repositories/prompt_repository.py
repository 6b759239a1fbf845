"""Repositories for prompt templates and prompt groups."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from supportsignal.database.models import AIPrompt, PromptGroup
from supportsignal.repositories.base_repository import BaseRepository


class PromptRepository(BaseRepository[AIPrompt]):
    """Repository for AIPrompt entity operations."""

    model = AIPrompt

    async def get_active_by_name(self, prompt_name: str, subsystem: Optional[str] = None) -> Optional[AIPrompt]:
        """Newest active prompt with the given name."""
        try:
            stmt = select(AIPrompt).where(
                AIPrompt.prompt_name == prompt_name,
                AIPrompt.is_active.is_(True),
            )
            if subsystem:
                stmt = stmt.where(AIPrompt.subsystem == subsystem)
            stmt = stmt.order_by(AIPrompt.created_at.desc()).limit(1)
            result = await self.session.execute(stmt)
            return result.scalars().first()
        except SQLAlchemyError as e:
            raise self._fail("retrieving", e) from e

    async def list_prompts(self, active_only: bool = False, group_id: Optional[UUID] = None) -> List[AIPrompt]:
        try:
            stmt = select(AIPrompt)
            if active_only:
                stmt = stmt.where(AIPrompt.is_active.is_(True))
            if group_id:
                stmt = stmt.where(AIPrompt.group_id == group_id)
            stmt = stmt.order_by(AIPrompt.display_order, AIPrompt.prompt_name)
            result = await self.session.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise self._fail("listing", e) from e

    async def count_active_in_group(self, group_id: UUID) -> int:
        try:
            stmt = select(func.count()).select_from(AIPrompt).where(
                AIPrompt.group_id == group_id,
                AIPrompt.is_active.is_(True),
            )
            result = await self.session.execute(stmt)
            return result.scalar_one()
        except SQLAlchemyError as e:
            raise self._fail("counting", e) from e


class PromptGroupRepository(BaseRepository[PromptGroup]):
    """Repository for PromptGroup entity operations."""

    model = PromptGroup

    async def list_ordered(self) -> List[PromptGroup]:
        try:
            result = await self.session.execute(
                select(PromptGroup).order_by(PromptGroup.display_order, PromptGroup.group_name)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise self._fail("listing", e) from e

    async def get_by_name(self, group_name: str) -> Optional[PromptGroup]:
        try:
            result = await self.session.execute(
                select(PromptGroup).where(PromptGroup.group_name == group_name)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._fail("retrieving", e) from e

    async def max_display_order(self) -> int:
        try:
            result = await self.session.execute(select(func.max(PromptGroup.display_order)))
            return result.scalar_one() or 0
        except SQLAlchemyError as e:
            raise self._fail("aggregating", e) from e
