"""Prompt group service: grouping and ordering prompts for the admin console."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from supportsignal.core.exceptions import ConflictError, NotFoundError, ValidationError
from supportsignal.repositories.prompt_repository import PromptGroupRepository, PromptRepository
from supportsignal.schemas.prompts import PromptGroupCreate, PromptGroupResponse, PromptGroupUpdate, PromptResponse
from supportsignal.utils.logging import get_logger

LOGGER = get_logger(__name__)


class PromptGroupService:
    """Service for prompt group operations."""

    def __init__(self, db_session: AsyncSession):
        self.repository = PromptGroupRepository(db_session)
        self.prompt_repository = PromptRepository(db_session)

    async def create_group(self, data: PromptGroupCreate) -> PromptGroupResponse:
        """Create a group; without an explicit order it is appended at the end."""
        if await self.repository.get_by_name(data.group_name):
            raise ConflictError(f"Prompt group already exists: {data.group_name}")

        display_order = data.display_order
        if display_order is None:
            display_order = await self.repository.max_display_order() + 1

        group = await self.repository.create(
            group_name=data.group_name.strip(),
            description=data.description,
            display_order=display_order,
            is_collapsible=data.is_collapsible,
            default_collapsed=data.default_collapsed,
        )
        LOGGER.info(f"Created prompt group {group.group_name}", extra={"display_order": display_order})
        return PromptGroupResponse.model_validate(group)

    async def update_group(self, group_id: UUID, data: PromptGroupUpdate) -> PromptGroupResponse:
        group = await self.repository.get_by_id(group_id)
        if not group:
            raise NotFoundError("Prompt group not found")

        changes = data.model_dump(exclude_unset=True)
        new_name = changes.get("group_name")
        if new_name and new_name != group.group_name:
            existing = await self.repository.get_by_name(new_name)
            if existing and existing.id != group.id:
                raise ConflictError(f"Prompt group already exists: {new_name}")

        group = await self.repository.update_instance(group, **changes)
        return PromptGroupResponse.model_validate(group)

    async def list_groups(self) -> List[PromptGroupResponse]:
        groups = await self.repository.list_ordered()
        return [PromptGroupResponse.model_validate(g) for g in groups]

    async def get_group(self, group_id: UUID) -> PromptGroupResponse:
        group = await self.repository.get_by_id(group_id)
        if not group:
            raise NotFoundError("Prompt group not found")
        return PromptGroupResponse.model_validate(group)

    async def delete_group(self, group_id: UUID) -> bool:
        """Delete a group that has no active prompts assigned.

        Raises:
            ValidationError: If active prompts still reference the group
            NotFoundError: If the group does not exist
        """
        active = await self.prompt_repository.count_active_in_group(group_id)
        if active > 0:
            raise ValidationError(
                f"Cannot delete group: {active} active prompts are assigned to this group. "
                f"Please reassign or deactivate these prompts first."
            )

        if not await self.repository.delete(group_id):
            raise NotFoundError("Prompt group not found")
        LOGGER.info(f"Deleted prompt group {group_id}")
        return True

    async def reorder_prompts(self, prompt_ids: List[UUID], new_orders: List[int]) -> int:
        """Bulk-update prompt display order; returns the number of prompts updated."""
        if len(prompt_ids) != len(new_orders):
            raise ValidationError("prompt_ids and new_orders arrays must have the same length")

        updated = 0
        for prompt_id, order in zip(prompt_ids, new_orders):
            if await self.prompt_repository.update(prompt_id, display_order=order):
                updated += 1
        return updated

    async def move_prompt(
        self, prompt_id: UUID, new_group_id: Optional[UUID], display_order: int
    ) -> PromptResponse:
        """Assign a prompt to a group (or ungroup it with ``None``)."""
        if new_group_id is not None and not await self.repository.get_by_id(new_group_id):
            raise NotFoundError("Prompt group not found")

        prompt = await self.prompt_repository.update(
            prompt_id, group_id=new_group_id, display_order=display_order
        )
        if not prompt:
            raise NotFoundError("Prompt not found")
        return PromptResponse.model_validate(prompt)
