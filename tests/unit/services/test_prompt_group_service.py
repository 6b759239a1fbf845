"""Tests for PromptGroupService."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from supportsignal.core.exceptions import ConflictError, NotFoundError, ValidationError
from supportsignal.schemas.prompts import PromptGroupCreate, PromptGroupUpdate
from supportsignal.services.prompt_group_service import PromptGroupService


def _group(**fields):
    values = dict(
        id=uuid4(),
        group_name="Incident Capture",
        description=None,
        display_order=1,
        is_collapsible=True,
        default_collapsed=False,
        created_at=None,
    )
    values.update(fields)
    return SimpleNamespace(**values)


@pytest.fixture
def service():
    service = PromptGroupService(MagicMock())
    service.repository = AsyncMock()
    service.prompt_repository = AsyncMock()
    service.repository.get_by_name.return_value = None
    service.repository.create.side_effect = lambda **fields: _group(**fields)
    return service


class TestPromptGroupService:
    """Tests for prompt group operations."""

    @pytest.mark.asyncio
    async def test_create_appends_after_last_group(self, service):
        service.repository.max_display_order.return_value = 4

        group = await service.create_group(PromptGroupCreate(group_name=" Analysis "))

        assert group.group_name == "Analysis"
        assert group.display_order == 5

    @pytest.mark.asyncio
    async def test_create_keeps_explicit_order(self, service):
        group = await service.create_group(PromptGroupCreate(group_name="Analysis", display_order=2))

        assert group.display_order == 2
        service.repository.max_display_order.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_rejects_duplicate_name(self, service):
        service.repository.get_by_name.return_value = _group()

        with pytest.raises(ConflictError):
            await service.create_group(PromptGroupCreate(group_name="Incident Capture"))

    @pytest.mark.asyncio
    async def test_rename_to_existing_name_conflicts(self, service):
        group = _group(group_name="Analysis")
        service.repository.get_by_id.return_value = group
        service.repository.get_by_name.return_value = _group(group_name="Capture")

        with pytest.raises(ConflictError):
            await service.update_group(group.id, PromptGroupUpdate(group_name="Capture"))

    @pytest.mark.asyncio
    async def test_delete_refuses_group_with_active_prompts(self, service):
        service.prompt_repository.count_active_in_group.return_value = 2

        with pytest.raises(ValidationError, match="2 active prompts"):
            await service.delete_group(uuid4())

        service.repository.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_missing_group(self, service):
        service.prompt_repository.count_active_in_group.return_value = 0
        service.repository.delete.return_value = False

        with pytest.raises(NotFoundError):
            await service.delete_group(uuid4())

    @pytest.mark.asyncio
    async def test_reorder_requires_matching_lengths(self, service):
        with pytest.raises(ValidationError, match="same length"):
            await service.reorder_prompts([uuid4(), uuid4()], [1])

    @pytest.mark.asyncio
    async def test_reorder_counts_updated_prompts(self, service):
        service.prompt_repository.update.side_effect = [SimpleNamespace(), None, SimpleNamespace()]

        updated = await service.reorder_prompts([uuid4(), uuid4(), uuid4()], [1, 2, 3])

        assert updated == 2

    @pytest.mark.asyncio
    async def test_move_to_unknown_group(self, service):
        service.repository.get_by_id.return_value = None

        with pytest.raises(NotFoundError, match="group"):
            await service.move_prompt(uuid4(), uuid4(), 1)
