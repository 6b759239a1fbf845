"""Prompt template service.

Prompts are versioned by ``prompt_name``; exactly one version per name is
expected to be active. AI workflows resolve templates through
``resolve_workflow_prompt`` which falls back to the built-in defaults when
the table has no active row.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from supportsignal.core.exceptions import ConflictError, NotFoundError, ValidationError
from supportsignal.prompts.defaults import DEFAULT_PROMPT_TEMPLATES, PROMPT_VARIABLES
from supportsignal.prompts.resolver import analyze_template, resolve_prompt, validate_template_syntax
from supportsignal.repositories.prompt_repository import PromptRepository
from supportsignal.schemas.auth import CurrentUser
from supportsignal.schemas.prompts import PromptCreate, PromptResponse, PromptUpdate
from supportsignal.utils.logging import get_logger

LOGGER = get_logger(__name__)


@dataclass
class ResolvedPrompt:
    """A rendered prompt plus the settings of the template it came from."""

    prompt_name: str
    prompt_version: str
    text: str
    model: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    errors: List[str] = field(default_factory=list)


def next_usage_stats(
    usage_count: Optional[int],
    average_response_time: Optional[float],
    success_rate: Optional[float],
    response_time_ms: float,
    success: bool,
) -> Dict[str, Any]:
    """Fold one more call into the running usage statistics."""
    count = usage_count or 0
    average = average_response_time or 0.0
    rate = success_rate if success_rate is not None else 1.0

    new_count = count + 1
    successes = round(rate * count) + (1 if success else 0)
    return {
        "usage_count": new_count,
        "average_response_time": (average * count + response_time_ms) / new_count,
        "success_rate": successes / new_count,
    }


class PromptService:
    """Service for prompt template management and resolution."""

    def __init__(self, db_session: AsyncSession):
        """Initialize service with database session.

        Args:
            db_session: SQLAlchemy async session
        """
        self.repository = PromptRepository(db_session)

    async def list_prompts(self, active_only: bool = False, group_id: Optional[UUID] = None) -> List[PromptResponse]:
        prompts = await self.repository.list_prompts(active_only=active_only, group_id=group_id)
        return [PromptResponse.model_validate(p) for p in prompts]

    async def get_prompt(self, prompt_id: UUID) -> PromptResponse:
        prompt = await self.repository.get_by_id(prompt_id)
        if not prompt:
            raise NotFoundError("Prompt not found")
        return PromptResponse.model_validate(prompt)

    async def get_active_prompt(self, prompt_name: str) -> PromptResponse:
        prompt = await self.repository.get_active_by_name(prompt_name)
        if not prompt:
            raise NotFoundError(f"No active prompt found for: {prompt_name}")
        return PromptResponse.model_validate(prompt)

    async def create_prompt(
        self, data: PromptCreate, user: Optional[CurrentUser] = None, replaces_previous: bool = True
    ) -> PromptResponse:
        """Create a new prompt version.

        Args:
            data: Prompt fields
            user: Creating user, recorded as ``created_by``
            replaces_previous: Deactivate the current active version and activate this one

        Raises:
            ValidationError: If the template has syntax errors
            ConflictError: If the name/version pair already exists
        """
        errors = validate_template_syntax(data.prompt_template)
        if errors:
            raise ValidationError(f"Invalid prompt template: {'; '.join(errors)}")

        existing = await self.repository.get_all(
            filters={"prompt_name": data.prompt_name, "prompt_version": data.prompt_version}
        )
        if existing:
            raise ConflictError(f"Prompt version already exists: {data.prompt_name} v{data.prompt_version}")

        if replaces_previous:
            current = await self.repository.get_active_by_name(data.prompt_name)
            if current:
                await self.repository.update_instance(current, is_active=False)

        prompt = await self.repository.create(
            **data.model_dump(),
            is_active=replaces_previous,
            usage_count=0,
            created_by=user.id if user else None,
        )
        LOGGER.info(f"Created prompt {prompt.prompt_name} v{prompt.prompt_version}")
        return PromptResponse.model_validate(prompt)

    async def update_prompt(self, prompt_id: UUID, data: PromptUpdate) -> PromptResponse:
        prompt = await self.repository.get_by_id(prompt_id)
        if not prompt:
            raise NotFoundError("Prompt not found")

        changes = data.model_dump(exclude_unset=True)
        if changes.get("prompt_template") is not None:
            errors = validate_template_syntax(changes["prompt_template"])
            if errors:
                raise ValidationError(f"Invalid prompt template: {'; '.join(errors)}")

        prompt = await self.repository.update_instance(prompt, **changes)
        return PromptResponse.model_validate(prompt)

    async def activate_prompt(self, prompt_id: UUID) -> PromptResponse:
        """Make a version the active one for its name."""
        prompt = await self.repository.get_by_id(prompt_id)
        if not prompt:
            raise NotFoundError("Prompt not found")
        if prompt.is_active:
            return PromptResponse.model_validate(prompt)

        current = await self.repository.get_active_by_name(prompt.prompt_name)
        if current:
            await self.repository.update_instance(current, is_active=False)
        prompt = await self.repository.update_instance(prompt, is_active=True)
        LOGGER.info(f"Activated prompt {prompt.prompt_name} v{prompt.prompt_version}")
        return PromptResponse.model_validate(prompt)

    async def seed_default_prompts(self, user: Optional[CurrentUser] = None) -> List[str]:
        """Insert any default template that has no active version.

        Returns:
            Names of the prompts that were created
        """
        created = []
        for template in DEFAULT_PROMPT_TEMPLATES:
            if await self.repository.get_active_by_name(template["prompt_name"]):
                continue
            await self.repository.create(
                **template,
                prompt_version="v1.0.0",
                is_active=True,
                usage_count=0,
                created_by=user.id if user else None,
            )
            created.append(template["prompt_name"])

        LOGGER.info(f"Seeded {len(created)} default prompts", extra={"prompts": created})
        return created

    async def update_usage(self, prompt_name: str, response_time_ms: float, success: bool) -> bool:
        """Record one use of the active version of ``prompt_name``.

        Returns:
            False when there is no active prompt with that name
        """
        prompt = await self.repository.get_active_by_name(prompt_name)
        if not prompt:
            return False

        stats = next_usage_stats(
            prompt.usage_count, prompt.average_response_time, prompt.success_rate, response_time_ms, success
        )
        await self.repository.update_instance(prompt, **stats)
        return True

    def validate_template(self, template: str) -> Dict[str, Any]:
        return analyze_template(template)

    async def resolve_workflow_prompt(
        self, names: Sequence[str], variables: Dict[str, Any], default_name: str
    ) -> ResolvedPrompt:
        """Render the first active prompt among ``names``.

        Args:
            names: Candidate prompt names, most specific first
            variables: Template variables
            default_name: Built-in template used when no candidate is stored

        Returns:
            The rendered prompt
        """
        definitions = PROMPT_VARIABLES.get(default_name, [])

        for name in names:
            prompt = await self.repository.get_active_by_name(name)
            if prompt:
                result = resolve_prompt(prompt.prompt_template, variables, definitions)
                return ResolvedPrompt(
                    prompt_name=prompt.prompt_name,
                    prompt_version=prompt.prompt_version,
                    text=result.resolved_prompt,
                    model=prompt.ai_model,
                    max_tokens=prompt.max_tokens,
                    temperature=prompt.temperature,
                    errors=result.errors,
                )

        default = next(t for t in DEFAULT_PROMPT_TEMPLATES if t["prompt_name"] == default_name)
        LOGGER.warning(f"No stored prompt for {list(names)}; using built-in {default_name}")
        result = resolve_prompt(default["prompt_template"], variables, definitions)
        return ResolvedPrompt(
            prompt_name=default_name,
            prompt_version="default",
            text=result.resolved_prompt,
            max_tokens=default.get("max_tokens"),
            temperature=default.get("temperature"),
            errors=result.errors,
        )
