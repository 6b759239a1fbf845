"""Prompt template and prompt group schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PromptCreate(BaseModel):
    prompt_name: str = Field(..., min_length=1, description="Lookup name, e.g. enhance_narrative")
    prompt_version: str = Field(default="v1.0.0")
    prompt_template: str = Field(..., min_length=1, description="Template with {{variable}} placeholders")
    description: Optional[str] = None
    workflow_step: Optional[str] = None
    subsystem: Optional[str] = None
    ai_model: Optional[str] = None
    max_tokens: Optional[int] = Field(None, gt=0)
    temperature: Optional[float] = Field(None, ge=0, le=2)
    group_id: Optional[UUID] = None
    display_order: int = 0


class PromptUpdate(BaseModel):
    prompt_template: Optional[str] = None
    description: Optional[str] = None
    ai_model: Optional[str] = None
    max_tokens: Optional[int] = Field(None, gt=0)
    temperature: Optional[float] = Field(None, ge=0, le=2)
    is_active: Optional[bool] = None


class PromptResponse(BaseModel):
    id: UUID
    prompt_name: str
    prompt_version: str
    prompt_template: str
    description: Optional[str] = None
    workflow_step: Optional[str] = None
    subsystem: Optional[str] = None
    ai_model: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    is_active: bool
    group_id: Optional[UUID] = None
    display_order: int = 0
    usage_count: int = 0
    average_response_time: Optional[float] = None
    success_rate: Optional[float] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TemplateValidationRequest(BaseModel):
    prompt_template: str


class PromptGroupCreate(BaseModel):
    group_name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    display_order: Optional[int] = None
    is_collapsible: bool = True
    default_collapsed: bool = False


class PromptGroupUpdate(BaseModel):
    group_name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    display_order: Optional[int] = None
    is_collapsible: Optional[bool] = None
    default_collapsed: Optional[bool] = None


class PromptGroupResponse(BaseModel):
    id: UUID
    group_name: str
    description: Optional[str] = None
    display_order: int
    is_collapsible: bool
    default_collapsed: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ReorderPromptsRequest(BaseModel):
    prompt_ids: List[UUID]
    new_orders: List[int]

    @model_validator(mode="after")
    def check_lengths(self) -> "ReorderPromptsRequest":
        if len(self.prompt_ids) != len(self.new_orders):
            raise ValueError("prompt_ids and new_orders arrays must have the same length")
        return self


class MovePromptRequest(BaseModel):
    new_group_id: Optional[UUID] = Field(None, description="Target group; null ungroups the prompt")
    display_order: int = 0


__all__ = [
    "MovePromptRequest",
    "PromptCreate",
    "PromptGroupCreate",
    "PromptGroupResponse",
    "PromptGroupUpdate",
    "PromptResponse",
    "PromptUpdate",
    "ReorderPromptsRequest",
    "TemplateValidationRequest",
]
