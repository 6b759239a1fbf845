"""Incident, narrative and clarification schemas."""

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

NarrativePhase = Literal["before_event", "during_event", "end_event", "post_event"]
CaptureStatus = Literal["draft", "in_progress", "completed"]
AnalysisStatus = Literal["not_started", "in_progress", "completed"]

NARRATIVE_PHASES: List[str] = ["before_event", "during_event", "end_event", "post_event"]


class IncidentCreate(BaseModel):
    reporter_name: str = Field(..., min_length=1, description="Name of the reporting staff member")
    participant_id: Optional[UUID] = Field(None, description="Linked participant record")
    participant_name: str = Field(..., min_length=1, description="Participant name as reported")
    event_date_time: str = Field(..., min_length=1, description="When the incident occurred")
    location: str = Field(..., min_length=1, description="Where the incident occurred")


class IncidentStatusUpdate(BaseModel):
    capture_status: Optional[CaptureStatus] = None
    analysis_status: Optional[AnalysisStatus] = None


class IncidentResponse(BaseModel):
    id: UUID
    company_id: UUID
    reporter_name: str
    participant_id: Optional[UUID] = None
    participant_name: str
    event_date_time: str
    location: str
    capture_status: str
    analysis_status: str
    overall_status: str
    questions_generated: bool = False
    narrative_enhanced: bool = False
    analysis_generated: bool = False
    created_by: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class DashboardStats(BaseModel):
    total_incidents: int = 0
    captures_pending: int = 0
    analysis_pending: int = 0
    completed: int = 0
    recent_incidents: int = 0
    questions_generated: int = 0
    narratives_enhanced: int = 0
    analysis_generated: int = 0


class NarrativeCreate(BaseModel):
    before_event: str = ""
    during_event: str = ""
    end_event: str = ""
    post_event: str = ""


class NarrativeUpdate(BaseModel):
    before_event: Optional[str] = None
    during_event: Optional[str] = None
    end_event: Optional[str] = None
    post_event: Optional[str] = None


class NarrativeResponse(BaseModel):
    id: UUID
    incident_id: UUID
    before_event: str
    during_event: str
    end_event: str
    post_event: str
    before_event_extra: Optional[str] = None
    during_event_extra: Optional[str] = None
    end_event_extra: Optional[str] = None
    post_event_extra: Optional[str] = None
    consolidated_narrative: Optional[str] = None
    enhanced_at: Optional[datetime] = None
    version: int

    model_config = ConfigDict(from_attributes=True)


class GenerateQuestionsRequest(BaseModel):
    phase: NarrativePhase
    force_regenerate: bool = Field(default=False, description="Ignore cached questions")


class QuestionResponse(BaseModel):
    id: UUID
    incident_id: UUID
    question_id: str
    phase: str
    question_text: str
    question_order: int
    ai_model: Optional[str] = None
    prompt_version: Optional[str] = None
    is_active: bool = True

    model_config = ConfigDict(from_attributes=True)


class AnswerSubmit(BaseModel):
    question_id: str = Field(..., min_length=1)
    answer_text: str
    phase: NarrativePhase


class AnswerResponse(BaseModel):
    id: UUID
    incident_id: UUID
    question_id: str
    answer_text: str
    phase: str
    answered_at: Optional[datetime] = None
    answered_by: Optional[UUID] = None
    is_complete: bool
    character_count: int
    word_count: int

    model_config = ConfigDict(from_attributes=True)


class EnhanceRequest(BaseModel):
    phase: NarrativePhase


class QuestionGenerationResult(BaseModel):
    questions: List[QuestionResponse]
    cached: bool = False
    fallback: bool = Field(default=False, description="Predefined questions were used")
    correlation_id: Optional[str] = None


class EnhancementResult(BaseModel):
    phase: NarrativePhase
    enhanced_content: str
    ai_model_used: str
    success: bool = Field(..., description="False when the mock enhancement was used")
    correlation_id: str
    processing_time_ms: int = 0
    narrative: NarrativeResponse


__all__ = [
    "AnalysisStatus",
    "AnswerResponse",
    "AnswerSubmit",
    "CaptureStatus",
    "DashboardStats",
    "EnhanceRequest",
    "EnhancementResult",
    "GenerateQuestionsRequest",
    "IncidentCreate",
    "IncidentResponse",
    "IncidentStatusUpdate",
    "NARRATIVE_PHASES",
    "NarrativeCreate",
    "NarrativePhase",
    "NarrativeResponse",
    "NarrativeUpdate",
    "QuestionGenerationResult",
    "QuestionResponse",
]
