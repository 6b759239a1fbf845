from supportsignal.repositories.ai_request_log_repository import AIRequestLogRepository
from supportsignal.repositories.base_repository import BaseRepository
from supportsignal.repositories.clarification_repository import (
    ClarificationAnswerRepository,
    ClarificationQuestionRepository,
)
from supportsignal.repositories.company_repository import CompanyRepository
from supportsignal.repositories.incident_repository import IncidentRepository, NarrativeRepository
from supportsignal.repositories.participant_repository import ParticipantRepository
from supportsignal.repositories.prompt_repository import PromptGroupRepository, PromptRepository
from supportsignal.repositories.user_repository import SessionRepository, UserRepository

__all__ = [
    "AIRequestLogRepository",
    "BaseRepository",
    "ClarificationAnswerRepository",
    "ClarificationQuestionRepository",
    "CompanyRepository",
    "IncidentRepository",
    "NarrativeRepository",
    "ParticipantRepository",
    "PromptGroupRepository",
    "PromptRepository",
    "SessionRepository",
    "UserRepository",
]
