from supportsignal.database.models import (
    AIPrompt,
    AIRequestLog,
    ClarificationAnswer,
    ClarificationQuestion,
    Company,
    Incident,
    IncidentNarrative,
    Participant,
    PromptGroup,
    Session,
    User,
)

__all__ = [
    "AIPrompt",
    "AIRequestLog",
    "ClarificationAnswer",
    "ClarificationQuestion",
    "Company",
    "Incident",
    "IncidentNarrative",
    "Participant",
    "PromptGroup",
    "Session",
    "User",
]
