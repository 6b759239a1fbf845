from fastapi import APIRouter

from supportsignal.api.v1.endpoints import (
    ai,
    auth,
    clarifications,
    companies,
    incidents,
    narratives,
    participants,
    prompt_groups,
    prompts,
    users,
)

# Create API router
api_router = APIRouter()

# Include routers
api_router.include_router(auth.router, prefix="/auth", tags=["Auth"])
api_router.include_router(companies.router, prefix="/companies", tags=["Companies"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(participants.router, prefix="/participants", tags=["Participants"])
api_router.include_router(incidents.router, prefix="/incidents", tags=["Incidents"])
api_router.include_router(narratives.router, prefix="/incidents", tags=["Narratives"])
api_router.include_router(clarifications.router, prefix="/incidents", tags=["Clarifications"])
api_router.include_router(prompts.router, prefix="/prompts", tags=["Prompts"])
api_router.include_router(prompt_groups.router, prefix="/prompt-groups", tags=["Prompt Groups"])
api_router.include_router(ai.router, prefix="/ai", tags=["AI"])

__all__ = ["api_router"]
