"""API v1 router combining all route modules."""

from fastapi import APIRouter

from pharmaventory.api.v1 import chat, health

api_router = APIRouter()

# Include health check routes (no prefix)
api_router.include_router(health.router)

# Pharmacy assistant (requires auth)
api_router.include_router(
    chat.router,
    prefix="/chat",
    tags=["chat"],
)
