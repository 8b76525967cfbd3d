"""
Health check endpoint.

Liveness only; the service has no required dependencies at startup.
"""

from fastapi import APIRouter
from pydantic import BaseModel

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness check.

    Returns healthy if the service is running.
    Does not check the catalog or Scryfall.
    """
    return HealthResponse(status="healthy")
