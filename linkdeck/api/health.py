"""
Health check endpoints.

``/health`` answers as long as the process is up. ``/ready`` also checks
that the card and deck tables can be queried, so a database that is down
or was never initialized reports not ready.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from linkdeck.db.database import get_session
from linkdeck.models.db import CardDB, DeckDB

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response. Row counts are only set by a ready store."""

    status: str
    database: str | None = None
    card_count: int | None = None
    deck_count: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe. Does not touch the database."""
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """
    Readiness probe.

    Counts stored cards and decks. Returns 503 if either table cannot be
    read (database unreachable, or tables not created yet).
    """
    try:
        card_count = await session.scalar(select(func.count()).select_from(CardDB))
        deck_count = await session.scalar(select(func.count()).select_from(DeckDB))
    except SQLAlchemyError:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database="unavailable")

    return HealthResponse(
        status="ready",
        database="connected",
        card_count=card_count or 0,
        deck_count=deck_count or 0,
    )
