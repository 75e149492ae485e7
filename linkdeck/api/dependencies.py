"""Shared FastAPI dependencies and error conversion."""

from typing import Annotated

from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from linkdeck.db.database import get_session
from linkdeck.models.failure import KnownError
from linkdeck.storage.base import CollectionStore
from linkdeck.storage.sql import SqlStore


async def get_store(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionStore:
    """Store handle for the current request, bound to its session."""
    return SqlStore(session)


def to_http_error(error: KnownError) -> HTTPException:
    """Convert a known failure into an HTTP error with a structured detail."""
    return HTTPException(
        status_code=error.status_code,
        detail=error.to_detail().model_dump(mode="json"),
    )
