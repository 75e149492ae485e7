"""
Import and export endpoints.

Import accepts a single card, a single deck, or a batch of cards and
decks as JSON text. Imports only ever add: cards whose title or decks
whose name already exist (case-insensitive) are skipped.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from linkdeck.api.dependencies import get_store, to_http_error
from linkdeck.api.schemas import DraftResponse, ExportResponse
from linkdeck.models.failure import KnownError
from linkdeck.parsers.card_import import ImportFormat, parse_import_data
from linkdeck.services import collection
from linkdeck.storage.base import CollectionStore

router = APIRouter(tags=["import"])

NOTHING_TO_IMPORT = "Nothing to import"


class ImportRequest(BaseModel):
    """Request model for importing JSON text."""

    text: str = Field(
        ...,
        description="JSON for a card, a deck, or a batch of cards and decks",
        examples=['{"title": "httpx", "description": "A next-generation HTTP client"}'],
    )


class DeckPreview(BaseModel):
    name: str
    description: str
    cards: list[DraftResponse] = Field(default_factory=list)


class ImportPreviewResponse(BaseModel):
    """What an import would contain, before merging."""

    format: ImportFormat
    cards: list[DraftResponse] = Field(default_factory=list)
    decks: list[DeckPreview] = Field(default_factory=list)
    card_count: int = Field(..., description="Cards including those nested in decks")
    empty: bool


class ImportResponse(BaseModel):
    """Outcome of an import."""

    imported: bool
    cards_added: int = 0
    decks_added: int = 0
    message: str


@router.post("/import/preview", response_model=ImportPreviewResponse)
async def preview_import(request: ImportRequest) -> ImportPreviewResponse:
    """
    Validate import text without saving anything.

    Returns 400 if the text is not valid JSON.
    """
    try:
        payload = parse_import_data(request.text)
    except KnownError as e:
        raise to_http_error(e) from e

    return ImportPreviewResponse(
        format=payload.format,
        cards=[DraftResponse.from_draft(d) for d in payload.cards],
        decks=[
            DeckPreview(
                name=deck.name,
                description=deck.description,
                cards=[DraftResponse.from_draft(d) for d in deck.cards],
            )
            for deck in payload.decks
        ],
        card_count=payload.card_count,
        empty=payload.is_empty,
    )


@router.post("/import", response_model=ImportResponse)
async def import_collection(
    request: ImportRequest,
    store: Annotated[CollectionStore, Depends(get_store)],
) -> ImportResponse:
    """
    Import cards and decks into the collection.

    Returns 400 if the text is not valid JSON. Text with nothing usable in
    it is not an error: the response reports imported=false.
    """
    try:
        result = await collection.import_into_store(store, request.text)
    except KnownError as e:
        raise to_http_error(e) from e

    summary = result.summary
    if not summary.changed:
        return ImportResponse(imported=False, message=NOTHING_TO_IMPORT)

    return ImportResponse(
        imported=True,
        cards_added=summary.cards_added,
        decks_added=summary.decks_added,
        message=f"Imported {summary.cards_added} cards and {summary.decks_added} decks",
    )


@router.get("/export", response_model=ExportResponse)
async def export_collection(
    store: Annotated[CollectionStore, Depends(get_store)],
) -> ExportResponse:
    """Export every card and deck as a batch the import endpoint accepts."""
    return ExportResponse(data=await collection.export_store(store))
