"""
Failure classification for the ingestion pipeline.

Every failure the core can report falls into one of a small set of kinds.
Only two of them ever reach a caller as an exception:

- MALFORMED_INPUT: the URL or JSON text could not be parsed at all
- EXTERNAL_LOOKUP_FAILURE: the user-initiated rewrite call failed

The others are recovered where they happen:

- NO_IMPORTABLE_DATA: an empty ImportPayload, rendered as "nothing to import"
- FIELD_VALIDATION_DROP: a single bad entry silently excluded from a batch
- EXTERNAL_LOOKUP_FAILURE (metadata lookups): degraded to a placeholder draft
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    MALFORMED_INPUT = "malformed_input"
    NO_IMPORTABLE_DATA = "no_importable_data"
    FIELD_VALIDATION_DROP = "field_validation_drop"
    EXTERNAL_LOOKUP_FAILURE = "external_lookup_failure"
    NOT_FOUND = "not_found"
    SERVICE_UNAVAILABLE = "service_unavailable"


class FailureDetail(BaseModel):
    """Detailed information about a failure, as returned by the API."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.status_code = status_code
        super().__init__(message)

    def to_detail(self) -> FailureDetail:
        """Convert to a FailureDetail for API responses."""
        return FailureDetail(kind=self.kind, message=self.message, detail=self.detail)


class MalformedInputError(KnownError):
    """Raised when a URL or JSON text is syntactically invalid."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(FailureKind.MALFORMED_INPUT, message, detail=detail, status_code=400)


class InvalidUrlError(MalformedInputError):
    """Raised when a link cannot be parsed as an absolute URL."""

    def __init__(self, url: str):
        self.url = url
        super().__init__("Invalid URL format", detail=url)


class ImportParseError(MalformedInputError):
    """
    Raised when import text is not valid JSON.

    The underlying parser message is kept in ``detail``.
    """

    def __init__(self, parser_message: str):
        super().__init__("Import text is not valid JSON", detail=parser_message)


class NotFoundError(KnownError):
    """Raised when a card or deck id does not exist in the store."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            FailureKind.NOT_FOUND,
            f"{entity.capitalize()} not found",
            detail=entity_id,
            status_code=404,
        )


class PolishError(KnownError):
    """
    Raised when the text-rewrite service fails.

    Unlike metadata lookups this is surfaced to the caller: polishing is
    explicitly user-initiated and has no silent fallback.
    """

    def __init__(self, message: str, detail: str | None = None, status_code: int = 502):
        super().__init__(
            FailureKind.EXTERNAL_LOOKUP_FAILURE,
            message,
            detail=detail,
            status_code=status_code,
        )


class StoreWriteError(KnownError):
    """Raised when a store reports that a write did not happen."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            FailureKind.SERVICE_UNAVAILABLE,
            f"Could not save {entity}",
            detail=entity_id,
            status_code=503,
        )
