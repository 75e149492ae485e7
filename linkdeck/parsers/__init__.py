from linkdeck.parsers.card_import import (
    ImportFormat,
    ImportPayload,
    RecordShape,
    export_card,
    export_collection,
    export_deck,
    parse_import_data,
)
from linkdeck.parsers.link_parser import (
    LinkStrategy,
    detect_link_type,
    parse_link,
    parse_links,
    select_strategy,
)

__all__ = [
    "ImportFormat",
    "ImportPayload",
    "LinkStrategy",
    "RecordShape",
    "detect_link_type",
    "export_card",
    "export_collection",
    "export_deck",
    "parse_import_data",
    "parse_link",
    "parse_links",
    "select_strategy",
]
