"""Shared constants for Proxy Printer."""

# Languages Scryfall serves printed cards in
ENGLISH = "en"
SUPPORTED_LANGUAGES = [
    ENGLISH,
    "es",
    "fr",
    "de",
    "it",
    "pt",
    "ja",
    "ko",
    "zhs",
    "zht",
]

# Scryfall vocabulary
TOKEN_COMPONENT = "token"
ART_SERIES_LAYOUT = "art_series"
FACE_SEPARATOR = " // "
IMAGE_SIZE = "large"

# Deck-list markers
FOIL_MARKER = "*F*"
ETCHED_MARKER = "*E*"
SECTION_HEADERS = {
    "deck",
    "main",
    "mainboard",
    "sideboard",
    "commander",
    "companion",
    "maybeboard",
}

# Physical card size (millimetres)
CARD_WIDTH_MM = 63.0
CARD_HEIGHT_MM = 88.0

# A4 landscape with narrow (half inch) margins, rendered at print resolution
PAGE_WIDTH_MM = 297.0
PAGE_HEIGHT_MM = 210.0
PAGE_MARGIN_MM = 12.7
PAGE_DPI = 300

# Token copies accepted per token
MAX_TOKEN_COPIES = 100

DEFAULT_DOCUMENT_NAME = "deck"
