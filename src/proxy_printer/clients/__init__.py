"""HTTP clients for Scryfall and Archidekt."""

from .archidekt import ArchidektClient, ArchidektDeckRetriever, extract_deck_id
from .scryfall import ScryfallClient

__all__ = [
    "ArchidektClient",
    "ArchidektDeckRetriever",
    "ScryfallClient",
    "extract_deck_id",
]
