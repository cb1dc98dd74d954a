"""Where decks come from: local deck-list files or online deck builders."""

from pathlib import Path
from typing import Optional, Protocol, Sequence

from proxy_printer.core.logging import get_logger
from proxy_printer.deck.models import Deck
from proxy_printer.deck.parser import parse_deck_file
from proxy_printer.errors import DeckParsingError, DeckSourceError

logger = get_logger(__name__)


class DeckRetriever(Protocol):
    """Loads decks from one online deck builder."""

    def can_handle(self, url: str) -> bool:
        ...

    def retrieve(self, url: str) -> Optional[Deck]:
        """Return the deck, or None if it could not be fetched."""
        ...


class DeckRetrieverFactory:
    """Picks the retriever that understands a deck URL."""

    def __init__(self, retrievers: Sequence[DeckRetriever]):
        self.retrievers = list(retrievers)

    def get_retriever(self, url: str) -> Optional[DeckRetriever]:
        for retriever in self.retrievers:
            if retriever.can_handle(url):
                return retriever
        return None

    def load(self, url: str) -> Deck:
        """Load a deck from a URL.

        Raises:
            DeckSourceError: If no retriever handles the URL or retrieval failed
        """
        retriever = self.get_retriever(url)
        if retriever is None:
            raise DeckSourceError(f"Unsupported deck URL: {url}")

        deck = retriever.retrieve(url)
        if deck is None:
            raise DeckSourceError(f"Could not retrieve deck from {url}")
        return deck


def load_deck_file(path: str | Path) -> Deck:
    """Load a deck-list file.

    Raises:
        DeckSourceError: If the file is missing or unreadable
    """
    try:
        return parse_deck_file(path)
    except DeckParsingError as error:
        raise DeckSourceError(str(error)) from error
