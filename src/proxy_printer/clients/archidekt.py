"""Archidekt deck retrieval.

Deck pages (https://archidekt.com/decks/123/...) and API links
(https://archidekt.com/api/decks/123/) are both accepted; the deck is always
read from the JSON API.
"""

import re
from typing import Any, Iterable, List, Optional

import requests

from proxy_printer.config import settings as settings_module
from proxy_printer.constants import ART_SERIES_LAYOUT
from proxy_printer.core.logging import get_logger
from proxy_printer.deck.models import Deck, DeckEntry
from proxy_printer.errors import NetworkError
from proxy_printer.net import RetryConfig, fetch_json

logger = get_logger(__name__)

_DECK_URL = re.compile(
    r"^https://(?:www\.)?archidekt\.com/(?:api/decks/(\d+)|decks/(\d+))(?:[/?#]|$)"
)

ETCHED_MODIFIER = "Etched"
FOIL_MODIFIER = "Foil"


def extract_deck_id(url: str) -> Optional[int]:
    """Return the deck id from an Archidekt URL, or None if it isn't one.

    Examples:
        >>> extract_deck_id("https://archidekt.com/decks/1234567/elves")
        1234567
    """
    match = _DECK_URL.match(url.strip())
    if not match:
        return None
    return int(match.group(1) or match.group(2))


def parse_archidekt_card(item: dict[str, Any]) -> Optional[DeckEntry]:
    """Convert one entry of the deck's ``cards`` list.

    Returns:
        DeckEntry, or None for nameless cards and non-positive quantities
    """
    card = item.get("card") or {}
    oracle = card.get("oracleCard") or {}
    edition = card.get("edition") or {}

    name = (oracle.get("name") or "").strip()
    quantity = item.get("quantity") or 0
    if not name or quantity <= 0:
        return None

    modifier = (item.get("modifier") or "").casefold()
    layout = (oracle.get("layout") or "").casefold()
    return DeckEntry(
        name=name,
        quantity=int(quantity),
        expansion_code=edition.get("editioncode"),
        collector_number=card.get("collectorNumber"),
        is_art=layout == ART_SERIES_LAYOUT.casefold(),
        is_etched=modifier == ETCHED_MODIFIER.casefold(),
        is_foil=modifier == FOIL_MODIFIER.casefold(),
    )


def parse_archidekt_deck(data: dict[str, Any], deck_id: int) -> Deck:
    cards: Iterable[dict[str, Any]] = data.get("cards") or []
    entries: List[DeckEntry] = []
    for item in cards:
        entry = parse_archidekt_card(item)
        if entry is not None:
            entries.append(entry)

    name = (data.get("name") or "").strip() or f"archidekt-{deck_id}"
    return Deck(name=name, entries=entries)


class ArchidektClient:
    """Minimal client for the Archidekt deck API."""

    def __init__(
        self,
        api_base: Optional[str] = None,
        session: Optional[requests.Session] = None,
        retry_config: Optional[RetryConfig] = None,
    ):
        self.api_base = (api_base or settings_module.settings.archidekt_api_base).rstrip("/")
        self.session = session or requests.Session()
        self.retry_config = retry_config or RetryConfig.from_settings()

    def get_deck(self, deck_id: int) -> Optional[dict[str, Any]]:
        """Fetch deck JSON (None if the deck doesn't exist)."""
        return fetch_json(
            f"{self.api_base}/api/decks/{deck_id}/",
            session=self.session,
            headers={"Accept": "application/json"},
            config=self.retry_config,
        )


class ArchidektDeckRetriever:
    """Deck retriever for archidekt.com links."""

    def __init__(self, client: Optional[ArchidektClient] = None):
        self.client = client or ArchidektClient()

    def can_handle(self, url: str) -> bool:
        return extract_deck_id(url) is not None

    def retrieve(self, url: str) -> Optional[Deck]:
        deck_id = extract_deck_id(url)
        if deck_id is None:
            logger.error("Not an Archidekt deck URL: {}", url)
            return None

        try:
            data = self.client.get_deck(deck_id)
        except NetworkError as error:
            logger.error("Could not load Archidekt deck {}: {}", deck_id, error)
            return None

        if not isinstance(data, dict):
            logger.error("Archidekt deck {} was not found", deck_id)
            return None

        deck = parse_archidekt_deck(data, deck_id)
        logger.info(
            "Loaded Archidekt deck '{}' with {} entries", deck.name, len(deck.entries)
        )
        return deck
