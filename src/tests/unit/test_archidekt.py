"""Unit tests for clients/archidekt.py"""

import pytest

from proxy_printer.clients.archidekt import (
    ArchidektDeckRetriever,
    extract_deck_id,
    parse_archidekt_card,
    parse_archidekt_deck,
)
from proxy_printer.errors import NetworkError


def archidekt_card(
    name, quantity=1, *, layout="normal", edition="m10", number="146", modifier="Normal"
):
    return {
        "quantity": quantity,
        "modifier": modifier,
        "card": {
            "collectorNumber": number,
            "edition": {"editioncode": edition},
            "oracleCard": {"name": name, "layout": layout},
        },
    }


DECK_JSON = {
    "name": "Mono Red Burn",
    "cards": [
        archidekt_card("Lightning Bolt", 4),
        archidekt_card("Sol Ring", 1, edition="cmr", number="472", modifier="Etched"),
        archidekt_card("Goblin Guide", 2, modifier="Foil"),
        archidekt_card("Mountain", 0),
        archidekt_card("", 3),
        archidekt_card("Island", 1, layout="art_series", edition="aznr", number="1"),
    ],
}


class FakeClient:
    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.requested = []

    def get_deck(self, deck_id):
        self.requested.append(deck_id)
        if self.error:
            raise self.error
        return self.payload


class TestExtractDeckId:
    """Tests for extract_deck_id()."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://archidekt.com/decks/1234567/mono_red_burn",
            "https://archidekt.com/decks/1234567",
            "https://archidekt.com/api/decks/1234567/",
            "https://www.archidekt.com/decks/1234567#main",
        ],
    )
    def test_supported_urls(self, url):
        """Deck pages and API links yield the numeric id."""
        assert extract_deck_id(url) == 1234567

    @pytest.mark.parametrize(
        "url",
        [
            "https://moxfield.com/decks/abc",
            "https://archidekt.com/search/decks",
            "http://archidekt.com/decks/1/",
            "https://archidekt.com/decks/12345abc",
            "not a url",
        ],
    )
    def test_unsupported_urls(self, url):
        """Anything else is not an Archidekt deck."""
        assert extract_deck_id(url) is None


class TestParseCards:
    """Tests for deck JSON conversion."""

    def test_fields_are_mapped(self):
        """Name, quantity, printing and finish come from the card object."""
        entry = parse_archidekt_card(archidekt_card("Lightning Bolt", 4))

        assert entry.name == "Lightning Bolt"
        assert entry.quantity == 4
        assert entry.expansion_code == "m10"
        assert entry.collector_number == "146"
        assert not (entry.is_art or entry.is_etched or entry.is_foil)

    def test_modifiers_and_layout(self):
        """Etched/Foil modifiers and the art series layout set flags."""
        deck = parse_archidekt_deck(DECK_JSON, 1)
        by_name = {entry.name: entry for entry in deck.entries}

        assert by_name["Sol Ring"].is_etched
        assert by_name["Goblin Guide"].is_foil
        assert by_name["Island"].is_art

    def test_modifiers_ignore_case(self):
        """Modifier and layout values match regardless of case."""
        etched = parse_archidekt_card(archidekt_card("Sol Ring", modifier="etched"))
        foil = parse_archidekt_card(archidekt_card("Goblin Guide", modifier="FOIL"))
        art = parse_archidekt_card(archidekt_card("Island", layout="Art_Series"))

        assert etched.is_etched
        assert foil.is_foil
        assert art.is_art

    def test_nameless_and_empty_cards_are_skipped(self):
        """Cards without name or with zero copies are dropped."""
        deck = parse_archidekt_deck(DECK_JSON, 1)

        assert deck.name == "Mono Red Burn"
        assert [entry.name for entry in deck.entries] == [
            "Lightning Bolt",
            "Sol Ring",
            "Goblin Guide",
            "Island",
        ]

    def test_unnamed_deck_gets_id_name(self):
        """Decks without a name are named after their id."""
        assert parse_archidekt_deck({"cards": []}, 42).name == "archidekt-42"


class TestRetriever:
    """Tests for ArchidektDeckRetriever."""

    def test_retrieve(self):
        """Retrieval fetches the deck by id."""
        client = FakeClient(DECK_JSON)
        retriever = ArchidektDeckRetriever(client)

        deck = retriever.retrieve("https://archidekt.com/decks/77/burn")

        assert client.requested == [77]
        assert len(deck.entries) == 4

    def test_can_handle(self):
        """Only Archidekt URLs are handled."""
        retriever = ArchidektDeckRetriever(FakeClient())

        assert retriever.can_handle("https://archidekt.com/decks/1/")
        assert not retriever.can_handle("https://example.com/decks/1/")

    def test_network_failure_returns_none(self):
        """Transport failures are logged and yield no deck."""
        retriever = ArchidektDeckRetriever(FakeClient(error=NetworkError("timeout")))

        assert retriever.retrieve("https://archidekt.com/decks/1/") is None

    def test_missing_deck_returns_none(self):
        """A 404 deck yields no deck."""
        retriever = ArchidektDeckRetriever(FakeClient(payload=None))

        assert retriever.retrieve("https://archidekt.com/decks/1/") is None
