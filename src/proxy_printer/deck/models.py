"""Deck data model.

A ``DeckEntry`` is one line of a deck. Deck sources create entries, the
resolver fills in ``sides`` and ``tokens``, and token expansion appends new
entries that already carry their single side.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class CardSide:
    """One printable image. Two sides are equal iff name and URL match."""

    name: str
    image_url: str


@dataclass(frozen=True)
class TokenRef:
    """A token related to a resolved card, pending expansion."""

    name: str
    lookup_uri: str


@dataclass
class DeckEntry:
    """Represents a card line in a deck."""

    name: str
    quantity: int = 1
    expansion_code: Optional[str] = None
    collector_number: Optional[str] = None
    is_art: bool = False
    is_etched: bool = False
    is_foil: bool = False
    # unique, in insertion order
    sides: List[CardSide] = field(default_factory=list)
    tokens: List[TokenRef] = field(default_factory=list)

    def __post_init__(self):
        """Normalize entry data after initialization."""
        self.name = self.name.strip()
        if self.quantity < 0:
            raise ValueError(f"Quantity must not be negative: {self.quantity}")
        if self.expansion_code is not None:
            self.expansion_code = self.expansion_code.strip() or None
        if self.collector_number is not None:
            self.collector_number = self.collector_number.strip() or None


@dataclass
class Deck:
    """A named, ordered list of deck entries."""

    name: str
    entries: List[DeckEntry] = field(default_factory=list)

    @property
    def card_count(self) -> int:
        """Total number of cards (sum of quantities)."""
        return sum(entry.quantity for entry in self.entries)

