"""Deck model, deck-list parsing and deck sources."""

from .models import CardSide, Deck, DeckEntry, TokenRef
from .parser import parse_deck_file, parse_deck_line, parse_deck_text

__all__ = [
    "CardSide",
    "Deck",
    "DeckEntry",
    "TokenRef",
    "parse_deck_file",
    "parse_deck_line",
    "parse_deck_text",
]
