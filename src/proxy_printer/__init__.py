"""Proxy Printer: turn Magic: The Gathering decks into printable proxy sheets."""

__version__ = "1.0.0"
