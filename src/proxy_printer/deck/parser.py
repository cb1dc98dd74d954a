"""Deck-list file parsing.

Understands the plain text exports of the common deck builders:
- Simple: "Lightning Bolt" (quantity defaults to 1)
- Counted: "4 Lightning Bolt" or "4x Lightning Bolt"
- Printing: "1 Lightning Bolt (M10) 146"
- Finish markers: "*F*" (foil) and "*E*" (etched)
- Comments: Lines starting with // or #
- Section headers ("Deck", "Sideboard", ...) are skipped
"""

import re
from pathlib import Path
from typing import List, Optional

from proxy_printer.constants import ETCHED_MARKER, FOIL_MARKER, SECTION_HEADERS
from proxy_printer.core.logging import get_logger
from proxy_printer.deck.models import Deck, DeckEntry
from proxy_printer.errors import DeckParsingError

logger = get_logger(__name__)

_QUANTITY = re.compile(r"^(?P<count>\d+)x?\s+(?P<rest>.+)$", re.IGNORECASE)
_PRINTING = re.compile(r"\((?P<set>[^()]+)\)(?:\s+(?P<number>[\w\-★]+))?")


def parse_deck_line(line: str) -> Optional[DeckEntry]:
    """Parse one deck-list line into a DeckEntry.

    Args:
        line: Raw line from a deck list

    Returns:
        DeckEntry, or None for blank lines, comments and section headers

    Examples:
        >>> parse_deck_line("2x Brainstorm (ICE) 61 *F*")
        DeckEntry(name='Brainstorm', quantity=2, expansion_code='ICE', collector_number='61', ...)
    """
    stripped = line.strip()

    if not stripped or stripped.startswith("//") or stripped.startswith("#"):
        return None

    if stripped.rstrip(":").lower() in SECTION_HEADERS:
        return None

    quantity = 1
    text = stripped
    match = _QUANTITY.match(stripped)
    if match:
        quantity = int(match.group("count"))
        text = match.group("rest")

    # Name runs up to the first optional element
    markers = [text.find("("), text.find(FOIL_MARKER), text.find(ETCHED_MARKER)]
    name_end = min((index for index in markers if index != -1), default=len(text))
    name = text[:name_end].strip()
    if not name:
        return None

    expansion_code = None
    collector_number = None
    printing = _PRINTING.search(text, name_end)
    if printing:
        expansion_code = printing.group("set").strip()
        collector_number = printing.group("number")

    return DeckEntry(
        name=name,
        quantity=quantity,
        expansion_code=expansion_code,
        collector_number=collector_number,
        is_foil=FOIL_MARKER in text,
        is_etched=ETCHED_MARKER in text,
    )


def parse_deck_text(content: str, deck_name: str = "Untitled") -> Deck:
    """Parse deck-list text into a Deck."""
    entries: List[DeckEntry] = []

    for line_num, line in enumerate(content.splitlines(), 1):
        try:
            entry = parse_deck_line(line)
        except ValueError as error:
            logger.warning("Skipping deck line {} '{}': {}", line_num, line.strip(), error)
            continue
        if entry is not None:
            entries.append(entry)

    logger.info("Parsed {} entries from deck '{}'", len(entries), deck_name)
    return Deck(name=deck_name, entries=entries)


def parse_deck_file(path: str | Path) -> Deck:
    """Parse a deck file; the deck is named after the file stem.

    Raises:
        DeckParsingError: If the file doesn't exist or cannot be read
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as error:
        raise DeckParsingError(f"Deck file not found: {path}") from error
    except (OSError, UnicodeDecodeError) as error:
        raise DeckParsingError(f"Could not read deck file '{path}': {error}") from error

    return parse_deck_text(content, deck_name=path.stem)
