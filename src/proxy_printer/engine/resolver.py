"""Card resolution: deck entry -> card record -> printable sides.

For every entry the resolver:
1. Looks the card up (exact printing when set and collector number are
   known, name search otherwise)
2. Picks the first record that matches name, finish, set and language
3. Retries once without the language if nothing matched
4. Builds the printable sides (faces, art-card collapse, single-face fallback)
5. Collects related tokens when token copies were requested

Per-entry failures never raise; they are logged, reported as progress
errors and leave the entry without sides.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from proxy_printer.constants import FACE_SEPARATOR
from proxy_printer.core.logging import get_logger
from proxy_printer.deck.models import CardSide, DeckEntry, TokenRef
from proxy_printer.engine.ports import CardLookup, CardRecord
from proxy_printer.errors import (
    CardNotFoundError,
    MaterializationCancelled,
    MissingImageError,
    NetworkError,
)
from proxy_printer.progress import ProgressReporter, Stage

logger = get_logger(__name__)


class Outcome(str, Enum):
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    MISSING_IMAGE = "missing_image"
    TRANSPORT_FAILURE = "transport_failure"


@dataclass
class Resolution:
    """What resolving one entry produced, before it is written to the entry."""

    entry: DeckEntry
    outcome: Outcome
    sides: Optional[List[CardSide]] = None
    tokens: List[TokenRef] = field(default_factory=list)
    error_message: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.outcome is Outcome.RESOLVED


def select_candidate(
    candidates: Optional[Iterable[Optional[CardRecord]]],
    entry: DeckEntry,
    language_code: Optional[str] = None,
) -> Optional[CardRecord]:
    """Return the first record satisfying all of the entry's qualifiers."""
    name = entry.name.casefold()
    for record in candidates or ():
        if record is None or not record.name:
            continue
        if record.name.casefold() != name:
            continue
        if entry.is_etched and not record.etched_available:
            continue
        if (
            entry.expansion_code is not None
            and record.set_code.casefold() != entry.expansion_code.casefold()
        ):
            continue
        if (
            language_code is not None
            and record.language.casefold() != language_code.casefold()
        ):
            continue
        return record
    return None


def is_art_card(entry: DeckEntry) -> bool:
    """Art cards print once: flagged entries and "X // X" names."""
    if entry.is_art:
        return True
    halves = entry.name.split(FACE_SEPARATOR)
    return len(halves) > 1 and halves[0] == halves[1]


def extract_sides(entry: DeckEntry, record: CardRecord) -> Optional[List[CardSide]]:
    """Build the printable sides of a matched record.

    The steps run in a fixed order and later steps may replace what earlier
    ones produced.

    Returns:
        Unique sides in face order, or None if the record has no usable image
    """
    # Multi-faced cards: one side per face that has an image
    sides = list(
        dict.fromkeys(
            CardSide(face.name, face.image_url)
            for face in record.faces
            if face.image_url
        )
    )

    if sides and is_art_card(entry):
        sides = sides[:1]

    if not sides or any(not side.name or not side.image_url for side in sides):
        if not record.image_url:
            return None
        sides = [CardSide(entry.name, record.image_url)]

    return sides


def harvest_tokens(record: CardRecord) -> List[TokenRef]:
    return [TokenRef(part.name, part.uri) for part in record.related_tokens]


class CardResolver:
    """Resolves deck entries against a card database.

    Args:
        lookup: Card Lookup Port implementation
        reporter: Receives one progress event per processed entry
        max_workers: Concurrent lookups in ``resolve_all`` (1 = sequential)
    """

    def __init__(
        self,
        lookup: CardLookup,
        reporter: Optional[ProgressReporter] = None,
        max_workers: int = 1,
    ):
        self.lookup = lookup
        self.reporter = reporter or ProgressReporter()
        self.max_workers = max(1, max_workers)

    def resolve(
        self,
        entry: DeckEntry,
        language_code: Optional[str] = None,
        token_copies: int = 0,
    ) -> Optional[List[CardSide]]:
        """Resolve one entry and store its sides and tokens on it.

        Returns:
            The entry's sides, or None if it could not be resolved
        """
        resolution = self.resolve_entry(entry, language_code, token_copies)
        self._apply(resolution)
        return resolution.sides

    def resolve_entry(
        self,
        entry: DeckEntry,
        language_code: Optional[str] = None,
        token_copies: int = 0,
    ) -> Resolution:
        """Resolve one entry without touching it."""
        record, transport_failed = self._find_candidate(entry, language_code)

        if record is None and language_code is not None:
            logger.warning(
                "Card {} in [{}] was not found in the card database",
                entry.name,
                language_code,
            )
            record, fallback_failed = self._find_candidate(entry, None)
            transport_failed = transport_failed and fallback_failed

        if record is None:
            logger.error(
                "Card {} was not found in the card database and will be ignored",
                entry.name,
            )
            return Resolution(
                entry=entry,
                outcome=(
                    Outcome.TRANSPORT_FAILURE if transport_failed else Outcome.NOT_FOUND
                ),
                error_message=str(CardNotFoundError(entry.name)),
            )

        sides = extract_sides(entry, record)
        tokens = harvest_tokens(record) if token_copies > 0 else []

        if sides is None:
            logger.error("Card {} does not have any url to its picture", entry.name)
            return Resolution(
                entry=entry,
                outcome=Outcome.MISSING_IMAGE,
                tokens=tokens,
                error_message=str(MissingImageError(entry.name)),
            )

        logger.debug("Resolved {} to {} side(s)", entry.name, len(sides))
        return Resolution(
            entry=entry, outcome=Outcome.RESOLVED, sides=sides, tokens=tokens
        )

    def resolve_all(
        self,
        entries: Sequence[DeckEntry],
        language_code: Optional[str] = None,
        token_copies: int = 0,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[Resolution]:
        """Resolve every entry in list order, reporting progress after each.

        Raises:
            MaterializationCancelled: If ``cancel_event`` was set before all
                entries were resolved
        """
        total = len(entries)
        self.reporter.reset(Stage.DECK_DETAILS)

        if self.max_workers == 1 or total <= 1:
            resolutions = []
            for entry in entries:
                self._check_cancelled(cancel_event)
                resolutions.append(
                    self._finish(
                        self.resolve_entry(entry, language_code, token_copies),
                        len(resolutions) + 1,
                        total,
                    )
                )
            return resolutions

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(
                    self._resolve_unless_cancelled,
                    entry,
                    language_code,
                    token_copies,
                    cancel_event,
                )
                for entry in entries
            ]

            # Consume in submission order: output order and progress stay monotonic
            resolutions = []
            for future in futures:
                resolution = future.result()
                if resolution is None:
                    for pending in futures:
                        pending.cancel()
                    self._check_cancelled(cancel_event)
                resolutions.append(self._finish(resolution, len(resolutions) + 1, total))

        return resolutions

    def _find_candidate(
        self, entry: DeckEntry, language_code: Optional[str]
    ) -> tuple[Optional[CardRecord], bool]:
        """One lookup attempt; the flag tells whether it failed in transport."""
        try:
            if entry.expansion_code is not None and entry.collector_number is not None:
                candidates: Sequence[Optional[CardRecord]] = [
                    self.lookup.find(
                        entry.name,
                        entry.expansion_code,
                        entry.collector_number,
                        language_code,
                    )
                ]
            else:
                candidates = self.lookup.search(
                    entry.name,
                    include_extra_prints=bool(
                        entry.expansion_code is not None
                        or entry.is_etched
                        or entry.is_art
                    ),
                    include_multilingual=language_code is not None,
                )
        except NetworkError as error:
            logger.error("Lookup for card {} failed: {}", entry.name, error)
            return None, True

        return select_candidate(candidates, entry, language_code), False

    def _resolve_unless_cancelled(
        self,
        entry: DeckEntry,
        language_code: Optional[str],
        token_copies: int,
        cancel_event: Optional[threading.Event],
    ) -> Optional[Resolution]:
        if cancel_event is not None and cancel_event.is_set():
            return None
        return self.resolve_entry(entry, language_code, token_copies)

    def _finish(self, resolution: Resolution, processed: int, total: int) -> Resolution:
        self._apply(resolution)
        self.reporter.step(
            Stage.DECK_DETAILS, processed, total, resolution.error_message
        )
        return resolution

    @staticmethod
    def _apply(resolution: Resolution) -> None:
        entry = resolution.entry
        entry.sides = list(resolution.sides or [])
        entry.tokens = list(resolution.tokens)

    @staticmethod
    def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            logger.warning("Card resolution cancelled")
            raise MaterializationCancelled("Materialization was cancelled")
