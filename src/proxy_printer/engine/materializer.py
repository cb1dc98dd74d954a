"""Deck materialization facade.

Turns a deck (from a file, a deck-builder URL or built in memory) into a
printable document:

    idle -> resolving_entries -> expanding_tokens -> completed
                                                  \\-> errored (from any step)

Per-entry failures are absorbed by the resolver. Only deck-level problems
(nothing to print, deck not loadable, cancellation) raise.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from proxy_printer.config import settings as settings_module
from proxy_printer.config.schema import MaterializeOptions
from proxy_printer.core.logging import get_logger, log_operation
from proxy_printer.deck.models import Deck, DeckEntry
from proxy_printer.deck.sources import DeckRetrieverFactory, load_deck_file
from proxy_printer.engine.ports import CardLookup
from proxy_printer.engine.resolver import CardResolver, Outcome, Resolution
from proxy_printer.engine.tokens import TokenExpander
from proxy_printer.errors import (
    DeckSourceError,
    EmptyDeckError,
    MaterializationCancelled,
    ProxyPrinterError,
)
from proxy_printer.progress import ProgressReporter, Stage

logger = get_logger(__name__)

EMPTY_DECK_MESSAGE = "No cards found in the deck"
NOTHING_PRINTABLE_MESSAGE = "None of the deck's cards could be resolved"
UNREACHABLE_MESSAGE = "The card database could not be reached; no card was resolved"


class MaterializerState(str, Enum):
    IDLE = "idle"
    RESOLVING_ENTRIES = "resolving_entries"
    EXPANDING_TOKENS = "expanding_tokens"
    COMPLETED = "completed"
    ERRORED = "errored"


class DocumentAssembler(Protocol):
    def assemble(
        self,
        deck_name: str,
        entries: Sequence[DeckEntry],
        output_dir: Optional[Path] = None,
        file_name: Optional[str] = None,
        save_images: bool = False,
    ) -> Path:
        ...


@dataclass
class MaterializationResult:
    """Outcome of one materialization request."""

    deck_name: str
    state: MaterializerState
    manifest: List[DeckEntry] = field(default_factory=list)
    unresolved: List[DeckEntry] = field(default_factory=list)
    token_entries: List[DeckEntry] = field(default_factory=list)
    document_path: Optional[Path] = None
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state is MaterializerState.COMPLETED

    @property
    def card_count(self) -> int:
        return sum(entry.quantity * len(entry.sides) for entry in self.manifest)


class DeckMaterializer:
    """Drives resolution, token expansion and document assembly for a deck.

    One instance handles one request at a time; ``cancel()`` may be called
    from another thread while a request is running.
    """

    def __init__(
        self,
        lookup: CardLookup,
        assembler: DocumentAssembler,
        reporter: Optional[ProgressReporter] = None,
        retrievers: Optional[DeckRetrieverFactory] = None,
        max_workers: Optional[int] = None,
    ):
        self.reporter = reporter or ProgressReporter()
        self.resolver = CardResolver(
            lookup,
            reporter=self.reporter,
            max_workers=max_workers or settings_module.settings.max_lookup_workers,
        )
        self.expander = TokenExpander(lookup)
        self.assembler = assembler
        self.retrievers = retrievers or DeckRetrieverFactory([])
        self._state = MaterializerState.IDLE
        self._cancel_event = threading.Event()

    @property
    def state(self) -> MaterializerState:
        return self._state

    def cancel(self) -> None:
        """Stop the running request before its next lookup."""
        self._cancel_event.set()

    def generate(
        self,
        deck_url: Optional[str] = None,
        deck_file: Optional[str | Path] = None,
        options: Optional[MaterializeOptions] = None,
    ) -> MaterializationResult:
        """Load a deck from a URL or a file, then materialize it.

        Raises:
            ValueError: If neither or both sources are given
            DeckSourceError: If the deck cannot be loaded
            EmptyDeckError: If nothing in the deck can be printed
        """
        if deck_url and deck_file:
            raise ValueError("Give either a deck URL or a deck file, not both")
        if deck_url:
            return self.materialize_from_url(deck_url, options)
        if deck_file:
            return self.materialize_from_file(deck_file, options)
        raise ValueError("A deck URL or a deck file is required")

    def materialize_from_file(
        self, path: str | Path, options: Optional[MaterializeOptions] = None
    ) -> MaterializationResult:
        self._start()
        try:
            deck = load_deck_file(path)
        except DeckSourceError as error:
            self._fail(str(error), Stage.DECK_DETAILS)
            raise
        return self.materialize(deck, options)

    def materialize_from_url(
        self, url: str, options: Optional[MaterializeOptions] = None
    ) -> MaterializationResult:
        self._start()
        try:
            deck = self.retrievers.load(url)
        except DeckSourceError as error:
            self._fail(str(error), Stage.DECK_DETAILS)
            raise
        return self.materialize(deck, options)

    def materialize(
        self, deck: Deck, options: Optional[MaterializeOptions] = None
    ) -> MaterializationResult:
        """Resolve, expand and assemble one deck.

        Entries of ``deck`` are updated in place with their sides and tokens.
        Token entries only go to this request's manifest; ``deck.entries`` keeps
        its length, so the same deck can be materialized again.

        Returns:
            The result; ``state`` is ``errored`` (and no document is written)
            when every lookup failed in transport

        Raises:
            ValueError: If ``deck`` is None
            EmptyDeckError: If the deck is empty or nothing could be resolved
            MaterializationCancelled: If ``cancel()`` was called
            DocumentError: If the document could not be written
        """
        if deck is None:
            raise ValueError("deck must not be None")
        options = options or MaterializeOptions()
        self._start()

        if not deck.entries:
            self._fail(EMPTY_DECK_MESSAGE, Stage.DECK_DETAILS)
            raise EmptyDeckError(EMPTY_DECK_MESSAGE)

        with log_operation(
            "Materializing deck", deck=deck.name, entries=len(deck.entries)
        ):
            try:
                return self._run(deck, options)
            except MaterializationCancelled as error:
                self._fail(str(error))
                raise
            except ProxyPrinterError:
                self._state = MaterializerState.ERRORED
                raise

    def _run(self, deck: Deck, options: MaterializeOptions) -> MaterializationResult:
        entries = list(deck.entries)

        self._transition(MaterializerState.RESOLVING_ENTRIES)
        resolutions = self.resolver.resolve_all(
            entries,
            language_code=options.language_code,
            token_copies=options.token_copies,
            cancel_event=self._cancel_event,
        )
        unresolved = [r.entry for r in resolutions if not r.resolved]

        if _all_unreachable(resolutions):
            self._fail(UNREACHABLE_MESSAGE, Stage.DECK_DETAILS)
            return MaterializationResult(
                deck_name=deck.name,
                state=self._state,
                unresolved=unresolved,
                error_message=UNREACHABLE_MESSAGE,
            )

        self._check_cancelled()
        self._transition(MaterializerState.EXPANDING_TOKENS)
        token_entries = self.expander.expand_tokens(
            entries,
            options.token_copies,
            options.print_all_token_variants,
            cancel_event=self._cancel_event,
        )

        manifest = [entry for entry in entries if entry.sides]
        if not manifest:
            self._fail(NOTHING_PRINTABLE_MESSAGE, Stage.DECK_DETAILS)
            raise EmptyDeckError(NOTHING_PRINTABLE_MESSAGE)

        logger.info(
            "Deck '{}': {} printable entries, {} unresolved, {} token entries",
            deck.name,
            len(manifest),
            len(unresolved),
            len(token_entries),
        )
        self._check_cancelled()
        document_path = self.assembler.assemble(
            deck.name,
            manifest,
            output_dir=options.output_dir,
            file_name=options.output_file_name,
            save_images=options.save_intermediate_images,
        )

        self._transition(MaterializerState.COMPLETED)
        return MaterializationResult(
            deck_name=deck.name,
            state=self._state,
            manifest=manifest,
            unresolved=unresolved,
            token_entries=token_entries,
            document_path=document_path,
        )

    def _start(self) -> None:
        if self._state is not MaterializerState.IDLE:
            self.reporter.reset()
            self._cancel_event.clear()
        self._state = MaterializerState.IDLE

    def _check_cancelled(self) -> None:
        if self._cancel_event.is_set():
            raise MaterializationCancelled("Materialization was cancelled")

    def _transition(self, state: MaterializerState) -> None:
        logger.debug("Materializer state {} -> {}", self._state.value, state.value)
        self._state = state

    def _fail(self, message: str, stage: Optional[Stage] = None) -> None:
        logger.error(message)
        self.reporter.error(message, stage)
        self._transition(MaterializerState.ERRORED)


def _all_unreachable(resolutions: Sequence[Resolution]) -> bool:
    return bool(resolutions) and all(
        resolution.outcome is Outcome.TRANSPORT_FAILURE for resolution in resolutions
    )
