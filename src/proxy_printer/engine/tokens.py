"""Token expansion: turn tokens harvested during resolution into deck entries."""

import threading
from typing import Dict, List, Optional, Sequence
from urllib.parse import urlparse
from uuid import UUID

from proxy_printer.core.logging import get_logger
from proxy_printer.deck.models import CardSide, DeckEntry, TokenRef
from proxy_printer.engine.ports import CardLookup
from proxy_printer.errors import (
    MalformedTokenReferenceError,
    MaterializationCancelled,
    NetworkError,
)

logger = get_logger(__name__)


def token_id_from_uri(uri: str) -> UUID:
    """Extract the card identifier from a token's lookup URI.

    The identifier is the final path segment, trailing slashes ignored.

    Raises:
        MalformedTokenReferenceError: If that segment is not a UUID

    Examples:
        >>> token_id_from_uri("https://api.scryfall.com/cards/1d8b3a1c-1ff1-4a5e-8f3a-0c2a6c9e4b11/")
        UUID('1d8b3a1c-1ff1-4a5e-8f3a-0c2a6c9e4b11')
    """
    path = urlparse(uri or "").path.rstrip("/")
    segment = path.rsplit("/", 1)[-1]
    try:
        return UUID(segment)
    except ValueError as error:
        raise MalformedTokenReferenceError(
            f"Token reference '{uri}' does not end with a card identifier"
        ) from error


class TokenExpander:
    """Appends one deck entry per distinct token to a resolved deck."""

    def __init__(self, lookup: CardLookup):
        self.lookup = lookup

    def expand_tokens(
        self,
        entries: List[DeckEntry],
        copies_per_token: int,
        print_all_variants: bool = False,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[DeckEntry]:
        """Fetch every harvested token and append it to ``entries``.

        Tokens sharing a name are printed once (the first one wins) unless
        ``print_all_variants`` is set. Tokens that cannot be fetched are
        skipped.

        Raises:
            MaterializationCancelled: If ``cancel_event`` is set before a
                token lookup

        Returns:
            The entries that were appended
        """
        if copies_per_token <= 0:
            return []

        # Snapshot before appending; new entries carry no tokens of their own
        tokens: Sequence[TokenRef] = [
            token for entry in entries for token in entry.tokens
        ]
        if not print_all_variants:
            by_name: Dict[str, TokenRef] = {}
            for token in tokens:
                by_name.setdefault(token.name, token)
            tokens = list(by_name.values())

        added: List[DeckEntry] = []
        for token in tokens:
            if cancel_event is not None and cancel_event.is_set():
                logger.warning("Token expansion cancelled")
                raise MaterializationCancelled("Materialization was cancelled")
            entry = self._token_entry(token, copies_per_token)
            if entry is not None:
                entries.append(entry)
                added.append(entry)

        logger.info("Added {} token entries", len(added))
        return added

    def _token_entry(self, token: TokenRef, copies: int) -> DeckEntry | None:
        try:
            card_id = token_id_from_uri(token.lookup_uri)
        except MalformedTokenReferenceError as error:
            logger.error("Skipping token {}: {}", token.name, error)
            return None

        try:
            record = self.lookup.get_by_identifier(card_id)
        except NetworkError as error:
            logger.warning("Skipping token {}: {}", token.name, error)
            return None

        if record is None:
            logger.warning("Token {} ({}) was not found", token.name, card_id)
            return None

        return DeckEntry(
            name=token.name,
            quantity=copies,
            expansion_code=record.set_code or None,
            sides=[CardSide(record.name, record.image_url or "")],
        )
