"""Exception hierarchy for Proxy Printer.

Per-entry problems (card not found, missing image, malformed token link) are
soft failures: the engine logs them and moves on. Only deck-level problems
escape to the caller.
"""


class ProxyPrinterError(Exception):
    """Base exception for all Proxy Printer errors.

    All custom exceptions inherit from this base class for easy catching.
    """

    pass


class NetworkError(ProxyPrinterError):
    """Network-related errors (API calls, image downloads, timeouts)."""

    def __init__(self, message: str, *, url: str | None = None, status: int | None = None):
        super().__init__(message)
        self.url = url
        self.status = status


class ValidationError(ProxyPrinterError):
    """Validation errors (invalid input, malformed data)."""

    pass


class DeckParsingError(ValidationError):
    """Deck file parsing errors (unreadable file, unusable content)."""

    pass


class MalformedTokenReferenceError(ValidationError):
    """A token link whose last path segment is not a card identifier."""

    pass


class CardNotFoundError(ProxyPrinterError):
    """No card database record satisfied the entry's qualifiers."""

    def __init__(self, card_name: str):
        super().__init__(f"Card '{card_name}' was not found")
        self.card_name = card_name


class MissingImageError(ProxyPrinterError):
    """A card record was found but has no usable image."""

    def __init__(self, card_name: str):
        super().__init__(f"Card '{card_name}' has no image")
        self.card_name = card_name


class DeckSourceError(ProxyPrinterError):
    """Deck could not be loaded from a file or an online deck builder."""

    pass


class EmptyDeckError(ProxyPrinterError):
    """Deck has no entries, or none of its entries produced a printable side."""

    pass


class MaterializationCancelled(ProxyPrinterError):
    """Materialization was cancelled before all entries were resolved."""

    pass


class DocumentError(ProxyPrinterError):
    """Document generation errors (layout, rendering, file I/O)."""

    pass

