"""CLI command handlers.

Each handler takes plain parameters and returns a Result instead of raising,
so the click command stays a thin dispatcher and handlers are testable
without a click context.
"""

from pathlib import Path
from typing import Any, Optional

from proxy_printer.clients.archidekt import ArchidektDeckRetriever
from proxy_printer.clients.scryfall import ScryfallClient
from proxy_printer.config import settings as settings_module
from proxy_printer.config.schema import MaterializeOptions
from proxy_printer.deck.sources import DeckRetrieverFactory
from proxy_printer.document.assembler import PdfDocumentAssembler
from proxy_printer.engine.materializer import DeckMaterializer, MaterializationResult
from proxy_printer.errors import ProxyPrinterError
from proxy_printer.progress import ProgressReporter
from proxy_printer.result import Result, try_operation


def build_materializer(
    reporter: ProgressReporter, max_workers: Optional[int] = None
) -> DeckMaterializer:
    """Wire the facade to Scryfall, Archidekt and the PDF assembler."""
    client = ScryfallClient()
    assembler = PdfDocumentAssembler(client.download_image, reporter=reporter)
    retrievers = DeckRetrieverFactory([ArchidektDeckRetriever()])
    return DeckMaterializer(
        client,
        assembler,
        reporter=reporter,
        retrievers=retrievers,
        max_workers=max_workers,
    )


def summarize(result: MaterializationResult) -> dict[str, Any]:
    return {
        "deck": result.deck_name,
        "state": result.state.value,
        "document": str(result.document_path) if result.document_path else None,
        "cards": result.card_count,
        "entries": len(result.manifest),
        "unresolved": [entry.name for entry in result.unresolved],
        "tokens": [entry.name for entry in result.token_entries],
    }


def handle_materialize(
    deck_file: Optional[str | Path] = None,
    deck_url: Optional[str] = None,
    *,
    language_code: Optional[str] = None,
    token_copies: Optional[int] = None,
    print_all_tokens: bool = False,
    save_images: bool = False,
    output_dir: Optional[Path] = None,
    output_name: Optional[str] = None,
    workers: Optional[int] = None,
    reporter: Optional[ProgressReporter] = None,
    materializer: Optional[DeckMaterializer] = None,
) -> Result:
    """Handle the materialize command.

    Args:
        deck_file: Deck-list file to print
        deck_url: Online deck to print (used instead of ``deck_file``)
        language_code: Preferred print language
        token_copies: Copies per related token (defaults to settings)
        print_all_tokens: Keep every token print instead of one per name
        save_images: Also save the downloaded card images
        output_dir: Folder for the document
        output_name: Document name without extension
        workers: Concurrent card lookups
        reporter: Progress reporter to notify
        materializer: Pre-built facade (built from settings if None)

    Returns:
        Result containing a summary dict of the generated document
    """

    def run_materialize():
        options = MaterializeOptions(
            language_code=language_code,
            token_copies=(
                settings_module.settings.default_token_copies
                if token_copies is None
                else token_copies
            ),
            print_all_token_variants=print_all_tokens,
            save_intermediate_images=save_images,
            output_dir=output_dir,
            output_file_name=output_name,
        )
        engine = materializer or build_materializer(
            reporter or ProgressReporter(), max_workers=workers
        )
        result = engine.generate(deck_url=deck_url, deck_file=deck_file, options=options)
        if not result.ok:
            raise ProxyPrinterError(result.error_message or "Deck materialization failed")
        return summarize(result)

    return try_operation(run_materialize)
