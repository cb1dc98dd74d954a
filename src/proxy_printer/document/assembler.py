"""PDF document assembly.

All side images are downloaded up front and held in memory. Pages are then
composed as Pillow images at print resolution and appended to the PDF one at
a time, so only one rendered page is held at once.

Layout: A4 landscape, half inch margins, cards at their physical size
(63 x 88 mm) filling rows left to right. Every side is printed ``quantity``
times, in manifest order.
"""

from io import BytesIO
from pathlib import Path
from typing import Optional, Sequence

from PIL import Image

from proxy_printer.config import settings as settings_module
from proxy_printer.constants import (
    CARD_HEIGHT_MM,
    CARD_WIDTH_MM,
    PAGE_DPI,
    PAGE_HEIGHT_MM,
    PAGE_MARGIN_MM,
    PAGE_WIDTH_MM,
)
from proxy_printer.core.logging import get_logger
from proxy_printer.deck.models import CardSide, DeckEntry
from proxy_printer.document.utils import (
    ensure_unique_path,
    grid_dimensions,
    mm_to_px,
    safe_file_stem,
)
from proxy_printer.errors import DocumentError
from proxy_printer.progress import ProgressReporter, Stage
from proxy_printer.services.images import ImageDownloader, ImageSource, save_image

logger = get_logger(__name__)

NO_CARDS_MESSAGE = "No cards found in the deck"


class _PdfWriter:
    """Appends page images to a PDF file."""

    def __init__(self, path: Path, dpi: int):
        self.path = path
        self.dpi = dpi
        self.pages = 0

    def write(self, page: Image.Image) -> None:
        try:
            page.save(
                self.path,
                "PDF",
                resolution=self.dpi,
                append=self.pages > 0,
            )
        except OSError as error:
            raise DocumentError(f"Could not write {self.path}: {error}") from error
        self.pages += 1


class PdfDocumentAssembler:
    """Lays out a card manifest as a printable PDF.

    Args:
        image_source: Callable returning image bytes for a URL
        reporter: Receives SaveToDocument progress, one event per side
        max_workers: Image download threads
        dpi: Page resolution
    """

    def __init__(
        self,
        image_source: ImageSource,
        reporter: Optional[ProgressReporter] = None,
        max_workers: Optional[int] = None,
        dpi: int = PAGE_DPI,
    ):
        self.downloader = ImageDownloader(image_source, max_workers=max_workers)
        self.reporter = reporter or ProgressReporter()
        self.dpi = dpi

        self.page_size = (mm_to_px(PAGE_WIDTH_MM, dpi), mm_to_px(PAGE_HEIGHT_MM, dpi))
        self.card_size = (mm_to_px(CARD_WIDTH_MM, dpi), mm_to_px(CARD_HEIGHT_MM, dpi))
        self.margin = mm_to_px(PAGE_MARGIN_MM, dpi)
        self.columns, self.rows = grid_dimensions(
            *self.page_size, *self.card_size, self.margin
        )

    @property
    def cards_per_page(self) -> int:
        return self.columns * self.rows

    def assemble(
        self,
        deck_name: str,
        entries: Sequence[DeckEntry],
        output_dir: Optional[Path] = None,
        file_name: Optional[str] = None,
        save_images: bool = False,
    ) -> Path:
        """Write the manifest to a new PDF file.

        Args:
            deck_name: Used for the file name when ``file_name`` is not given
            entries: Resolved entries; entries without sides are ignored
            output_dir: Target folder (defaults to settings.output_dir)
            file_name: File name without extension
            save_images: Also write each downloaded image into ``output_dir``

        Returns:
            Path of the written PDF (made unique if the name was taken)

        Raises:
            DocumentError: If there is nothing to print or the file can't be written
        """
        total_sides = sum(len(entry.sides) for entry in entries)
        if total_sides == 0:
            self.reporter.error(NO_CARDS_MESSAGE, Stage.SAVE_TO_DOCUMENT)
            raise DocumentError(NO_CARDS_MESSAGE)

        folder = Path(output_dir or settings_module.settings.output_dir)
        try:
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as error:
            raise DocumentError(f"Cannot create output folder {folder}: {error}") from error

        target = folder / f"{safe_file_stem(file_name or deck_name)}.pdf"
        path = ensure_unique_path(target)
        if path != target:
            logger.info("Output exists; writing to unique file: {}", path)

        downloads = self.downloader.download(
            side for entry in entries for side in entry.sides
        )

        self.reporter.reset(Stage.SAVE_TO_DOCUMENT)
        writer = _PdfWriter(path, self.dpi)
        page: Optional[Image.Image] = None
        slot = 0
        placed = 0
        processed = 0

        for entry in entries:
            for side in entry.sides:
                processed += 1
                content = downloads.content(side)
                card = self._card_image(side, content) if content else None

                if card is None:
                    self.reporter.step(
                        Stage.SAVE_TO_DOCUMENT,
                        processed,
                        total_sides,
                        f"Image for '{side.name}' could not be added",
                    )
                    continue

                if save_images:
                    save_image(content, folder, side, entry.quantity)

                for _ in range(entry.quantity):
                    if page is None:
                        page = Image.new("RGB", self.page_size, "white")
                    page.paste(card, self._position(slot))
                    slot += 1
                    placed += 1
                    if slot == self.cards_per_page:
                        writer.write(page)
                        page, slot = None, 0

                card.close()
                self.reporter.step(Stage.SAVE_TO_DOCUMENT, processed, total_sides)

        if page is not None:
            writer.write(page)

        if writer.pages == 0:
            message = "None of the card images could be added to the document"
            self.reporter.error(message, Stage.SAVE_TO_DOCUMENT)
            raise DocumentError(message)

        logger.info("Wrote {} cards on {} page(s) to {}", placed, writer.pages, path)
        return path

    def _position(self, slot: int) -> tuple[int, int]:
        column = slot % self.columns
        row = slot // self.columns
        return (
            self.margin + column * self.card_size[0],
            self.margin + row * self.card_size[1],
        )

    def _card_image(self, side: CardSide, content: bytes) -> Optional[Image.Image]:
        try:
            with Image.open(BytesIO(content)) as image:
                return image.convert("RGB").resize(
                    self.card_size, Image.Resampling.LANCZOS
                )
        except OSError as error:
            logger.warning("Unreadable image for {}: {}", side.name, error)
            return None
