"""Card image download service.

Downloads every distinct side image of a deck once, concurrently, and can
keep a copy of each image next to the generated document.
"""

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from proxy_printer.config import settings as settings_module
from proxy_printer.core.logging import get_logger
from proxy_printer.deck.models import CardSide
from proxy_printer.document.utils import image_file_name
from proxy_printer.errors import NetworkError

logger = get_logger(__name__)

ImageSource = Callable[[str], Optional[bytes]]


@dataclass
class ImageResult:
    """Result of downloading one side image."""

    side: CardSide
    content: Optional[bytes] = None
    error_message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.content is not None


@dataclass
class DownloadSummary:
    """Summary of a batch download."""

    images: Dict[CardSide, ImageResult]
    total_duration: float

    @property
    def successful(self) -> int:
        return sum(1 for result in self.images.values() if result.success)

    @property
    def failed(self) -> List[ImageResult]:
        return [result for result in self.images.values() if not result.success]

    def content(self, side: CardSide) -> Optional[bytes]:
        result = self.images.get(side)
        return result.content if result else None


class ImageDownloader:
    """Fetches side images concurrently.

    Args:
        source: Callable returning image bytes for a URL (None if gone)
        max_workers: Download threads (defaults to settings.max_download_workers)
    """

    def __init__(self, source: ImageSource, max_workers: Optional[int] = None):
        self.source = source
        self.max_workers = max_workers or settings_module.settings.max_download_workers

    def download(
        self,
        sides: Iterable[CardSide],
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> DownloadSummary:
        """Download each distinct side once.

        ``on_progress(done, total)`` is called from the calling thread after
        every finished download.
        """
        unique = list(dict.fromkeys(sides))
        total = len(unique)
        start_time = time.time()
        results: Dict[CardSide, ImageResult] = {}

        if not unique:
            return DownloadSummary(images=results, total_duration=0.0)

        logger.info("Downloading {} card images", total)
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_side = {
                executor.submit(self._download_one, side): side for side in unique
            }

            for future in as_completed(future_to_side):
                side = future_to_side[future]
                result = future.result()
                results[side] = result
                if result.success:
                    logger.debug("Fetched {}", side.name)
                else:
                    logger.warning("Failed {}: {}", side.name, result.error_message)
                if on_progress is not None:
                    on_progress(len(results), total)

        summary = DownloadSummary(images=results, total_duration=time.time() - start_time)
        logger.info(
            "Downloaded {}/{} images in {:.1f}s",
            summary.successful,
            total,
            summary.total_duration,
        )
        return summary

    def _download_one(self, side: CardSide) -> ImageResult:
        if not side.image_url:
            return ImageResult(side, error_message="no image URL")
        try:
            content = self.source(side.image_url)
        except NetworkError as error:
            return ImageResult(side, error_message=str(error))
        if not content:
            return ImageResult(side, error_message="image not found")
        return ImageResult(side, content=content)


def save_image(content: bytes, folder: Path, side: CardSide, quantity: int) -> Path:
    """Write a downloaded image as ``{quantity}_{name}.jpg`` inside ``folder``."""
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / image_file_name(side.name, quantity)
    path.write_bytes(content)
    logger.debug("Saved image {}", path)
    return path
