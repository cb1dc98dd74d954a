"""Pure helpers for document and image file naming and page geometry."""

import re
from datetime import datetime, timezone
from pathlib import Path

from proxy_printer.constants import DEFAULT_DOCUMENT_NAME, FACE_SEPARATOR

MM_PER_INCH = 25.4

_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def safe_file_stem(value: str, default: str = DEFAULT_DOCUMENT_NAME) -> str:
    """Make a name usable as a file name, keeping it readable.

    Examples:
        >>> safe_file_stem("Fire // Ice")
        'Fire-Ice'
        >>> safe_file_stem("What? Deck")
        'What_ Deck'
    """
    value = value.replace(FACE_SEPARATOR, "-")
    value = _UNSAFE_CHARS.sub("_", value).strip().strip(".")
    return value or default


def image_file_name(name: str, quantity: int) -> str:
    """File name of a saved card image, e.g. ``4_Fire-Ice.jpg``."""
    return f"{quantity}_{safe_file_stem(name, default='card')}.jpg"


def ensure_unique_path(path: Path) -> Path:
    """If a file already exists at path, return a unique path with a timestamp suffix."""
    if not path.exists():
        return path
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    candidate = path.with_name(f"{path.stem}_{stamp}{path.suffix}")
    counter = 1
    while candidate.exists():
        candidate = path.with_name(f"{path.stem}_{stamp}_{counter}{path.suffix}")
        counter += 1
    return candidate


def mm_to_px(value_mm: float, dpi: int) -> int:
    return round(value_mm / MM_PER_INCH * dpi)


def grid_dimensions(
    page_width: int, page_height: int, card_width: int, card_height: int, margin: int
) -> tuple[int, int]:
    """Columns and rows of cards that fit inside the page margins.

    Examples:
        >>> grid_dimensions(3508, 2480, 744, 1039, 150)
        (4, 2)
    """
    columns = (page_width - 2 * margin) // card_width
    rows = (page_height - 2 * margin) // card_height
    return max(1, columns), max(1, rows)
