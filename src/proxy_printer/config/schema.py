"""Options accepted by a materialization request.

The CLI and library callers build a ``MaterializeOptions`` and hand it to the
facade; validation failures surface as pydantic ``ValidationError``.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from proxy_printer.constants import MAX_TOKEN_COPIES, SUPPORTED_LANGUAGES


def is_supported_language(language_code: Optional[str]) -> bool:
    """Return True when the code is one Scryfall prints cards in."""
    return language_code is not None and language_code.lower() in SUPPORTED_LANGUAGES


def available_languages() -> str:
    """Comma separated list of supported language codes, for help texts."""
    return ", ".join(SUPPORTED_LANGUAGES)


class MaterializeOptions(BaseModel):
    """Per-request options for turning a deck into a document."""

    language_code: Optional[str] = Field(
        None, description="Preferred print language (falls back to any language)"
    )
    token_copies: int = Field(
        0,
        ge=0,
        le=MAX_TOKEN_COPIES,
        description="Copies of each related token to add (0 disables tokens)",
    )
    print_all_token_variants: bool = Field(
        False, description="Keep every token print instead of one per token name"
    )
    save_intermediate_images: bool = Field(
        False, description="Also write downloaded card images next to the document"
    )
    output_dir: Optional[Path] = Field(None, description="Folder for the document")
    output_file_name: Optional[str] = Field(
        None, description="Document file name without extension (defaults to deck name)"
    )

    @field_validator("language_code", mode="before")
    @classmethod
    def validate_language(cls, v):
        """Normalize and check the language code against the known set."""
        if v is None:
            return None
        v = str(v).strip().lower()
        if not v:
            return None
        if not is_supported_language(v):
            raise ValueError(
                f"Unsupported language '{v}'. Must be one of: {available_languages()}"
            )
        return v

    @field_validator("output_file_name")
    @classmethod
    def validate_file_name(cls, v: Optional[str]) -> Optional[str]:
        """Reject names that would escape the output folder."""
        if v is None:
            return None
        v = v.strip()
        if not v:
            return None
        if "/" in v or "\\" in v:
            raise ValueError("Output file name must not contain path separators")
        return v
