"""Card Lookup Port and the card records it returns.

The engine only talks to the card database through ``CardLookup``. Records
are immutable snapshots of one API response, built from Scryfall card JSON.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence, Tuple
from uuid import UUID

from proxy_printer.constants import IMAGE_SIZE, TOKEN_COMPONENT


@dataclass(frozen=True)
class CardFace:
    name: str
    image_url: Optional[str] = None


@dataclass(frozen=True)
class RelatedPart:
    """Entry of a card's ``all_parts`` list (tokens, meld parts, combo pieces)."""

    name: str
    component: str
    uri: str

    @property
    def is_token(self) -> bool:
        return self.component == TOKEN_COMPONENT


@dataclass(frozen=True)
class CardRecord:
    """A card database record, as returned by a single lookup."""

    name: str
    language: str = ""
    set_code: str = ""
    etched_available: bool = False
    faces: Tuple[CardFace, ...] = ()
    image_url: Optional[str] = None
    related_parts: Tuple[RelatedPart, ...] = field(default_factory=tuple)

    @property
    def related_tokens(self) -> Tuple[RelatedPart, ...]:
        return tuple(part for part in self.related_parts if part.is_token)

    @classmethod
    def from_scryfall(cls, data: dict[str, Any]) -> "CardRecord":
        """Build a record from a Scryfall card object."""
        faces = tuple(
            CardFace(
                name=face.get("name") or "",
                image_url=_image_url(face.get("image_uris")),
            )
            for face in data.get("card_faces") or []
        )
        parts = tuple(
            RelatedPart(
                name=part.get("name") or "",
                component=part.get("component") or "",
                uri=part.get("uri") or "",
            )
            for part in data.get("all_parts") or []
        )
        return cls(
            name=data.get("name") or "",
            language=data.get("lang") or "",
            set_code=data.get("set") or "",
            etched_available=data.get("tcgplayer_etched_id") is not None,
            faces=faces,
            image_url=_image_url(data.get("image_uris")),
            related_parts=parts,
        )


def _image_url(image_uris: Optional[dict[str, str]]) -> Optional[str]:
    if not image_uris:
        return None
    return image_uris.get(IMAGE_SIZE) or None


class CardLookup(Protocol):
    """What the engine needs from a card database.

    Implementations return None / an empty list when nothing matches and
    raise ``NetworkError`` for transport failures.
    """

    def find(
        self,
        name: str,
        set_code: str,
        collector_number: str,
        language: Optional[str] = None,
    ) -> Optional[CardRecord]:
        """Look up one specific printing."""
        ...

    def search(
        self, name: str, include_extra_prints: bool, include_multilingual: bool
    ) -> Sequence[Optional[CardRecord]]:
        """Search cards by name."""
        ...

    def get_by_identifier(self, card_id: UUID) -> Optional[CardRecord]:
        """Fetch a card by its database identifier."""
        ...
