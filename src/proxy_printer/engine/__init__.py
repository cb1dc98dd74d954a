"""Card identity resolution and deck materialization."""

from .materializer import DeckMaterializer, MaterializationResult, MaterializerState
from .ports import CardFace, CardLookup, CardRecord, RelatedPart
from .resolver import CardResolver, Outcome, Resolution
from .tokens import TokenExpander, token_id_from_uri

__all__ = [
    "CardFace",
    "CardLookup",
    "CardRecord",
    "CardResolver",
    "DeckMaterializer",
    "MaterializationResult",
    "MaterializerState",
    "Outcome",
    "RelatedPart",
    "Resolution",
    "TokenExpander",
    "token_id_from_uri",
]
