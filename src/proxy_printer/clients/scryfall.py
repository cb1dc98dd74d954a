"""Scryfall API client implementing the card lookup port.

Endpoints used:
- /cards/{set}/{number}[/{lang}]  exact printing
- /cards/search                   name search across prints and languages
- /cards/{id}                     card (token) by identifier

Scryfall asks clients to keep to roughly ten requests per second, so every
API call goes through a shared RateLimiter. Image downloads hit the CDN and
are not limited.
"""

from typing import Any, List, Optional, Sequence
from urllib.parse import quote
from uuid import UUID

import requests

from proxy_printer.config import settings as settings_module
from proxy_printer.core.logging import get_logger
from proxy_printer.engine.ports import CardRecord
from proxy_printer.errors import NetworkError
from proxy_printer.net import RateLimiter, RetryConfig, fetch_bytes, fetch_json

logger = get_logger(__name__)


class ScryfallClient:
    """Card lookups against the Scryfall REST API."""

    def __init__(
        self,
        api_base: Optional[str] = None,
        session: Optional[requests.Session] = None,
        retry_config: Optional[RetryConfig] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        settings = settings_module.settings
        self.api_base = (api_base or settings.scryfall_api_base).rstrip("/")
        self.session = session or requests.Session()
        self.retry_config = retry_config or RetryConfig.from_settings()
        self.rate_limiter = rate_limiter or RateLimiter(settings.api_request_interval)

    def find(
        self,
        name: str,
        set_code: str,
        collector_number: str,
        language: Optional[str] = None,
    ) -> Optional[CardRecord]:
        path = f"/cards/{quote(set_code.lower())}/{quote(collector_number)}"
        if language:
            path += f"/{quote(language.lower())}"

        logger.debug("Looking up {} as {}", name, path)
        data = self._get_json(path)
        return self._record(data, path) if data is not None else None

    def search(
        self, name: str, include_extra_prints: bool, include_multilingual: bool
    ) -> Sequence[Optional[CardRecord]]:
        # Exact name match; quotes would end the query term
        params = {"q": '!"{}"'.format(name.replace('"', ""))}
        if include_extra_prints:
            params.update(
                unique="prints", include_extras="true", include_variations="true"
            )
        if include_multilingual:
            params["include_multilingual"] = "true"

        logger.debug("Searching for {} ({})", name, params)
        data = self._get_json("/cards/search", params=params)
        if data is None:
            return []

        cards = data.get("data")
        if not isinstance(cards, list):
            raise NetworkError(
                "Unexpected search response from Scryfall", url=self._url("/cards/search")
            )

        records: List[Optional[CardRecord]] = [
            CardRecord.from_scryfall(card) if isinstance(card, dict) else None
            for card in cards
        ]
        return records

    def get_by_identifier(self, card_id: UUID) -> Optional[CardRecord]:
        path = f"/cards/{card_id}"
        data = self._get_json(path)
        return self._record(data, path) if data is not None else None

    def download_image(self, url: str) -> Optional[bytes]:
        """Download a card image (None if it no longer exists)."""
        return fetch_bytes(url, session=self.session, config=self.retry_config)

    def _url(self, path: str) -> str:
        return f"{self.api_base}{path}"

    def _get_json(
        self, path: str, params: Optional[dict[str, str]] = None
    ) -> Optional[dict[str, Any]]:
        return fetch_json(
            self._url(path),
            session=self.session,
            params=params,
            headers={"Accept": "application/json"},
            config=self.retry_config,
            rate_limiter=self.rate_limiter,
        )

    def _record(self, data: Any, path: str) -> CardRecord:
        if not isinstance(data, dict):
            raise NetworkError(
                f"Unexpected card response from Scryfall for {path}", url=self._url(path)
            )
        return CardRecord.from_scryfall(data)
