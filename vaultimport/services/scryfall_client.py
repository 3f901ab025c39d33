"""
Remote catalog client for the Scryfall API.

Fetches one set's metadata and every printing in it. Respects Scryfall's
rate limit between paginated requests.

API docs: https://scryfall.com/docs/api
"""

import asyncio
import logging
from datetime import date
from typing import Any

import httpx

from vaultimport.config import settings
from vaultimport.models.records import CanonicalCard, RemoteSet

logger = logging.getLogger(__name__)


class RemoteCatalogError(Exception):
    """Raised when fetching from the remote catalog fails."""

    pass


def _parse_date(value: Any) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        return None


def card_from_scryfall(data: dict[str, Any]) -> CanonicalCard:
    """Convert a Scryfall card object to a canonical card."""
    return CanonicalCard(
        id=str(data["id"]),
        name=str(data.get("name", "")),
        set_code=str(data.get("set", "")).lower(),
        collector_number=str(data.get("collector_number", "")),
    )


class ScryfallClient:
    """
    Async Scryfall client.

    An httpx.AsyncClient may be injected; otherwise one is opened per call.
    """

    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        rate_limit_delay: float | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url or settings.scryfall_api_url).rstrip("/")
        self.headers = {
            "User-Agent": user_agent or settings.scryfall_user_agent,
            "Accept": "application/json",
        }
        self.timeout = settings.scryfall_timeout if timeout is None else timeout
        self.rate_limit_delay = (
            settings.scryfall_rate_limit_delay if rate_limit_delay is None else rate_limit_delay
        )
        self._http = http

    async def fetch_set(self, code: str) -> RemoteSet:
        """
        Fetch a set and all of its printings.

        Child sets (tokens, promos) are not followed.

        Raises:
            RemoteCatalogError: If any request fails
        """
        code = code.strip().lower()
        try:
            if self._http is not None:
                return await self._fetch_set(self._http, code)
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                return await self._fetch_set(client, code)
        except httpx.HTTPStatusError as e:
            raise RemoteCatalogError(
                f"Failed to fetch set {code}: HTTP {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise RemoteCatalogError(f"Failed to fetch set {code}: {e}") from e

    async def _fetch_set(self, client: httpx.AsyncClient, code: str) -> RemoteSet:
        response = await client.get(f"{self.base_url}/sets/{code}", headers=self.headers)
        response.raise_for_status()
        data = response.json()

        cards = await self._fetch_cards(client, code)
        logger.info("Fetched set %s (%s): %d cards", code, data.get("name"), len(cards))

        return RemoteSet(
            code=str(data.get("code", code)).lower(),
            name=str(data.get("name", code.upper())),
            cards=tuple(cards),
            released_at=_parse_date(data.get("released_at")),
            set_type=data.get("set_type"),
            parent_set_code=data.get("parent_set_code"),
            card_count=int(data.get("card_count") or len(cards)),
        )

    async def _fetch_cards(self, client: httpx.AsyncClient, code: str) -> list[CanonicalCard]:
        cards: list[CanonicalCard] = []
        url = f"{self.base_url}/cards/search"
        params: dict[str, str] | None = {"q": f"set:{code} unique:prints"}
        page = 1

        while True:
            response = await client.get(url, params=params, headers=self.headers)
            # Scryfall answers an empty search with 404
            if response.status_code == 404:
                break
            response.raise_for_status()
            data = response.json()

            cards.extend(card_from_scryfall(card) for card in data.get("data", []))

            if not data.get("has_more") or not data.get("next_page"):
                break

            logger.debug("Fetched page %d for set %s (%d cards so far)", page, code, len(cards))
            url = data["next_page"]
            params = None  # Next page URL includes params
            page += 1
            await asyncio.sleep(self.rate_limit_delay)

        return cards
