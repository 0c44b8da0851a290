# skyanki/anki.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .errors import AnkiConnectError

LOGGER = logging.getLogger(__name__)

DEFAULT_URL = "http://localhost:8765"
API_VERSION = 6


class AnkiConnect:
    def __init__(
        self,
        url: str = DEFAULT_URL,
        *,
        client: Optional[httpx.AsyncClient] = None,
        version: int = API_VERSION,
        timeout: float = 30,
    ):
        self.url = url
        self.version = version
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "AnkiConnect":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def invoke(self, action: str, **params: Any) -> Any:
        """Send request to AnkiConnect API."""
        payload: Dict[str, Any] = {"action": action, "version": self.version}
        if params:
            payload["params"] = params

        try:
            res = await self._client.post(self.url, json=payload)
            res.raise_for_status()
            result = res.json()
        except httpx.RequestError as e:
            raise AnkiConnectError(
                "Could not connect to AnkiConnect. "
                "Make sure Anki is running with AnkiConnect installed."
            ) from e
        except httpx.HTTPStatusError as e:
            raise AnkiConnectError(f"Request failed: {e}") from e
        except ValueError as e:
            raise AnkiConnectError(f"Malformed AnkiConnect response: {e}") from e

        if result.get("error"):
            raise AnkiConnectError(f"AnkiConnect error: {result['error']}")
        return result.get("result")

    async def create_deck(self, deck_name: str) -> int:
        deck_id = await self.invoke("createDeck", deck=deck_name)
        LOGGER.debug("Deck '%s' ready", deck_name)
        return deck_id

    async def add_note(self, note: Dict[str, Any]) -> int:
        return await self.invoke("addNote", note=note)

    async def sync(self) -> None:
        await self.invoke("sync")
        LOGGER.info("Anki collection synced")
