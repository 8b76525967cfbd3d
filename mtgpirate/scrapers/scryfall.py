"""Scryfall REST client for card image lookups.

Two lookups are supported:
    /cards/{set}/{number}       exact printing
    /cards/search?q=!"name"     name search, optionally narrowed to a set

Scryfall asks for at most 10 requests per second; pacing is the
caller's job (see services.image_enricher.RateLimiter).
"""

from typing import Any

import httpx

from mtgpirate.config import settings as default_settings

IMAGE_SIZES = ("small", "normal", "large", "png", "art_crop", "border_crop")
DEFAULT_IMAGE_SIZE = "normal"


class FetchError(Exception):
    """Raised when a Scryfall request fails."""

    pass


def extract_image_url(card: dict[str, Any], size: str = DEFAULT_IMAGE_SIZE) -> str | None:
    """Image URL of a Scryfall card object.

    Double-faced cards carry no top-level image_uris; their front face
    is used instead.

    Args:
        card: Scryfall card JSON
        size: One of IMAGE_SIZES

    Returns:
        URL string, or None if the card has no image in that size
    """
    image_uris = card.get("image_uris")
    if isinstance(image_uris, dict) and image_uris.get(size):
        return str(image_uris[size])

    faces = card.get("card_faces")
    if isinstance(faces, list) and faces:
        face_uris = faces[0].get("image_uris")
        if isinstance(face_uris, dict) and face_uris.get(size):
            return str(face_uris[size])

    return None


class ScryfallClient:
    """Async Scryfall client.

    The httpx client may be injected for connection reuse; otherwise
    one is created per request.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._client = client
        self._base_url = (base_url or default_settings.scryfall_api_url).rstrip("/")
        self._timeout = timeout if timeout is not None else default_settings.http_timeout

    async def get_card(self, set_code: str, collector_number: str) -> dict[str, Any]:
        """Fetch one printing by set code and collector number.

        Raises:
            FetchError: If the request fails or the card does not exist
        """
        url = f"{self._base_url}/cards/{set_code.lower()}/{collector_number}"
        return await self._get_json(url, None, f"{set_code} #{collector_number}")

    async def search_card(self, name: str, set_code: str | None = None) -> dict[str, Any] | None:
        """Search for a card by exact name, optionally within a set.

        Returns:
            First matching printing, or None when Scryfall finds nothing

        Raises:
            FetchError: If the request fails for any reason other than no match
        """
        query = f'!"{name}"'
        if set_code:
            query += f" set:{set_code.lower()}"

        try:
            data = await self._get_json(
                f"{self._base_url}/cards/search",
                {"q": query, "unique": "prints"},
                name,
            )
        except FetchError as e:
            # Scryfall answers an empty search with 404
            if isinstance(e.__cause__, httpx.HTTPStatusError) and (
                e.__cause__.response.status_code == 404
            ):
                return None
            raise

        results = data.get("data") or []
        return results[0] if results else None

    async def _get_json(
        self,
        url: str,
        params: dict[str, str] | None,
        label: str,
    ) -> dict[str, Any]:
        try:
            if self._client is not None:
                response = await self._client.get(url, params=params)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url, params=params)
            response.raise_for_status()
            data: dict[str, Any] = response.json()
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"Failed to fetch {label} from Scryfall: HTTP {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise FetchError(f"Failed to fetch {label} from Scryfall: {e}") from e
        except ValueError as e:
            raise FetchError(f"Invalid JSON from Scryfall for {label}") from e

        return data
