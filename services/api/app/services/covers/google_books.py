from __future__ import annotations

import httpx

from app.core.config import settings
from app.core.errors import CoverLookupFailed


class GoogleBooksCoverProvider:
    name = "google_books"

    BASE = "https://www.googleapis.com/books/v1/volumes"

    def __init__(self, *, api_key: str | None, timeout: float = 15.0):
        self.api_key = api_key
        self.timeout = timeout

    async def find_cover(self, *, title: str, author: str | None) -> str | None:
        query = f"{title} {author}" if author else title
        params = {"q": query}
        if self.api_key:
            params["key"] = self.api_key

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(
                    self.BASE, params=params, headers={"User-Agent": settings.user_agent}
                )
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise CoverLookupFailed() from exc

        items = data.get("items") or []
        if not items:
            return None
        image_links = (items[0].get("volumeInfo") or {}).get("imageLinks") or {}
        thumbnail = image_links.get("thumbnail")
        if not thumbnail:
            return None
        return thumbnail.replace("http://", "https://", 1)
