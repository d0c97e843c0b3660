from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlparse

import httpx

from app.core.config import settings


@dataclass(frozen=True)
class FetchedImage:
    content: bytes
    content_type: str


def is_proxyable(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


async def fetch_image(url: str) -> FetchedImage:
    if not is_proxyable(url):
        raise ValueError(f"Refusing to fetch non-http(s) URL: {url}")

    async with httpx.AsyncClient(
        timeout=settings.external_timeout_secs, follow_redirects=True
    ) as client:
        resp = await client.get(url, headers={"User-Agent": settings.user_agent})
        resp.raise_for_status()
        return FetchedImage(
            content=resp.content,
            content_type=resp.headers.get("content-type") or "image/jpeg",
        )
