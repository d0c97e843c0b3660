from __future__ import annotations

import base64

import httpx

from app.core.config import settings
from app.core.errors import AdapterError


class GoogleVisionProvider:
    """Text detection through the Cloud Vision REST API (images:annotate)."""

    name = "google_vision"

    def __init__(
        self,
        *,
        api_key: str | None,
        endpoint: str,
        timeout: float = 15.0,
    ):
        self.api_key = api_key
        self.endpoint = endpoint
        self.timeout = timeout

    def _request_body(self, image_bytes: bytes) -> dict:
        return {
            "requests": [
                {
                    "image": {"content": base64.b64encode(image_bytes).decode("ascii")},
                    "features": [{"type": "TEXT_DETECTION"}],
                }
            ]
        }

    async def detect_text(self, image_bytes: bytes) -> str | None:
        if not self.api_key:
            raise AdapterError("OCR service is not configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    self.endpoint,
                    params={"key": self.api_key},
                    json=self._request_body(image_bytes),
                    headers={"User-Agent": settings.user_agent},
                )
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise AdapterError("Failed to process image") from exc

        responses = data.get("responses") or []
        if not responses:
            return None

        first = responses[0] or {}
        if first.get("error"):
            raise AdapterError(first["error"].get("message") or "Failed to process image")

        # The first annotation is the whole detected text block.
        annotations = first.get("textAnnotations") or []
        if not annotations:
            return None
        return annotations[0].get("description") or ""
