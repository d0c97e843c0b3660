from __future__ import annotations

import json
from pathlib import Path

from app.domain.normalize import normalize_text


class FixtureCoverProvider:
    """Serves covers from a local JSON file; used for development and demos."""

    name = "fixture"

    def __init__(self, fixture_path: str):
        self.fixture_path = fixture_path
        self._data = self._load()

    def _load(self) -> dict:
        p = Path(self.fixture_path)
        if not p.exists():
            raise FileNotFoundError(f"Fixture file not found: {p}")
        raw = p.read_text(encoding="utf-8")
        return json.loads(raw)

    async def find_cover(self, *, title: str, author: str | None) -> str | None:
        q_title = normalize_text(title)
        q_author = normalize_text(author or "")

        for it in self._data.get("items", []):
            if normalize_text(it.get("title", "")) != q_title:
                continue
            # Title-only matches are fine when the caller has no author.
            if q_author and q_author not in normalize_text(it.get("author", "")):
                continue
            return it.get("cover_url")

        return None
