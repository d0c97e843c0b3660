from __future__ import annotations

import re

_non_alnum = re.compile(r"[^a-z0-9]+")
_ws = re.compile(r"\s+")


def normalize_text(s: str) -> str:
    """Lowercased, punctuation-free form used for loose title/author comparison."""
    s = (s or "").strip().lower()
    s = _non_alnum.sub(" ", s)
    return " ".join(s.split())


def clean_name(s: str | None) -> str:
    # Display names keep their case; only surrounding/internal runs of whitespace change.
    return _ws.sub(" ", (s or "")).strip()


def slugify(*parts: str) -> str:
    return _ws.sub("-", "-".join(parts)).lower()


def cover_cache_key(title: str, author: str | None) -> str:
    return f"cover:{title}:{author or ''}"


def escape_like(term: str, escape: str = "\\") -> str:
    # Search terms match literally; % and _ are not wildcards.
    return (
        term.replace(escape, escape * 2)
        .replace("%", f"{escape}%")
        .replace("_", f"{escape}_")
    )
