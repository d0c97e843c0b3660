import pytest
from app.core.config import Settings


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('["http://a.test", "http://b.test"]', ["http://a.test", "http://b.test"]),
        ("[http://a.test, 'http://b.test']", ["http://a.test", "http://b.test"]),
        ("http://a.test, http://b.test", ["http://a.test", "http://b.test"]),
        ("*", ["*"]),
        ("", []),
    ],
)
def test_cors_origins_formats(monkeypatch, raw, expected):
    monkeypatch.setenv("CORS_ORIGINS", raw)
    assert Settings().cors_origins == expected


def test_defaults(monkeypatch):
    monkeypatch.delenv("OPENAI_MODEL", raising=False)
    s = Settings()
    assert s.openai_model == "gpt-3.5-turbo"
    assert s.cover_cache_ttl_secs == 86400
    assert s.placeholder_cover_url == "/placeholder.svg"
