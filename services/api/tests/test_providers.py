import httpx
import pytest
from app.core.errors import AdapterError, CoverLookupFailed
from app.services.covers.google_books import GoogleBooksCoverProvider
from app.services.vision.google_vision import GoogleVisionProvider


@pytest.fixture()
def mock_http(monkeypatch):
    real_client = httpx.AsyncClient

    def install(handler):
        monkeypatch.setattr(
            httpx,
            "AsyncClient",
            lambda **kw: real_client(transport=httpx.MockTransport(handler), **kw),
        )

    return install


@pytest.mark.asyncio
async def test_google_books_returns_https_thumbnail(mock_http):
    seen = {}

    def handler(request):
        seen["q"] = request.url.params["q"]
        return httpx.Response(
            200,
            json={"items": [{"volumeInfo": {"imageLinks": {"thumbnail": "http://books.example/dune.jpg"}}}]},
        )

    mock_http(handler)
    provider = GoogleBooksCoverProvider(api_key=None)

    assert await provider.find_cover(title="Dune", author="Frank Herbert") == "https://books.example/dune.jpg"
    assert seen["q"] == "Dune Frank Herbert"


@pytest.mark.asyncio
async def test_google_books_without_results(mock_http):
    mock_http(lambda request: httpx.Response(200, json={"totalItems": 0}))
    provider = GoogleBooksCoverProvider(api_key="k")
    assert await provider.find_cover(title="Nothing", author=None) is None


@pytest.mark.asyncio
async def test_google_books_http_error(mock_http):
    mock_http(lambda request: httpx.Response(503))
    provider = GoogleBooksCoverProvider(api_key=None)
    with pytest.raises(CoverLookupFailed):
        await provider.find_cover(title="Dune", author=None)


@pytest.mark.asyncio
async def test_vision_returns_first_annotation(mock_http):
    def handler(request):
        assert request.url.params["key"] == "vision-key"
        return httpx.Response(
            200,
            json={
                "responses": [
                    {"textAnnotations": [{"description": "DUNE\nHERBERT"}, {"description": "DUNE"}]}
                ]
            },
        )

    mock_http(handler)
    provider = GoogleVisionProvider(api_key="vision-key", endpoint="https://vision.example/annotate")

    assert await provider.detect_text(b"jpeg") == "DUNE\nHERBERT"


@pytest.mark.asyncio
async def test_vision_without_annotations(mock_http):
    mock_http(lambda request: httpx.Response(200, json={"responses": [{}]}))
    provider = GoogleVisionProvider(api_key="k", endpoint="https://vision.example/annotate")
    assert await provider.detect_text(b"jpeg") is None


@pytest.mark.asyncio
async def test_vision_requires_api_key():
    provider = GoogleVisionProvider(api_key=None, endpoint="https://vision.example/annotate")
    with pytest.raises(AdapterError):
        await provider.detect_text(b"jpeg")
