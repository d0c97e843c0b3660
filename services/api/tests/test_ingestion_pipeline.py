import json

import pytest
from app.core.config import settings
from app.core.errors import AdapterError, CoverLookupFailed, MalformedExtraction
from app.schemas.ingestion import IngestionStage
from app.services.ingestion.pipeline import (
    analyze_image,
    analyze_text,
    detect_text,
    parse_detected_books,
)

SHELF_TEXT = "DUNE FRANK HERBERT\nDUNE MESSIAH\n1984 GEORGE ORWELL"

THREE_BOOKS = json.dumps(
    {
        "books": [
            {"title": "Dune", "author": "Frank Herbert", "genre": "Science Fiction"},
            {"title": "Dune Messiah", "author": "Frank Herbert", "genre": "Science Fiction"},
            {"title": "1984", "author": "George Orwell", "genre": "Dystopian"},
        ]
    }
)


def test_empty_ocr_text_stops_before_completion(db_session, user, fake_ocr, fake_llm, fake_covers):
    ocr = fake_ocr(text="   ")
    llm = fake_llm(response=THREE_BOOKS)
    covers = fake_covers()

    result = analyze_image(db_session, user, b"jpeg", ocr=ocr, llm=llm, covers=covers)

    assert not result.success
    assert result.code == "no_text_detected"
    assert result.status_code == 422
    assert ocr.calls == 1
    assert llm.prompts == []
    assert covers.calls == []


def test_missing_ocr_text_is_no_text_detected(user, fake_ocr):
    result = detect_text(user, b"jpeg", ocr=fake_ocr(text=None))
    assert result.error == "No text detected in the image"


def test_detect_text_returns_ocr_output(user, fake_ocr):
    result = detect_text(user, b"jpeg", ocr=fake_ocr(text=SHELF_TEXT))
    assert result.success
    assert result.data.text == SHELF_TEXT


def test_ocr_adapter_failure_is_reported(db_session, user, fake_ocr, fake_llm):
    llm = fake_llm(response=THREE_BOOKS)
    result = analyze_image(
        db_session,
        user,
        b"jpeg",
        ocr=fake_ocr(error=AdapterError("Failed to process image")),
        llm=llm,
    )

    assert not result.success
    assert result.error == "Failed to process image"
    assert llm.prompts == []


def test_one_failed_cover_gets_placeholder(db_session, user, fake_ocr, fake_llm, fake_covers):
    covers = fake_covers(
        {
            "Dune": "https://covers.example/dune.jpg",
            "Dune Messiah": CoverLookupFailed(),
            "1984": "https://covers.example/1984.jpg",
        }
    )

    result = analyze_image(
        db_session,
        user,
        b"jpeg",
        ocr=fake_ocr(text=SHELF_TEXT),
        llm=fake_llm(response=THREE_BOOKS),
        covers=covers,
    )

    assert result.success
    preview = result.data
    assert preview.stage == IngestionStage.preview
    assert preview.text == SHELF_TEXT
    assert [(b.index, b.title, b.cover_url) for b in preview.books] == [
        (0, "Dune", "https://covers.example/dune.jpg"),
        (1, "Dune Messiah", settings.placeholder_cover_url),
        (2, "1984", "https://covers.example/1984.jpg"),
    ]
    assert len(covers.calls) == 3


def test_found_covers_are_served_from_cache_next_time(db_session, user, fake_ocr, fake_llm, fake_covers):
    covers = fake_covers({"Dune": "https://covers.example/dune.jpg"})
    llm_response = json.dumps({"books": [{"title": "Dune", "author": "Frank Herbert"}]})

    for _ in range(2):
        result = analyze_image(
            db_session,
            user,
            b"jpeg",
            ocr=fake_ocr(text="DUNE"),
            llm=fake_llm(response=llm_response),
            covers=covers,
        )
        assert result.data.books[0].cover_url == "https://covers.example/dune.jpg"

    assert covers.calls == [("Dune", "Frank Herbert")]


def test_extraction_defaults_missing_author_and_genre(user, fake_llm):
    llm = fake_llm(response=json.dumps({"books": [{"title": "Dune"}]}))

    result = analyze_text(user, SHELF_TEXT, llm=llm)

    assert result.success
    book = result.data.books[0]
    assert (book.title, book.author, book.genre) == ("Dune", "Unknown", "Unknown")
    assert SHELF_TEXT in llm.prompts[0]


def test_extraction_rejects_non_json(user, fake_llm):
    result = analyze_text(user, SHELF_TEXT, llm=fake_llm(response="Here are your books: Dune"))
    assert not result.success
    assert result.code == "malformed_extraction"
    assert result.status_code == 502


def test_extraction_without_books_key_is_malformed():
    with pytest.raises(MalformedExtraction):
        parse_detected_books({"items": []})


def test_extraction_drops_entries_without_title():
    books = parse_detected_books(
        {"books": [{"title": "  "}, "Dune", {"author": "Nobody"}, {"title": "Emma ", "author": "Austen"}]}
    )
    assert [(b.title, b.author) for b in books] == [("Emma", "Austen")]


def test_blank_text_is_rejected_without_calling_llm(user, fake_llm):
    llm = fake_llm(response=THREE_BOOKS)
    result = analyze_text(user, "  \n ", llm=llm)
    assert result.code == "no_text_detected"
    assert llm.prompts == []


def test_unexpected_llm_error_becomes_adapter_error(user, fake_llm):
    result = analyze_text(user, SHELF_TEXT, llm=fake_llm(error=RuntimeError("boom")))
    assert result.error == "Failed to analyze text"
    assert result.code == "adapter_error"


def test_pipeline_requires_user(db_session, fake_ocr):
    ocr = fake_ocr(text=SHELF_TEXT)
    result = analyze_image(db_session, None, b"jpeg", ocr=ocr)
    assert result.status_code == 401
    assert ocr.calls == 0


def test_unbuildable_cover_provider_still_yields_preview(
    db_session, user, fake_ocr, fake_llm, missing_cover_fixture
):
    result = analyze_image(
        db_session,
        user,
        b"jpeg",
        ocr=fake_ocr(text=SHELF_TEXT),
        llm=fake_llm(response=THREE_BOOKS),
    )

    assert result.success
    assert result.data.stage == IngestionStage.preview
    assert [b.cover_url for b in result.data.books] == [settings.placeholder_cover_url] * 3


def test_empty_upload_stops_before_ocr(db_session, user, fake_ocr):
    ocr = fake_ocr(text=SHELF_TEXT)
    result = analyze_image(db_session, user, b"", ocr=ocr)
    assert result.error == "No image data provided"
    assert ocr.calls == 0
