import random
from datetime import datetime, timezone

from app.models import Author, Book, Bookshelf, BookshelfBook, Genre
from app.services.analytics import (
    author_report,
    count_by_month,
    count_names,
    genre_report,
    timeline_report,
)


def _shelve(db, shelf, title, author=None, genre=None, added_at=None):
    book = Book(
        title=title,
        author_id=_named(db, Author, author),
        genre_id=_named(db, Genre, genre),
    )
    db.add(book)
    db.flush()
    link = BookshelfBook(book_id=book.id, bookshelf_id=shelf.id)
    if added_at is not None:
        link.added_at = added_at
    db.add(link)
    db.commit()
    return book


def _named(db, model, name):
    if name is None:
        return None
    row = db.query(model).filter_by(name=name).one_or_none()
    if row is None:
        row = model(name=name)
        db.add(row)
        db.flush()
    return row.id


def _shelf(db, user, name="Default"):
    shelf = Bookshelf(user_id=user.id, name=name)
    db.add(shelf)
    db.commit()
    return shelf


def test_genre_and_author_reports_for_small_library(db_session, user):
    shelf = _shelf(db_session, user)
    _shelve(db_session, shelf, "Dune", "Herbert", "SciFi")
    _shelve(db_session, shelf, "Dune Messiah", "Herbert", "SciFi")
    _shelve(db_session, shelf, "1984", "Orwell", "Dystopian")

    genres = genre_report(db_session, user)
    authors = author_report(db_session, user)

    assert genres.success
    assert [(g.name, g.value) for g in genres.data] == [("SciFi", 2), ("Dystopian", 1)]
    assert [(a.name, a.books) for a in authors.data] == [("Herbert", 2), ("Orwell", 1)]


def test_reports_are_empty_without_shelves(db_session, user):
    assert genre_report(db_session, user).data == []
    assert author_report(db_session, user).data == []
    assert timeline_report(db_session, user).data == []


def test_reports_only_see_the_callers_shelves(db_session, user, other_user):
    mine = _shelf(db_session, user)
    theirs = _shelf(db_session, other_user)
    _shelve(db_session, mine, "Dune", "Herbert", "SciFi")
    _shelve(db_session, theirs, "Emma", "Austen", "Romance")

    assert [g.name for g in genre_report(db_session, user).data] == ["SciFi"]
    assert [a.name for a in author_report(db_session, other_user).data] == ["Austen"]


def test_books_without_author_or_genre_are_skipped(db_session, user):
    shelf = _shelf(db_session, user)
    _shelve(db_session, shelf, "Anonymous Pamphlet")
    _shelve(db_session, shelf, "Dune", "Herbert", "SciFi")

    assert [g.name for g in genre_report(db_session, user).data] == ["SciFi"]
    assert [a.name for a in author_report(db_session, user).data] == ["Herbert"]


def test_author_report_keeps_top_five(db_session, user):
    shelf = _shelf(db_session, user)
    for i, author in enumerate(["A", "B", "C", "D", "E", "F", "G"]):
        for n in range(7 - i):
            _shelve(db_session, shelf, f"{author} book {n}", author, "Fiction")

    authors = author_report(db_session, user).data
    assert [a.name for a in authors] == ["A", "B", "C", "D", "E"]
    assert [a.books for a in authors] == [7, 6, 5, 4, 3]


def test_timeline_keeps_last_six_months_in_order(db_session, user):
    shelf = _shelf(db_session, user)
    months = [(2025, m) for m in range(5, 13)]  # May..Dec 2025
    for year, month in months:
        _shelve(
            db_session,
            shelf,
            f"Book {year}-{month}",
            added_at=datetime(year, month, 3, tzinfo=timezone.utc),
        )
    _shelve(db_session, shelf, "Second in Dec", added_at=datetime(2025, 12, 20, tzinfo=timezone.utc))

    timeline = timeline_report(db_session, user).data
    assert [m.month for m in timeline] == [
        "Jul 2025",
        "Aug 2025",
        "Sep 2025",
        "Oct 2025",
        "Nov 2025",
        "Dec 2025",
    ]
    assert timeline[-1].books == 2


def test_count_names_orders_by_count_then_name():
    names = ["beta", "Alpha", "beta", "gamma", None, "", "Alpha", "delta"]
    assert count_names(names) == [("Alpha", 2), ("beta", 2), ("delta", 1), ("gamma", 1)]


def test_count_names_ignores_input_order():
    names = ["Herbert"] * 3 + ["Orwell"] * 2 + ["Austen", "Le Guin", "Le Guin"]
    expected = count_names(names)
    rng = random.Random(7)
    for _ in range(20):
        shuffled = names[:]
        rng.shuffle(shuffled)
        assert count_names(shuffled) == expected


def test_count_by_month_crosses_year_boundary():
    stamps = [
        datetime(2024, 12, 31, 23, 0, tzinfo=timezone.utc),
        datetime(2025, 1, 1, 1, 0, tzinfo=timezone.utc),
        datetime(2025, 1, 15, tzinfo=timezone.utc),
        None,
    ]
    out = count_by_month(stamps)
    assert [(m.month, m.books) for m in out] == [("Dec 2024", 1), ("Jan 2025", 2)]


def test_unauthenticated_reports_fail():
    result = genre_report(None, None)
    assert not result.success
    assert result.error == "Not authenticated"
    assert result.status_code == 401
