from app.models import Book, Bookshelf, BookshelfBook
from app.schemas.books import BookIn
from app.services.ingestion.persist import save_book
from app.services.library.books import (
    create_bookshelf,
    delete_book,
    list_bookshelves,
    search_books,
)


def _seed(db, user):
    for title, author, genre in [
        ("Dune", "Frank Herbert", "Science Fiction"),
        ("Dune Messiah", "Frank Herbert", "Science Fiction"),
        ("1984", "George Orwell", "Dystopian"),
    ]:
        assert save_book(db, user, BookIn(title=title, author=author, genre=genre)).success


def test_create_and_list_bookshelves(db_session, user, other_user):
    created = create_bookshelf(db_session, user, name="  To Read ", description="Later")
    create_bookshelf(db_session, other_user, name="Not mine")

    assert created.success
    assert created.data.name == "To Read"

    listed = list_bookshelves(db_session, user)
    assert [s.name for s in listed.data] == ["To Read"]


def test_search_by_each_field(db_session, user):
    _seed(db_session, user)

    by_title = search_books(db_session, user, "dune", "title").data
    by_author = search_books(db_session, user, "orwell", "author").data
    by_genre = search_books(db_session, user, "fiction", "genre").data

    assert [b.title for b in by_title] == ["Dune", "Dune Messiah"]
    assert [b.title for b in by_author] == ["1984"]
    assert [b.title for b in by_genre] == ["Dune", "Dune Messiah"]
    assert by_author[0].authors[0].name == "George Orwell"
    assert by_author[0].bookshelves[0].name == "Default"


def test_empty_term_lists_whole_library(db_session, user):
    _seed(db_session, user)
    assert len(search_books(db_session, user).data) == 3


def test_search_does_not_leak_other_users_books(db_session, user, other_user):
    _seed(db_session, other_user)
    assert search_books(db_session, user, "").data == []


def test_delete_book_removes_shelf_links(db_session, user):
    saved = save_book(db_session, user, BookIn(title="Dune", author="Frank Herbert")).data

    result = delete_book(db_session, user, saved.book_id)

    assert result.success
    assert db_session.get(Book, saved.book_id) is None
    assert db_session.query(BookshelfBook).count() == 0
    assert db_session.get(Bookshelf, saved.bookshelf_id) is not None


def test_delete_book_owned_by_someone_else(db_session, user, other_user):
    saved = save_book(db_session, other_user, BookIn(title="Dune")).data

    result = delete_book(db_session, user, saved.book_id)

    assert not result.success
    assert result.error == "Book not found"
    assert db_session.get(Book, saved.book_id) is not None


def test_search_treats_wildcards_literally(db_session, user):
    for title in ["100 Years", "100% Wolf", "snake_case", "snakexcase"]:
        save_book(db_session, user, BookIn(title=title))

    assert [b.title for b in search_books(db_session, user, "100%").data] == ["100% Wolf"]
    assert [b.title for b in search_books(db_session, user, "e_c").data] == ["snake_case"]
