from app.models.author import Author
from app.models.base import Base
from app.models.book import Book
from app.models.bookshelf import Bookshelf, BookshelfBook
from app.models.cover_cache import CoverCache
from app.models.genre import Genre
from app.models.user import User


__all__ = [
    "Base",
    "User",
    "Author",
    "Genre",
    "Book",
    "Bookshelf",
    "BookshelfBook",
    "CoverCache",
]
