"""initial schema: users, bookshelves, books, authors, genres, cover cache

Revision ID: 3f1c9a2e7d40
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c9a2e7d40"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ---- users (ids come from the identity provider) ----------------------
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("full_name", sa.String(length=300), nullable=True),
        sa.Column("avatar_url", sa.String(length=2000), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=False)

    # ---- authors / genres --------------------------------------------------
    op.create_table(
        "authors",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=400), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="uq_authors_name"),
    )
    op.create_table(
        "genres",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="uq_genres_name"),
    )

    # ---- books -------------------------------------------------------------
    op.create_table(
        "books",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=600), nullable=False),
        sa.Column("author_id", sa.String(length=36), nullable=True),
        sa.Column("genre_id", sa.String(length=36), nullable=True),
        sa.Column("isbn", sa.String(length=20), nullable=True),
        sa.Column("publication_year", sa.Integer(), nullable=True),
        sa.Column("cover_image_url", sa.String(length=2000), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["author_id"], ["authors.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["genre_id"], ["genres.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_books_author_id"), "books", ["author_id"], unique=False)
    op.create_index(op.f("ix_books_genre_id"), "books", ["genre_id"], unique=False)

    # ---- bookshelves -------------------------------------------------------
    op.create_table(
        "bookshelves",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.String(length=2000), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_bookshelves_user_id"), "bookshelves", ["user_id"], unique=False
    )

    op.create_table(
        "bookshelf_books",
        sa.Column("book_id", sa.String(length=36), nullable=False),
        sa.Column("bookshelf_id", sa.String(length=36), nullable=False),
        sa.Column("added_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["book_id"], ["books.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["bookshelf_id"], ["bookshelves.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("book_id", "bookshelf_id"),
    )
    op.create_index(
        op.f("ix_bookshelf_books_bookshelf_id"),
        "bookshelf_books",
        ["bookshelf_id"],
        unique=False,
    )

    # ---- cover_cache -------------------------------------------------------
    op.create_table(
        "cover_cache",
        sa.Column("cache_key", sa.String(length=1200), nullable=False),
        sa.Column("cover_url", sa.String(length=2000), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("cache_key"),
    )


def downgrade() -> None:
    op.drop_table("cover_cache")
    op.drop_index(op.f("ix_bookshelf_books_bookshelf_id"), table_name="bookshelf_books")
    op.drop_table("bookshelf_books")
    op.drop_index(op.f("ix_bookshelves_user_id"), table_name="bookshelves")
    op.drop_table("bookshelves")
    op.drop_index(op.f("ix_books_genre_id"), table_name="books")
    op.drop_index(op.f("ix_books_author_id"), table_name="books")
    op.drop_table("books")
    op.drop_table("genres")
    op.drop_table("authors")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
