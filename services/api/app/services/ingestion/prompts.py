from __future__ import annotations

EXTRACTION_SYSTEM_PROMPT = (
    "You are a helpful assistant that analyzes text from book covers and bookshelves "
    "to extract book information. Always respond with valid JSON in the specified format."
)

EXTRACTION_TEMPLATE = """\
Analyze the following text from a book image or bookshelf and extract book information.
If multiple books are detected, list all of them.
For each book, provide the title, author (if available), and likely genre based on the title or content.
Format the response as a JSON object with the following structure:
{{
  "books": [
    {{
      "title": "Book Title",
      "author": "Author Name or 'Unknown'",
      "genre": "Likely Genre"
    }}
  ]
}}

Text to analyze:
{text}
"""

RECOMMENDATION_TEMPLATE = """\
Based on the following books in the user's library:
{books}

Please recommend {count} books they might enjoy. Consider the genres, themes, and writing styles of their current books.
Return your response in this exact JSON format:
{{
  "recommendations": [
    {{"title": "Book Title", "author": "Author Name"}}
  ]
}}
"""


def build_extraction_prompt(text: str) -> str:
    return EXTRACTION_TEMPLATE.format(text=text)


def build_recommendation_prompt(books: list[tuple[str, str, str]], *, count: int = 3) -> str:
    lines = "\n".join(
        f'- "{title}" by {author} ({genre})' for title, author, genre in books
    )
    return RECOMMENDATION_TEMPLATE.format(books=lines, count=count)
