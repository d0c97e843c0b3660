from __future__ import annotations


class BookTrackError(Exception):
    """Base for errors that operations convert into a failed result.

    ``code`` names the category, ``status_code`` is what the HTTP layer
    answers with and ``message`` is the text shown to the caller.
    """

    code = "error"
    status_code = 500
    default_message = "An unknown error occurred"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotAuthenticated(BookTrackError):
    code = "not_authenticated"
    status_code = 401
    default_message = "Not authenticated"


class InvalidSelection(BookTrackError):
    code = "invalid_selection"
    status_code = 400
    default_message = "Invalid bookshelf selected"


class InvalidInput(BookTrackError):
    code = "invalid_input"
    status_code = 400
    default_message = "Invalid input"


class StorageError(BookTrackError):
    code = "storage_error"
    status_code = 500
    default_message = "Storage operation failed"


class NoTextDetected(BookTrackError):
    code = "no_text_detected"
    status_code = 422
    default_message = "No text detected in the image"


class MalformedExtraction(BookTrackError):
    code = "malformed_extraction"
    status_code = 502
    default_message = "Invalid book extraction format"


class AdapterError(BookTrackError):
    code = "adapter_error"
    status_code = 502
    default_message = "External service call failed"


class CoverLookupFailed(AdapterError):
    # Absorbed by the cover stage; only surfaced by the direct cover lookup route.
    code = "cover_lookup_failed"
    default_message = "Failed to fetch book cover"
