"""Custom exceptions for the Q/P transformer."""


class TransformerError(Exception):
    """Base exception for transformer operations."""

    pass


class InvalidInputError(TransformerError):
    """Raised when the caller passes malformed text or options."""

    def __init__(self, field: str, message: str = ""):
        self.field = field
        super().__init__(message or f"Invalid value for '{field}'")


class SearchBackendError(TransformerError):
    """Raised when the lookup backend fails to answer a search."""

    def __init__(self, phrase: str, message: str = ""):
        self.phrase = phrase
        super().__init__(message or f"Search failed for phrase: {phrase!r}")


class CacheError(TransformerError):
    """Raised when a durable cache tier cannot be read or written."""

    def __init__(self, key: str, message: str = ""):
        self.key = key
        super().__init__(message or f"Cache operation failed for key {key}")


class TransformationError(TransformerError):
    """Raised when the pipeline fails for a reason other than caller input."""

    pass
