class CookbookLibError(Exception):
    """Base exception for cookbooklib."""


class CookbookRetrievalError(CookbookLibError):
    """Raised when cookbook data cannot be retrieved from the index service."""


class VersionResolutionError(CookbookRetrievalError):
    """Raised when a known cookbook version cannot be resolved."""
