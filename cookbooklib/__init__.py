from .client import V1_API_URL, CookbookClient
from .cookbook import Cookbook
from .exceptions import CookbookLibError, CookbookRetrievalError, VersionResolutionError
from .http import HttpClient
from .models import ErrorResponse, Version

__all__ = [
    "Cookbook",
    "CookbookClient",
    "CookbookLibError",
    "CookbookRetrievalError",
    "ErrorResponse",
    "HttpClient",
    "V1_API_URL",
    "Version",
    "VersionResolutionError",
]
