"""
The Cat API module for catbreeds.

Provides the HTTP client and the immutable breed/image models.
"""

from catbreeds.api.client import CatApiClient, RemoteCatalog
from catbreeds.api.models import CatBreed, CatImage

__all__ = [
    "CatApiClient",
    "RemoteCatalog",
    "CatBreed",
    "CatImage",
]
