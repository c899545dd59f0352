from .database import SQLiteCatalogDB
from .repository import RemedyCatalog, significant_words

__all__ = [
    "RemedyCatalog",
    "SQLiteCatalogDB",
    "significant_words",
]
