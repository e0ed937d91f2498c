"""
Module 'catalog': services → catégories → articles, lecture seule côté vitrine.
Réunit repository (Supabase), canal de changements et fournisseur à cycle de vie explicite.
"""

from .feed import ChangeFeed, parse_database_webhook
from .provider import CatalogProvider, FETCH_ERROR
from .repository import list_rows, CATALOG_TABLES

__all__ = [
    "ChangeFeed",
    "parse_database_webhook",
    "CatalogProvider",
    "FETCH_ERROR",
    "list_rows",
    "CATALOG_TABLES",
]
