"""
Accès aux données du catalogue (tables services, categories, items + jonctions).
Lecture seule côté vitrine. La RLS n'autorise SELECT qu'aux sessions authentifiées: le cache partagé
du catalogue (aucun utilisateur dans le contexte) lit avec le client service-role.
"""
from typing import List, Optional
import logging
import laundry.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

SERVICES = "services"
CATEGORIES = "categories"
ITEMS = "items"
SERVICE_CATEGORIES = "service_categories"
SERVICE_CATEGORY_ITEMS = "service_category_items"

BASE_TABLES = (SERVICES, CATEGORIES, ITEMS)
JUNCTION_TABLES = (SERVICE_CATEGORIES, SERVICE_CATEGORY_ITEMS)
CATALOG_TABLES = BASE_TABLES + JUNCTION_TABLES

# module laundry.catalog.repository
def list_rows(table: str) -> Optional[List[dict]]:
    """
    Récupère toutes les lignes d'une table du catalogue.
    - Tables de base: triées par 'sequence' (ordre d'affichage).
    - Tables de jonction: pas de colonne sequence, ordre du store.
    - Retourne None en cas d'erreur (distinct d'une table vide).
    """
    if table not in CATALOG_TABLES:
        raise ValueError(f"Table de catalogue inconnue: {table}")
    try:
        query = supabase_client.get_service_supabase().table(table).select("*")
        if table in BASE_TABLES:
            query = query.order("sequence")
        res = query.execute()
        return res.data or []
    except Exception:
        logger.exception("catalog.repository.list_rows failed table=%s", table)
        return None
