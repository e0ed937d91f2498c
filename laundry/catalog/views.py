# module laundry.catalog.views

"""Endpoints API du catalogue.
- Listes brutes: services, catégories, articles (ordre d'affichage 'sequence').
- Vues dérivées: catégories d'un service, articles actifs d'une catégorie.
- /webhook: reçoit les webhooks base de données Supabase et déclenche le rafraîchissement.
Le fournisseur est créé par le lifespan (app.state.catalog) et injecté via get_catalog.
"""
import logging
import secrets
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from laundry.config import CATALOG_WEBHOOK_SECRET
from laundry.catalog.feed import parse_database_webhook
from laundry.catalog.provider import CatalogProvider

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/catalog", tags=["Catalog API"])

WEBHOOK_SECRET_HEADER = "X-Catalog-Webhook-Secret"


def get_catalog(request: Request) -> CatalogProvider:
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        raise HTTPException(status_code=503, detail="Catalogue indisponible")
    return catalog


@router.get("/status")
def catalog_status(catalog: CatalogProvider = Depends(get_catalog)):
    return catalog.status()


@router.get("/services")
def list_services(catalog: CatalogProvider = Depends(get_catalog)):
    return {"items": catalog.services, "error": catalog.error}


@router.get("/categories")
def list_categories(catalog: CatalogProvider = Depends(get_catalog)):
    return {"items": catalog.categories, "error": catalog.error}


@router.get("/items")
def list_items(catalog: CatalogProvider = Depends(get_catalog)):
    return {"items": catalog.items, "error": catalog.error}


@router.get("/services/{service_identifier}/categories")
def service_categories(service_identifier: str, catalog: CatalogProvider = Depends(get_catalog)):
    """Catégories liées au service (par service_identifier, ex: 'wash-iron').
    - 404 si le service est inconnu.
    """
    if not catalog.get_service(service_identifier):
        raise HTTPException(status_code=404, detail="Service introuvable")
    return {"items": catalog.categories_for_service(service_identifier)}


@router.get("/categories/{category_id}/items")
def category_items(
    category_id: str,
    service: Optional[str] = None,
    catalog: CatalogProvider = Depends(get_catalog),
):
    """Articles actifs d'une catégorie, éventuellement restreints à un service (?service=...)."""
    if service:
        return {"items": catalog.items_for_service_category(service, category_id)}
    return {"items": catalog.items_for_category(category_id)}


@router.post("/webhook", include_in_schema=False)
async def catalog_webhook(request: Request, catalog: CatalogProvider = Depends(get_catalog)):
    """Webhook base de données: rafraîchit la table modifiée.
    - Secret partagé via l'en-tête X-Catalog-Webhook-Secret si CATALOG_WEBHOOK_SECRET est défini.
    - Réponses: {"status": "ok", "table": ..., "notified": n} ou {"status": "ignored"}.
    """
    if CATALOG_WEBHOOK_SECRET:
        provided = request.headers.get(WEBHOOK_SECRET_HEADER, "")
        if not secrets.compare_digest(provided, CATALOG_WEBHOOK_SECRET):
            raise HTTPException(status_code=401, detail="Secret webhook invalide")
    try:
        body: Dict[str, Any] = await request.json()
    except Exception:
        raise HTTPException(status_code=400, detail="Payload webhook invalide")

    table, payload = parse_database_webhook(body)
    if not table:
        return JSONResponse({"status": "ignored"})
    notified = catalog.feed.notify(table, payload)
    return JSONResponse({"status": "ok", "table": table, "notified": notified})
