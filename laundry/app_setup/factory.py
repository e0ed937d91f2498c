"""
Factory d’application pour les entrypoints (laundry.asgi, python -m laundry).
Ordonne les étapes d’initialisation de manière lisible et testable.
"""
from typing import Optional
from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_payment_preflight, register_security_headers
from .exceptions import register_exception_handlers
from .routers import register_routers
from laundry.catalog import CatalogProvider

def create_app(catalog: Optional[CatalogProvider] = None) -> FastAPI:
    """
    Construit l’app FastAPI avec le lifespan et enregistre:
      - middlewares de base (session, CORS, hosts), préflight du paiement hébergé et en-têtes de sécurité
      - gestionnaires d’exceptions métier
      - tous les routers (paiement, catalogue, commandes, checkout, health)
    catalog: fournisseur injecté (tests); sinon créé par le lifespan.
    """
    app = FastAPI(title="Laundry Storefront API", lifespan=lifespan)
    if catalog is not None:
        app.state.catalog = catalog
    register_basic_middlewares(app)
    register_payment_preflight(app)
    register_security_headers(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
