"""
Registre central des routers.
- Paiement hébergé: /api/create-payment (+ webhook Stripe)
- API v1: catalog, orders, checkout
- Health
"""
from fastapi import FastAPI
from laundry.catalog import views as catalog_views
from laundry.orders import views as orders_views
from laundry.checkout import views as checkout_views
from laundry.payments import views as payments_views
from laundry.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    app.include_router(payments_views.router)
    app.include_router(catalog_views.router)
    app.include_router(orders_views.router)
    app.include_router(checkout_views.router)
    app.include_router(health_router)
