# module laundry.orders.views

"""Endpoints API des commandes.
- /number: génère un numéro de commande unique.
- POST "": crée la commande 'pending/pending' et ses lignes.
- PATCH /{order_number}/status: passe la commande en processing/paid avec le moyen de paiement.
- GET "" et GET /{order_number}: commandes de l'utilisateur.
Sécurité: require_user; les écritures utilisent le jeton de l'utilisateur (RLS).
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from laundry.utils.security import require_user
from laundry.utils.rate_limit import optional_rate_limit
from laundry.orders import service as orders_service
from laundry.orders.models import (
    OrderDetails,
    PAYMENT_METHODS,
    STATUS_PROCESSING,
    PAYMENT_PAID,
    customer_from_user,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/orders", tags=["Orders API"])


class CreateOrderRequest(BaseModel):
    order_number: Optional[str] = None
    order_details: OrderDetails


class UpdateStatusRequest(BaseModel):
    status: str = STATUS_PROCESSING
    payment_status: str = PAYMENT_PAID
    payment_method: Optional[str] = None


@router.post("/number", dependencies=[Depends(optional_rate_limit(times=20, seconds=60))])
def create_order_number(user: Dict[str, Any] = Depends(require_user)):
    return {"order_number": orders_service.generate_order_number(user_token=user.get("token"))}


@router.post("", status_code=201, dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_order(body: CreateOrderRequest, user: Dict[str, Any] = Depends(require_user)):
    """Crée la commande pour l'utilisateur authentifié.
    - Génère le numéro si absent du body.
    - Erreurs: 400 (panier vide), 500 (échec d'enregistrement) via les handlers d'erreurs métier.
    """
    token = user.get("token")
    order_number = body.order_number or orders_service.generate_order_number(user_token=token)
    return orders_service.create_order(
        customer_from_user(user),
        body.order_details,
        order_number,
        user_token=token,
    )


@router.patch("/{order_number}/status")
def update_order_status(order_number: str, body: UpdateStatusRequest, user: Dict[str, Any] = Depends(require_user)):
    if body.payment_method and body.payment_method not in PAYMENT_METHODS:
        raise HTTPException(status_code=400, detail="Moyen de paiement inconnu")
    return orders_service.update_order_status(
        order_number,
        body.status,
        body.payment_status,
        body.payment_method,
        user_token=user.get("token"),
    )


@router.get("")
def list_orders(user: Dict[str, Any] = Depends(require_user)):
    return {"items": orders_service.list_orders(user.get("id"), user_token=user.get("token"))}


@router.get("/{order_number}")
def get_order(order_number: str, user: Dict[str, Any] = Depends(require_user)):
    order = orders_service.get_order(order_number, user_token=user.get("token"))
    if not order:
        raise HTTPException(status_code=404, detail="Commande introuvable")
    return order
