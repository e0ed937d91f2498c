"""Couche service des commandes (écriture des commandes).
Rôles:
- Générer un numéro de commande unique (retry borné + repli horodaté).
- Créer la commande 'pending/pending' et ses lignes en une séquence insert commande -> insert lignes.
- Mettre à jour le statut de la commande au moment du paiement (sans toucher aux lignes).
Erreurs:
- ValidationError: panier vide, numéro manquant, moyen de paiement inconnu.
- PersistenceError: échec d'un insert/update ou commande introuvable.
"""
import logging
import re
from typing import Any, Dict, List, Optional
from uuid import uuid4

from laundry.errors import PersistenceError, ValidationError
from laundry.orders import repository
from laundry.orders import pricing
from laundry.orders.models import (
    STATUS_PENDING,
    PAYMENT_PENDING,
)
from laundry.orders.numbering import OrderNumberPolicy

logger = logging.getLogger(__name__)

_UUID4_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.IGNORECASE)


def is_uuid4(value: Any) -> bool:
    return bool(_UUID4_RE.match(str(value or "")))


def _details_dict(order_details: Any) -> Dict[str, Any]:
    if hasattr(order_details, "model_dump"):
        return order_details.model_dump()
    return dict(order_details or {})


def generate_order_number(user_token: Optional[str] = None, policy: Optional[OrderNumberPolicy] = None) -> str:
    """Numéro lisible unique (ex: EZY123456); ne lève jamais d'erreur."""
    if policy is None:
        policy = OrderNumberPolicy(lambda number: repository.order_number_exists(number, user_token=user_token))
    return policy.generate()


def build_order_items(order_id: str, items: Any) -> List[Dict[str, Any]]:
    """
    Une ligne order_items par ligne de panier.
    - product_id: identifiant du panier s'il est un UUID v4 valide, sinon un UUID neuf
      (ex: article provenant d'un placeholder non persisté).
    - subtotal = quantity × unit_price.
    """
    rows: List[Dict[str, Any]] = []
    for line in pricing.cart_lines(items):
        qty = pricing.quantity_of(line)
        product_id = line.get("id") if is_uuid4(line.get("id")) else str(uuid4())
        unit_price = pricing.to_money(line.get("price"))
        rows.append({
            "order_id": order_id,
            "product_id": str(product_id),
            "product_name": line.get("name") or "",
            "quantity": qty,
            "unit_price": str(unit_price),
            "subtotal": str(pricing.line_subtotal(unit_price, qty)),
        })
    return rows


def build_order_row(customer: Dict[str, Any], details: Dict[str, Any], order_number: str) -> Dict[str, Any]:
    totals = pricing.compute_totals(details.get("items"))
    customer_name = f"{customer.get('first_name') or ''} {customer.get('last_name') or ''}".strip()
    return {
        "order_number": order_number,
        "user_id": customer.get("id"),
        "customer_name": customer_name,
        "email": customer.get("email"),
        "phone": customer.get("phone"),
        "shipping_address": details.get("delivery_address"),
        "shipping_method": details.get("delivery_option"),
        "estimated_delivery": details.get("delivery_date"),
        "special_instructions": details.get("special_instructions"),
        "subtotal": str(totals["subtotal"]),
        "tax": str(totals["tax"]),
        "shipping_fee": str(totals["shipping_fee"]),
        "total_amount": str(totals["total"]),
        "status": STATUS_PENDING,
        "payment_status": PAYMENT_PENDING,
    }


def create_order(
    customer: Dict[str, Any],
    order_details: Any,
    order_number: str,
    user_token: Optional[str] = None,
) -> Dict[str, Any]:
    """Insère la commande puis ses lignes; retourne la commande avec ses lignes ('items').
    - PersistenceError si l'un des deux inserts échoue: la commande n'est pas passée.
    """
    if not order_number:
        raise ValidationError("Numéro de commande manquant")
    if not (customer or {}).get("id"):
        raise ValidationError("Client non authentifié")
    details = _details_dict(order_details)
    if not pricing.cart_lines(details.get("items")):
        raise ValidationError("Panier vide")

    row = build_order_row(customer, details, order_number)
    order = repository.insert_order(row, user_token=user_token)
    if not order or not order.get("id"):
        raise PersistenceError("Impossible d'enregistrer la commande")

    items = build_order_items(order["id"], details.get("items"))
    if not repository.insert_order_items(items, user_token=user_token):
        raise PersistenceError("Impossible d'enregistrer les articles de la commande")

    logger.info("order created order_number=%s items=%s total=%s", order_number, len(items), row["total_amount"])
    return {**order, "items": items}


def update_order_status(
    order_number: str,
    status: str,
    payment_status: str,
    payment_method: Optional[str] = None,
    user_token: Optional[str] = None,
    use_service: bool = False,
) -> Dict[str, Any]:
    """Met à jour status/payment_status (+ moyen de paiement) de la commande.
    - PersistenceError si l'update échoue ou si aucune commande ne correspond.
    """
    data: Dict[str, Any] = {"status": status, "payment_status": payment_status}
    if payment_method:
        data["payment_method"] = payment_method
    rows = repository.update_order_by_number(order_number, data, user_token=user_token, use_service=use_service)
    if rows is None:
        raise PersistenceError("Impossible de mettre à jour la commande")
    if not rows:
        raise PersistenceError(f"Commande introuvable: {order_number}")
    logger.info("order status updated order_number=%s status=%s payment_status=%s", order_number, status, payment_status)
    return rows[0]


def get_order(order_number: str, user_token: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """Commande + lignes, None si introuvable."""
    order = repository.get_order_by_number(order_number, user_token=user_token)
    if not order:
        return None
    return {**order, "items": repository.list_order_items(order.get("id"), user_token=user_token)}


def list_orders(user_id: str, user_token: Optional[str] = None) -> List[Dict[str, Any]]:
    return repository.list_user_orders(user_id, user_token=user_token)
