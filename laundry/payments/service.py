"""
Cas d'usage 'payments': création de session de paiement hébergée et traitement du webhook.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from laundry.errors import ValidationError, ProviderError, PersistenceError
from laundry.orders import service as orders_service
from laundry.orders.models import STATUS_PROCESSING, PAYMENT_PAID
from . import stripe_client

logger = logging.getLogger(__name__)

def _validate_amount(amount: Any) -> Decimal:
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValidationError("Invalid payment amount")
    if not value.is_finite() or value <= 0:
        raise ValidationError("Invalid payment amount")
    return value

def make_metadata(metadata: Optional[Dict[str, Any]], webhook_url: Optional[str] = None) -> Dict[str, str]:
    """
    Métadonnées Stripe (valeurs chaînes uniquement).
    - order_number, customer_name (défaut 'Guest'), email, timestamp ISO
    - payment_method choisi par le client si transmis, webhook_url si fourni
    """
    meta = metadata or {}
    out = {
        "order_number": str(meta.get("orderNumber") or meta.get("order_number") or ""),
        "customer_name": str(meta.get("customerName") or meta.get("customer_name") or "Guest"),
        "email": str(meta.get("email") or ""),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    payment_method = meta.get("paymentMethod") or meta.get("payment_method")
    if payment_method:
        out["payment_method"] = str(payment_method)
    if webhook_url:
        out["webhook_url"] = str(webhook_url)
    return out

def create_payment_session(
    amount: Any,
    currency: Optional[str],
    description: Optional[str],
    redirect_url: Optional[str],
    webhook_url: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Ouvre une session de paiement hébergée et retourne {"id", "checkoutUrl"}.
    - ValidationError si amount/currency/description/redirect_url manque ou n'est pas du bon type (aucun appel Stripe).
    - ProviderError si Stripe échoue (la commande reste pending/pending, nouvel essai possible).
    """
    if not amount or not currency or not description or not redirect_url:
        raise ValidationError("Missing required payment fields")
    if not all(isinstance(v, str) for v in (currency, description, redirect_url)):
        raise ValidationError("Invalid payment fields")
    value = _validate_amount(amount)
    meta = make_metadata(metadata, webhook_url)

    logger.info("payments.create_payment_session amount=%s currency=%s order_number=%s",
                value, currency, meta.get("order_number"))
    try:
        session = stripe_client.create_checkout_session(
            amount=value,
            currency=currency,
            description=description,
            redirect_url=redirect_url,
            metadata=meta,
        )
    except Exception as e:
        logger.exception("payments.create_payment_session provider failure")
        raise ProviderError(str(e) or "Payment creation failed")

    checkout_url = session.get("url")
    if not session.get("id") or not checkout_url:
        raise ProviderError("Payment creation failed")
    return {"id": session.get("id"), "checkoutUrl": checkout_url}

def _as_dict(obj: Any) -> Dict[str, Any]:
    if isinstance(obj, dict):
        return obj
    for attr in ("to_dict_recursive", "to_dict"):
        fn = getattr(obj, attr, None)
        if callable(fn):
            return fn()
    return {}

def handle_event(event: Any) -> Dict[str, Any]:
    """
    Webhook Stripe: sur checkout.session.completed payé, passe la commande en processing/paid.
    - Relie la session à la commande via metadata.order_number.
    - Client service-role (bypass RLS): pas d'utilisateur dans le contexte webhook.
    - Renvoie {"status": "ok"|"ignored"} (idempotent: une commande déjà payée est simplement réécrite).
    """
    data = _as_dict(event)
    if data.get("type") != "checkout.session.completed":
        return {"status": "ignored"}
    session = (data.get("data") or {}).get("object") or {}
    if session.get("payment_status") != "paid":
        return {"status": "ignored"}
    meta = session.get("metadata") or {}
    order_number = meta.get("order_number")
    if not order_number:
        return {"status": "ignored"}
    try:
        orders_service.update_order_status(
            order_number,
            STATUS_PROCESSING,
            PAYMENT_PAID,
            meta.get("payment_method"),
            use_service=True,
        )
    except PersistenceError:
        logger.exception("payments.handle_event order update failed order_number=%s", order_number)
        raise
    return {"status": "ok", "order_number": order_number}
