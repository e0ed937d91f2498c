"""
Adaptateur Stripe: centralise les appels et la configuration Stripe Checkout.
"""
import stripe
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional
from fastapi import Request
from laundry.config import (
    STRIPE_SECRET_KEY,
    STRIPE_WEBHOOK_SECRET,
    PAYMENT_METHODS,
    PAYMENT_LOCALE,
)

# module laundry.payments.stripe_client
def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l’emploi.
    - Configure stripe.api_key via STRIPE_SECRET_KEY si disponible.
    - En absence de clé, les appels Stripe échouent côté SDK (ex: No API key provided).
    """
    if STRIPE_SECRET_KEY:
        stripe.api_key = STRIPE_SECRET_KEY
    return stripe

def to_minor_units(amount: Any) -> int:
    """Montant décimal (ex: 30.24) -> centimes (3024)."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

def create_checkout_session(
    *,
    amount: Any,
    currency: str,
    description: str,
    redirect_url: str,
    metadata: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """
    Crée une session Stripe Checkout hébergée pour un montant unique.
    - une ligne price_data (description comme nom de produit)
    - moyens de paiement et locale fixés par la configuration (card, ideal, bancontact / nl)
    - success_url et cancel_url pointent vers redirect_url
    Retour: dict session (ex: {"id": "cs_test_...", "url": "https://checkout.stripe.com/..."})
    """
    require_stripe()
    session = stripe.checkout.Session.create(
        mode="payment",
        line_items=[{
            "quantity": 1,
            "price_data": {
                "currency": currency.lower(),
                "unit_amount": to_minor_units(amount),
                "product_data": {"name": description},
            },
        }],
        payment_method_types=list(PAYMENT_METHODS),
        locale=PAYMENT_LOCALE,
        success_url=redirect_url,
        cancel_url=redirect_url,
        metadata=metadata or {},
    )
    return dict(session)

async def parse_event(request: Request):
    """
    Parse et valide un événement Stripe signé (webhook).
    - Lit le body brut + en-tête Stripe-Signature
    - Valide la signature via Webhook.construct_event (STRIPE_WEBHOOK_SECRET)
    """
    require_stripe()
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature") or request.headers.get("Stripe-Signature")
    return stripe.Webhook.construct_event(payload, sig_header, STRIPE_WEBHOOK_SECRET or "")
