"""
Module 'payments' (feature-first): point d'entrée public.
Réunit le client Stripe Checkout et le cas d'usage de création de session de paiement.
"""

from .stripe_client import require_stripe, create_checkout_session, parse_event, to_minor_units
from .service import create_payment_session, make_metadata, handle_event

__all__ = [
    # stripe
    "require_stripe",
    "create_checkout_session",
    "parse_event",
    "to_minor_units",
    # services
    "create_payment_session",
    "make_metadata",
    "handle_event",
]
