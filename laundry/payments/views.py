import logging
from typing import Any, Dict

from fastapi import APIRouter, Request, Depends, HTTPException
from fastapi.responses import JSONResponse, Response

from laundry.errors import StorefrontError, PersistenceError
from laundry.utils.rate_limit import optional_rate_limit
from laundry.payments import stripe_client
from laundry.payments import service as payments_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Payments API"])

PAYMENT_PATH = "/api/create-payment"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

def _json(status_code: int, content: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=CORS_HEADERS)

# module laundry.payments.views
@router.options(PAYMENT_PATH, include_in_schema=False)
async def create_payment_preflight():
    """Préflight CORS: 204 sans corps."""
    return Response(status_code=204, headers=CORS_HEADERS)

@router.api_route(PAYMENT_PATH, methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def create_payment_method_not_allowed():
    return _json(405, {"error": "Method not allowed"})

@router.post(PAYMENT_PATH, dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_payment(request: Request):
    """
    Crée une session de paiement hébergée.
    - Entrée JSON: {amount, currency, description, redirectUrl, webhookUrl?, metadata?}
    - 200 {id, checkoutUrl}; 500 {error} (champ manquant, body invalide ou échec prestataire)
    - En-têtes CORS sur toutes les réponses, y compris en erreur.
    """
    try:
        try:
            body = await request.json()
        except Exception:
            body = None
        if not isinstance(body, dict) or not body:
            return _json(500, {"error": "Request body is empty"})
        result = payments_service.create_payment_session(
            amount=body.get("amount"),
            currency=body.get("currency"),
            description=body.get("description"),
            redirect_url=body.get("redirectUrl"),
            webhook_url=body.get("webhookUrl"),
            metadata=body.get("metadata"),
        )
        return _json(200, result)
    except StorefrontError as e:
        logger.warning("create_payment failed: %s", e.message)
        return _json(500, {"error": e.message})
    except Exception:
        logger.exception("Erreur create_payment")
        return _json(500, {"error": "Payment creation failed"})

@router.post("/api/v1/payments/webhook", include_in_schema=False)
async def webhook_stripe(request: Request):
    """
    Webhook Stripe (Checkout): checkout.session.completed payé -> commande processing/paid.
    - Signature: stripe_client.parse_event (Stripe-Signature + STRIPE_WEBHOOK_SECRET)
    - Erreurs: 400 si signature/payload invalide, 500 si la mise à jour échoue
    """
    try:
        event = await stripe_client.parse_event(request)
    except Exception:
        logger.exception("Erreur webhook_stripe")
        raise HTTPException(status_code=400, detail="Invalid Stripe webhook payload")
    try:
        result = payments_service.handle_event(event)
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=e.message)
    logger.info("payments.webhook result=%s", result)
    return JSONResponse(result)
