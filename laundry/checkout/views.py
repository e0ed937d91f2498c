# module laundry.checkout.views

"""Endpoints du flux de confirmation de commande.
- /confirm: montage du flux (numéro + enregistrement unique de la commande).
- /pay: soumission du paiement (checkout hébergé si redirect_url fourni, sinon page succès).
- /resume: après login, restitue le panier et le chemin de retour conservés en session.
L'état du flux (numéro, drapeau saved, empreinte du panier) vit dans la session signée
(SessionMiddleware) entre deux requêtes.
"""
import hashlib
import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from laundry.utils.security import get_optional_user
from laundry.utils.rate_limit import optional_rate_limit
from laundry.orders.models import OrderDetails
from laundry.payments.service import create_payment_session
from laundry.checkout.flow import ConfirmationFlow, FlowState, DEFAULT_RETURN_PATH

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/checkout", tags=["Checkout API"])

SESSION_FLOW_KEY = "checkout"
SESSION_RETURN_KEY = "returnTo"
SESSION_ORDER_KEY = "orderData"


class ConfirmRequest(BaseModel):
    order_details: OrderDetails
    return_path: str = DEFAULT_RETURN_PATH


class PayRequest(BaseModel):
    order_details: OrderDetails
    payment_method: str = "credit_card"
    redirect_url: Optional[str] = None


def _fingerprint(details: OrderDetails) -> str:
    raw = json.dumps(details.model_dump(), sort_keys=True, default=str)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:16]


def _build_flow(request: Request, details: OrderDetails, user: Optional[Dict[str, Any]], return_path: str) -> ConfirmationFlow:
    stored = request.session.get(SESSION_FLOW_KEY) or {}
    if stored.get("fingerprint") != _fingerprint(details) or stored.get("user_id") != (user or {}).get("id"):
        stored = {}
    return ConfirmationFlow(
        details,
        user=user,
        payments=create_payment_session,
        order_number=stored.get("order_number") or "",
        saved=bool(stored.get("saved")),
        return_path=return_path,
    )


def _persist(request: Request, flow: ConfirmationFlow, details: OrderDetails) -> None:
    # Flux terminé: la commande suivante repart d'un nouveau numéro
    if flow.state == FlowState.NAVIGATED_AWAY:
        request.session.pop(SESSION_FLOW_KEY, None)
        return
    request.session[SESSION_FLOW_KEY] = {
        "order_number": flow.order_number,
        "saved": flow.saved,
        "fingerprint": _fingerprint(details),
        "user_id": (flow.user or {}).get("id"),
    }


def _login_required(request: Request, flow: ConfirmationFlow) -> JSONResponse:
    redirect = flow.login_redirect()
    request.session[SESSION_RETURN_KEY] = flow.return_path
    request.session[SESSION_ORDER_KEY] = flow.order_details
    return JSONResponse(status_code=401, content={
        "detail": "Non authentifié",
        "login": redirect["to"],
        "returnTo": flow.return_path,
    })


def _flow_response(flow: ConfirmationFlow, payload: Dict[str, Any]) -> JSONResponse:
    status_code = flow.error_status if flow.error else 200
    return JSONResponse(status_code=status_code or 200, content=payload)


@router.post("/confirm")
def confirm_order(body: ConfirmRequest, request: Request, user: Optional[Dict[str, Any]] = Depends(get_optional_user)):
    """Montage du flux; 401 + redirection login si non authentifié (panier conservé en session)."""
    flow = _build_flow(request, body.order_details, user, body.return_path)
    if not user:
        return _login_required(request, flow)
    payload = flow.mount()
    _persist(request, flow, body.order_details)
    return _flow_response(flow, payload)


@router.post("/pay", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def pay_order(body: PayRequest, request: Request, user: Optional[Dict[str, Any]] = Depends(get_optional_user)):
    """Soumission du paiement.
    - Erreurs: 400 (données manquantes), 500 (enregistrement), 502 (prestataire); le flux reste rejouable.
    """
    flow = _build_flow(request, body.order_details, user, DEFAULT_RETURN_PATH)
    if not user:
        return _login_required(request, flow)
    if not flow.order_number:
        flow.mount()
    payload = flow.submit_payment(body.payment_method, redirect_url=body.redirect_url)
    _persist(request, flow, body.order_details)
    return _flow_response(flow, payload)


@router.get("/resume")
def resume_order(request: Request):
    """Restitue puis efface le panier et le chemin de retour conservés avant le login."""
    return_to = request.session.pop(SESSION_RETURN_KEY, None)
    order_data = request.session.pop(SESSION_ORDER_KEY, None)
    return {"returnTo": return_to, "orderData": order_data}
