"""
Flux de confirmation de commande (orchestration écriture commande + paiement).

États: unauthenticated -> order_number_pending -> order_unsaved -> order_saved
       -> payment_submitted -> navigated_away

- mount(): redirige vers le login si non authentifié (payload et chemin de retour conservés),
  sinon génère le numéro de commande puis enregistre la commande une seule fois (drapeau saved).
- submit_payment(): enregistre la commande si besoin, ouvre éventuellement une session de
  paiement hébergée, passe la commande en processing/paid puis navigue (checkout ou succès).
  Toute erreur est exposée dans `error` et le flux reste rejouable.
"""
import logging
from enum import Enum
from types import ModuleType
from typing import Any, Callable, Dict, Optional, Union

from laundry.config import LOGIN_PATH, ORDER_SUCCESS_PATH
from laundry.errors import StorefrontError, ValidationError
from laundry.orders import pricing
from laundry.orders import service as orders_service
from laundry.orders.models import (
    PAYMENT_METHODS,
    PAYMENT_PAID,
    STATUS_PROCESSING,
    customer_from_user,
)

logger = logging.getLogger(__name__)

DEFAULT_RETURN_PATH = "/order/confirmation"
DEFAULT_CURRENCY = "EUR"


class FlowState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    ORDER_NUMBER_PENDING = "order_number_pending"
    ORDER_UNSAVED = "order_unsaved"
    ORDER_SAVED = "order_saved"
    PAYMENT_SUBMITTED = "payment_submitted"
    NAVIGATED_AWAY = "navigated_away"


class ConfirmationFlow:
    def __init__(
        self,
        order_details: Any,
        user: Optional[Dict[str, Any]] = None,
        orders: Union[ModuleType, Any] = orders_service,
        payments: Optional[Callable[..., Dict[str, Any]]] = None,
        order_number: str = "",
        saved: bool = False,
        return_path: str = DEFAULT_RETURN_PATH,
    ):
        if hasattr(order_details, "model_dump"):
            order_details = order_details.model_dump()
        self.order_details: Dict[str, Any] = dict(order_details or {})
        self.user = user
        self.orders = orders
        self.payments = payments
        self.order_number = order_number or ""
        self.saved = saved
        self.return_path = return_path
        self.submitted = False
        self.payment_method: Optional[str] = None
        self.checkout: Optional[Dict[str, Any]] = None
        self.navigation: Optional[Dict[str, Any]] = None
        self.error: Optional[str] = None
        self.error_status: Optional[int] = None

    @property
    def user_token(self) -> Optional[str]:
        return (self.user or {}).get("token")

    @property
    def state(self) -> FlowState:
        if not self.user:
            return FlowState.UNAUTHENTICATED
        if self.navigation:
            return FlowState.NAVIGATED_AWAY
        if self.submitted:
            return FlowState.PAYMENT_SUBMITTED
        if self.saved:
            return FlowState.ORDER_SAVED
        if self.order_number:
            return FlowState.ORDER_UNSAVED
        return FlowState.ORDER_NUMBER_PENDING

    @property
    def has_items(self) -> bool:
        return bool(pricing.cart_lines(self.order_details.get("items")))

    def totals(self) -> Dict[str, Any]:
        return pricing.compute_totals(self.order_details.get("items"))

    def _fail(self, exc: StorefrontError) -> None:
        self.error = exc.message
        self.error_status = exc.status_code
        logger.warning("confirmation flow error state=%s order_number=%s error=%s",
                       self.state.value, self.order_number, exc.message)

    def login_redirect(self) -> Dict[str, Any]:
        return {
            "to": LOGIN_PATH,
            "state": {"returnTo": self.return_path, "orderData": self.order_details or None},
        }

    def mount(self) -> Dict[str, Any]:
        """Entrée dans la page de confirmation."""
        if not self.user:
            return {**self.snapshot(), "redirect": self.login_redirect()}
        if not self.order_number:
            self.order_number = self.orders.generate_order_number(user_token=self.user_token)
        if not self.saved and self.has_items:
            try:
                self.save_order()
            except StorefrontError as e:
                self._fail(e)
        return self.snapshot()

    def save_order(self) -> Dict[str, Any]:
        if not self.user or not self.order_number or not self.has_items:
            raise ValidationError("Missing required data")
        order = self.orders.create_order(
            customer_from_user(self.user),
            self.order_details,
            self.order_number,
            user_token=self.user_token,
        )
        self.saved = True
        return order

    def _open_checkout(self, redirect_url: str, total: Any) -> Dict[str, Any]:
        customer = customer_from_user(self.user or {})
        customer_name = f"{customer['first_name']} {customer['last_name']}".strip()
        return self.payments(
            amount=total,
            currency=DEFAULT_CURRENCY,
            description=f"Order {self.order_number}",
            redirect_url=redirect_url,
            metadata={
                "orderNumber": self.order_number,
                "customerName": customer_name or None,
                "email": customer.get("email"),
                "paymentMethod": self.payment_method,
            },
        )

    def submit_payment(self, payment_method: str, redirect_url: Optional[str] = None) -> Dict[str, Any]:
        """Paiement: toujours une navigation ou une erreur visible (flux rejouable)."""
        self.error = None
        self.error_status = None
        try:
            if payment_method not in PAYMENT_METHODS:
                raise ValidationError(f"Unknown payment method: {payment_method}")
            if not self.user or not self.order_number or not self.has_items:
                raise ValidationError("Missing required data")
            self.payment_method = payment_method
            if not self.saved:
                self.save_order()

            total = self.totals()["total"]
            if self.payments and redirect_url:
                self.checkout = self._open_checkout(redirect_url, total)

            self.orders.update_order_status(
                self.order_number,
                STATUS_PROCESSING,
                PAYMENT_PAID,
                payment_method,
                user_token=self.user_token,
            )
            self.submitted = True

            if self.checkout:
                self.navigation = {"to": self.checkout["checkoutUrl"], "external": True,
                                   "state": {"paymentId": self.checkout.get("id")}}
            else:
                self.navigation = {
                    "to": ORDER_SUCCESS_PATH,
                    "state": {
                        "orderNumber": self.order_number,
                        "totalAmount": float(total),
                        "estimatedDelivery": self.order_details.get("delivery_date"),
                    },
                }
        except StorefrontError as e:
            self._fail(e)
        return self.snapshot()

    def snapshot(self) -> Dict[str, Any]:
        try:
            totals = self.totals() if self.has_items else None
        except ValidationError:
            totals = None
        return {
            "state": self.state.value,
            "order_number": self.order_number,
            "saved": self.saved,
            "payment_method": self.payment_method,
            "error": self.error,
            "totals": {k: float(v) for k, v in totals.items()} if totals else None,
            "navigation": self.navigation,
        }
