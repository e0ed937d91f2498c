# module laundry.orders.models
"""Types de la feature commandes.
- Statuts du cycle de vie (commande et paiement) et moyens de paiement proposés.
- OrderDetails / CartItem: panier assemblé côté front (items + logistique).
- customer_from_user: identité client dérivée de l'utilisateur authentifié.
"""
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

STATUS_PENDING = "pending"
STATUS_PROCESSING = "processing"

PAYMENT_PENDING = "pending"
PAYMENT_PAID = "paid"

PAYMENT_METHODS = ("credit_card", "ideal", "bancontact")


class CartItem(BaseModel):
    id: str = ""
    name: str = ""
    price: Optional[float] = None
    quantity: int = Field(default=1, ge=1)


class OrderDetails(BaseModel):
    service: str = ""
    items: Dict[str, CartItem] = Field(default_factory=dict)
    pickup_date: Optional[str] = None
    delivery_date: Optional[str] = None
    pickup_address: Optional[str] = None
    delivery_address: Optional[str] = None
    pickup_option: Optional[str] = None
    delivery_option: Optional[str] = None
    special_instructions: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return self.model_dump()


def customer_from_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """Construit {id, email, first_name, last_name, phone} depuis user(+metadata Supabase)."""
    meta = (user or {}).get("metadata") or (user or {}).get("user_metadata") or {}
    return {
        "id": (user or {}).get("id"),
        "email": (user or {}).get("email"),
        "first_name": meta.get("first_name") or "",
        "last_name": meta.get("last_name") or "",
        "phone": meta.get("phone"),
    }
