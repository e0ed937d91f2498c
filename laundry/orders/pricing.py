"""
Calcul des montants d'une commande (pas de DB, pas de Stripe).
- Montants en Decimal arrondis au centime (ROUND_HALF_UP).
- TVA fixe (21 % par défaut), livraison offerte.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Union

from laundry.config import VAT_RATE, SHIPPING_FEE
from laundry.errors import ValidationError

CENT = Decimal("0.01")

Cart = Union[Mapping[str, Dict[str, Any]], Iterable[Dict[str, Any]]]

# module laundry.orders.pricing
def to_money(value: Any) -> Decimal:
    """Convertit str|float|int|Decimal|None en Decimal arrondi au centime (None -> 0.00)."""
    if value is None or value == "":
        return Decimal("0.00")
    try:
        return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Montant invalide: {value!r}")

def cart_lines(items: Cart) -> List[Dict[str, Any]]:
    """
    Normalise le panier en liste de lignes.
    Le front envoie un dict {clé: {id, name, price, quantity}}; une liste est aussi acceptée.
    """
    if items is None:
        return []
    if isinstance(items, Mapping):
        return [dict(v) for v in items.values()]
    return [dict(v) for v in items]

def quantity_of(line: Dict[str, Any]) -> int:
    try:
        qty = int(line.get("quantity") or 0)
    except (TypeError, ValueError):
        raise ValidationError("Quantité invalide")
    if qty < 1:
        raise ValidationError(f"Quantité invalide pour {line.get('name') or line.get('id')!r}")
    return qty

def line_subtotal(price: Any, quantity: int) -> Decimal:
    return (to_money(price) * quantity).quantize(CENT, rounding=ROUND_HALF_UP)

def compute_totals(items: Cart) -> Dict[str, Decimal]:
    """
    Retourne {subtotal, tax, shipping_fee, total}.
    - tax = subtotal × VAT_RATE, arrondie au centime
    - total = subtotal + tax + shipping_fee
    Ex: [{price 24.99, qty 1}] -> 24.99 / 5.25 / 0.00 / 30.24
    """
    subtotal = Decimal("0.00")
    for line in cart_lines(items):
        subtotal += line_subtotal(line.get("price"), quantity_of(line))
    tax = (subtotal * Decimal(str(VAT_RATE))).quantize(CENT, rounding=ROUND_HALF_UP)
    shipping_fee = to_money(SHIPPING_FEE)
    return {
        "subtotal": subtotal,
        "tax": tax,
        "shipping_fee": shipping_fee,
        "total": subtotal + tax + shipping_fee,
    }
