"""
Module 'orders': numérotation, calcul des montants, écriture des commandes et de leurs lignes.
"""

from .numbering import OrderNumberPolicy
from .pricing import compute_totals, line_subtotal, to_money
from .service import (
    generate_order_number,
    build_order_items,
    create_order,
    update_order_status,
    get_order,
    list_orders,
)

__all__ = [
    "OrderNumberPolicy",
    "compute_totals",
    "line_subtotal",
    "to_money",
    "generate_order_number",
    "build_order_items",
    "create_order",
    "update_order_status",
    "get_order",
    "list_orders",
]
