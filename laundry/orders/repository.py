"""
Accès aux données 'orders' et 'order_items'.
- Avec user_token: client utilisateur (RLS actif), sinon client anon; use_service pour le webhook.
- Les écritures retournent None/False en cas d'erreur (journalisée); le service décide de l'erreur métier.
- order_number_exists propage les erreurs: la politique de numérotation bascule alors sur le repli.
"""
from typing import Any, Dict, List, Optional
import logging
from postgrest.exceptions import APIError
import laundry.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

ORDERS = "orders"
ORDER_ITEMS = "order_items"

def _client(user_token: Optional[str] = None, use_service: bool = False):
    if use_service:
        return supabase_client.get_service_supabase()
    if user_token:
        return supabase_client.get_user_supabase(user_token)
    return supabase_client.get_supabase()

# module laundry.orders.repository
def order_number_exists(order_number: str, user_token: Optional[str] = None) -> bool:
    res = (
        _client(user_token)
        .table(ORDERS)
        .select("order_number")
        .eq("order_number", order_number)
        .execute()
    )
    return bool(res.data)

def insert_order(row: Dict[str, Any], user_token: Optional[str] = None) -> Optional[dict]:
    """
    Insère une commande et retourne la ligne créée (id inclus).
    - None si l'insert échoue ou si la ligne n'est pas renvoyée.
    """
    try:
        res = _client(user_token).table(ORDERS).insert(row).execute()
        rows = res.data or []
        if isinstance(rows, list) and rows:
            return rows[0]
        logger.error("orders.repository.insert_order returned no row order_number=%s", row.get("order_number"))
        return None
    except APIError as e:
        # 23505: numéro de commande déjà pris (contrainte unique)
        logger.error("orders.repository.insert_order rejected order_number=%s code=%s message=%s",
                     row.get("order_number"), e.code, e.message)
        return None
    except Exception:
        logger.exception("orders.repository.insert_order failed order_number=%s", row.get("order_number"))
        return None

def insert_order_items(rows: List[Dict[str, Any]], user_token: Optional[str] = None) -> bool:
    if not rows:
        return False
    try:
        _client(user_token).table(ORDER_ITEMS).insert(rows).execute()
        return True
    except Exception:
        logger.exception("orders.repository.insert_order_items failed order_id=%s count=%s",
                         rows[0].get("order_id"), len(rows))
        return False

def update_order_by_number(
    order_number: str,
    data: Dict[str, Any],
    user_token: Optional[str] = None,
    use_service: bool = False,
) -> Optional[List[dict]]:
    """
    Met à jour la commande par numéro; retourne les lignes modifiées ([] si aucune), None si erreur.
    """
    try:
        res = (
            _client(user_token, use_service)
            .table(ORDERS)
            .update(data)
            .eq("order_number", order_number)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("orders.repository.update_order_by_number failed order_number=%s data=%s", order_number, data)
        return None

def get_order_by_number(order_number: str, user_token: Optional[str] = None) -> Optional[dict]:
    if not order_number:
        return None
    try:
        res = (
            _client(user_token)
            .table(ORDERS)
            .select("*")
            .eq("order_number", order_number)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("orders.repository.get_order_by_number failed order_number=%s", order_number)
        return None

def list_order_items(order_id: str, user_token: Optional[str] = None) -> List[dict]:
    try:
        res = (
            _client(user_token)
            .table(ORDER_ITEMS)
            .select("*")
            .eq("order_id", order_id)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("orders.repository.list_order_items failed order_id=%s", order_id)
        return []

def list_user_orders(user_id: str, user_token: Optional[str] = None, limit: int = 50) -> List[dict]:
    """Commandes de l'utilisateur, les plus récentes d'abord."""
    if not user_id:
        return []
    try:
        res = (
            _client(user_token)
            .table(ORDERS)
            .select("id, order_number, status, payment_status, payment_method, total_amount, estimated_delivery, created_at")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("orders.repository.list_user_orders failed user_id=%s", user_id)
        return []
