"""
Canal de notification des changements du catalogue.
- on_change(table, callback): abonnement, retourne une fonction de désabonnement.
- notify(table, payload): diffuse un changement (ex: webhook base de données Supabase).
Un abonné qui lève une exception est journalisé sans bloquer les autres.
"""
from typing import Any, Callable, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[str, Dict[str, Any]], None]


class ChangeFeed:
    def __init__(self) -> None:
        self._subscribers: Dict[str, List[ChangeCallback]] = {}

    def on_change(self, table: str, callback: ChangeCallback) -> Callable[[], None]:
        self._subscribers.setdefault(table, []).append(callback)

        def _unsubscribe() -> None:
            callbacks = self._subscribers.get(table) or []
            if callback in callbacks:
                callbacks.remove(callback)

        return _unsubscribe

    def subscribers(self, table: str) -> int:
        return len(self._subscribers.get(table) or [])

    def notify(self, table: str, payload: Optional[Dict[str, Any]] = None) -> int:
        """Appelle les abonnés de la table; retourne le nombre d'abonnés notifiés."""
        notified = 0
        for callback in list(self._subscribers.get(table) or []):
            try:
                callback(table, payload or {})
                notified += 1
            except Exception:
                logger.exception("catalog.feed subscriber failed table=%s", table)
        return notified

    def clear(self) -> None:
        self._subscribers.clear()


def parse_database_webhook(body: Dict[str, Any]) -> tuple[str, Dict[str, Any]]:
    """
    Extrait (table, payload) d'un webhook base de données Supabase.
    Format attendu: {"type": "INSERT|UPDATE|DELETE", "schema": "public", "table": "...",
                     "record": {...}, "old_record": {...}}
    """
    table = str((body or {}).get("table") or "").strip()
    schema = str((body or {}).get("schema") or "public")
    if not table or schema != "public":
        return "", {}
    payload = {
        "type": (body or {}).get("type"),
        "record": (body or {}).get("record"),
        "old_record": (body or {}).get("old_record"),
    }
    return table, payload
