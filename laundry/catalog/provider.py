"""
Fournisseur du catalogue: charge les lignes une fois, expose des vues dérivées
recalculées à la lecture, et se rafraîchit table par table sur notification.

Cycle de vie explicite (start/stop) avec dépendances injectées:
- fetch_rows(table) -> list | None (None = échec de lecture)
- feed: ChangeFeed pour les notifications de changement
"""
from typing import Any, Callable, Dict, List, Optional
import logging

from laundry.catalog import repository
from laundry.catalog.feed import ChangeFeed

logger = logging.getLogger(__name__)

FETCH_ERROR = "Failed to fetch data"


def _sequence(row: Dict[str, Any]) -> int:
    try:
        return int(row.get("sequence") or 0)
    except (TypeError, ValueError):
        return 0


class CatalogProvider:
    def __init__(
        self,
        fetch_rows: Callable[[str], Optional[List[dict]]] = repository.list_rows,
        feed: Optional[ChangeFeed] = None,
    ) -> None:
        self._fetch_rows = fetch_rows
        self.feed = feed or ChangeFeed()
        self._rows: Dict[str, List[dict]] = {t: [] for t in repository.CATALOG_TABLES}
        self._unsubscribers: List[Callable[[], None]] = []
        self.loading = False
        self.error: Optional[str] = None
        self.started = False

    # --- cycle de vie ---

    def start(self) -> None:
        """Chargement initial puis abonnement aux changements de chaque table."""
        if self.started:
            return
        self.started = True
        self.load()
        for table in repository.CATALOG_TABLES:
            self._unsubscribers.append(self.feed.on_change(table, self._on_change))
        logger.info("catalog provider started services=%s categories=%s items=%s",
                    len(self.services), len(self.categories), len(self.items))

    def stop(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self.started = False

    def load(self) -> None:
        self.loading = True
        self.error = None
        try:
            fetched = {t: self._fetch_rows(t) for t in repository.CATALOG_TABLES}
            if any(rows is None for rows in fetched.values()):
                logger.error("catalog initial fetch failed tables=%s",
                             [t for t, rows in fetched.items() if rows is None])
                self.error = FETCH_ERROR
                return
            self._rows = {t: list(rows) for t, rows in fetched.items()}
        finally:
            self.loading = False

    def refresh(self, table: str) -> bool:
        """Recharge uniquement la table concernée; en cas d'échec, garde les lignes précédentes."""
        if table not in self._rows:
            return False
        rows = self._fetch_rows(table)
        if rows is None:
            logger.warning("catalog refresh failed table=%s, keeping previous rows", table)
            return False
        self._rows[table] = list(rows)
        return True

    def _on_change(self, table: str, payload: Dict[str, Any]) -> None:
        if not self.started:
            return
        logger.info("catalog change table=%s type=%s", table, (payload or {}).get("type"))
        self.refresh(table)

    # --- lignes brutes ---

    @property
    def services(self) -> List[dict]:
        return self._rows[repository.SERVICES]

    @property
    def categories(self) -> List[dict]:
        return self._rows[repository.CATEGORIES]

    @property
    def items(self) -> List[dict]:
        return self._rows[repository.ITEMS]

    @property
    def service_categories(self) -> List[dict]:
        return self._rows[repository.SERVICE_CATEGORIES]

    @property
    def service_category_items(self) -> List[dict]:
        return self._rows[repository.SERVICE_CATEGORY_ITEMS]

    # --- vues dérivées ---

    def get_service(self, service_identifier: str) -> Optional[dict]:
        return next((s for s in self.services if s.get("service_identifier") == service_identifier), None)

    def categories_for_service(self, service_identifier: str) -> List[dict]:
        """
        Catégories liées au service via service_categories, triées par sequence.
        Pas de filtrage sur le statut actif à ce niveau.
        """
        service = self.get_service(service_identifier)
        if not service:
            return []
        category_ids = {
            sc.get("category_id")
            for sc in self.service_categories
            if sc.get("service_id") == service.get("id")
        }
        linked = [c for c in self.categories if c.get("id") in category_ids]
        return sorted(linked, key=_sequence)

    def items_for_category(self, category_id: str) -> List[dict]:
        """Articles actifs liés à la catégorie (tous services confondus), triés par sequence."""
        sc_ids = {sc.get("id") for sc in self.service_categories if sc.get("category_id") == category_id}
        return self._active_items_for(sc_ids)

    def items_for_service_category(self, service_identifier: str, category_id: str) -> List[dict]:
        service = self.get_service(service_identifier)
        if not service:
            return []
        sc_ids = {
            sc.get("id")
            for sc in self.service_categories
            if sc.get("category_id") == category_id and sc.get("service_id") == service.get("id")
        }
        return self._active_items_for(sc_ids)

    def _active_items_for(self, service_category_ids: set) -> List[dict]:
        if not service_category_ids:
            return []
        item_ids = {
            link.get("item_id")
            for link in self.service_category_items
            if link.get("service_category_id") in service_category_ids
        }
        linked = [i for i in self.items if i.get("id") in item_ids and i.get("status") is True]
        return sorted(linked, key=_sequence)

    def status(self) -> Dict[str, Any]:
        return {
            "started": self.started,
            "loading": self.loading,
            "error": self.error,
            "counts": {t: len(rows) for t, rows in self._rows.items()},
        }
