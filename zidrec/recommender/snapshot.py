"""Snapshot cache manager.

A :class:`Snapshot` is the catalog, the order history and the co-occurrence
matrix derived from them, as loaded at one point in time. The
:class:`SnapshotManager` owns the current snapshot: it loads it lazily,
exactly once, from the persisted JSON file or from the Zid API, and replaces
it wholesale on refresh. Snapshots are never mutated after construction, so
readers can keep using the one they obtained while a refresh is swapped in.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from zidrec.api.exceptions import ProviderError, SnapshotStoreError
from zidrec.recommender.catalog import Catalog
from zidrec.recommender.cooccurrence import CooccurrenceMatrix, build_cooccurrence
from zidrec.recommender.provider import ZidClient, response_data
from zidrec.recommender.store import JsonSnapshotStore

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_FETCH_PAGE_SIZE = 100

SOURCE_CACHE = "cache"
SOURCE_PROVIDER = "provider"
SOURCE_EMPTY = "empty"


@dataclass(frozen=True)
class Snapshot:
    """Catalog, orders and co-occurrence matrix valid as of one load."""

    catalog: Catalog
    orders: Tuple[Any, ...]
    cooccurrence: CooccurrenceMatrix
    source: str = SOURCE_EMPTY
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def build(
        cls,
        product_records: Iterable[Any],
        orders: Iterable[Any],
        source: str = SOURCE_EMPTY,
        builder: Callable[[Iterable[Any]], CooccurrenceMatrix] = build_cooccurrence,
    ) -> "Snapshot":
        """Create a snapshot from raw records, building the matrix."""
        orders = tuple(orders)
        return cls(
            catalog=Catalog.from_records(product_records),
            orders=orders,
            cooccurrence=builder(orders),
            source=source,
        )

    def status(self) -> Dict[str, Any]:
        return {
            "loaded": True,
            "source": self.source,
            "loaded_at": self.loaded_at.isoformat(),
            "num_products": len(self.catalog),
            "num_orders": len(self.orders),
            "num_pairs": self.cooccurrence.num_pairs,
        }


class SnapshotManager:
    """Loads, holds and refreshes the current :class:`Snapshot`.

    Loading is serialized by a lock, so concurrent first requests wait for a
    single load instead of each hitting the API.
    """

    def __init__(
        self,
        store: JsonSnapshotStore,
        client: Optional[ZidClient] = None,
        page_size: int = DEFAULT_FETCH_PAGE_SIZE,
        builder: Callable[[Iterable[Any]], CooccurrenceMatrix] = build_cooccurrence,
    ):
        """Initialize the manager.

        Args:
            store: Persisted snapshot file.
            client: Zid API client. ``None`` disables fetching.
            page_size: Page size requested for products and orders.
            builder: Co-occurrence matrix builder.
        """
        self.store = store
        self.client = client
        self.page_size = page_size
        self.builder = builder
        self._lock = threading.Lock()
        self._snapshot: Optional[Snapshot] = None

    @property
    def current(self) -> Optional[Snapshot]:
        return self._snapshot

    def ensure_loaded(self) -> Snapshot:
        """Return the current snapshot, loading it on first use."""
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot

        with self._lock:
            if self._snapshot is None:
                self._snapshot = self._load()
            return self._snapshot

    def refresh(self, force_fetch: bool = False) -> Snapshot:
        """Load a new snapshot and swap it in.

        Args:
            force_fetch: Ignore the persisted snapshot and go to the API.
        """
        with self._lock:
            snapshot = self._load(force_fetch=force_fetch)
            self._snapshot = snapshot
            return snapshot

    def invalidate(self, purge_store: bool = False) -> None:
        """Drop the in-memory snapshot so the next request reloads it.

        Args:
            purge_store: Also delete the persisted snapshot file.
        """
        with self._lock:
            self._snapshot = None
            if purge_store:
                try:
                    self.store.clear()
                except SnapshotStoreError as e:
                    logger.warning(e.message, extra=e.details)

    def _load(self, force_fetch: bool = False) -> Snapshot:
        start_time = time.time()

        data = None if force_fetch else self.store.read()
        if data is not None:
            snapshot = Snapshot.build(
                data["products"], data["orders"], SOURCE_CACHE, self.builder
            )
        else:
            products, orders = self._fetch()
            source = SOURCE_PROVIDER if products or orders else SOURCE_EMPTY
            snapshot = Snapshot.build(products, orders, source, self.builder)
            if len(snapshot.catalog) > 0:
                self._persist(snapshot)

        logger.info(
            "Snapshot loaded",
            extra={
                **snapshot.status(),
                "load_time_ms": round((time.time() - start_time) * 1000, 2),
            },
        )
        return snapshot

    def _fetch(self) -> Tuple[List[Any], List[Any]]:
        if self.client is None:
            logger.warning("No Zid client configured, starting with empty data")
            return [], []

        products = self._fetch_page(self.client.fetch_products)
        orders = self._fetch_page(self.client.fetch_orders)
        return products, orders

    def _fetch_page(self, fetch: Callable[..., Any]) -> List[Any]:
        try:
            payload = fetch(page=1, page_size=self.page_size)
        except ProviderError as e:
            logger.warning(e.message, extra=e.details)
            return []
        return response_data(payload)

    def _persist(self, snapshot: Snapshot) -> None:
        try:
            self.store.write(snapshot.catalog.records(), list(snapshot.orders))
        except SnapshotStoreError as e:
            logger.warning(e.message, extra=e.details)
