"""JSON snapshot persistence.

The snapshot file holds ``{"products": [...], "orders": [...]}`` exactly as
they were fetched from Zid. It lets a restarted process skip the API.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from zidrec.api.exceptions import SnapshotStoreError

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_CACHE_FILE = "storage/cache.json"


class JsonSnapshotStore:
    """Reads and writes the persisted snapshot file."""

    def __init__(self, cache_path: str = DEFAULT_CACHE_FILE):
        self.cache_path = Path(cache_path)

    def read(self) -> Optional[Dict[str, List[Any]]]:
        """Load the persisted snapshot.

        Returns:
            The parsed snapshot, or ``None`` if the file is missing,
            unreadable, not JSON, or lacks ``products`` / ``orders`` lists.
        """
        if not self.cache_path.exists():
            logger.debug(f"No snapshot at {self.cache_path}")
            return None

        try:
            contents = self.cache_path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning(
                "Could not read snapshot file",
                extra={"cache_path": str(self.cache_path), "error": str(e)},
            )
            return None

        if not contents.strip():
            return None

        try:
            data = json.loads(contents)
        except ValueError as e:
            logger.warning(
                "Snapshot file is not valid JSON",
                extra={"cache_path": str(self.cache_path), "error": str(e)},
            )
            return None

        if not isinstance(data, dict):
            return None
        products = data.get("products")
        orders = data.get("orders")
        if not isinstance(products, list) or not isinstance(orders, list):
            logger.warning(
                "Snapshot file has unexpected shape",
                extra={"cache_path": str(self.cache_path)},
            )
            return None

        return {"products": products, "orders": orders}

    def write(self, products: List[Any], orders: List[Any]) -> None:
        """Persist a snapshot.

        Raises:
            SnapshotStoreError: If the directory or file cannot be written,
                or the data is not JSON serializable.
        """
        try:
            self.cache_path.parent.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(
                {"products": products, "orders": orders},
                indent=4,
                ensure_ascii=False,
            )
            self.cache_path.write_text(payload, encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            raise SnapshotStoreError(str(self.cache_path), e) from e

        logger.info(
            f"Saved snapshot to {self.cache_path}",
            extra={"num_products": len(products), "num_orders": len(orders)},
        )

    def clear(self) -> None:
        """Remove the persisted snapshot if present."""
        try:
            self.cache_path.unlink(missing_ok=True)
        except OSError as e:
            raise SnapshotStoreError(str(self.cache_path), e) from e
        logger.info(f"Removed snapshot {self.cache_path}")
