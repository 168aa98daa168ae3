"""Minimal client for the Zid REST API.

Only the two read endpoints the recommender needs are wrapped. Tokens are
obtained elsewhere (store installation flow); this client just sends them.
"""

import logging
import time
from typing import Any, Dict, List, Optional

import requests

from zidrec.api.exceptions import ProviderError

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.zid.sa"
DEFAULT_PAGE_SIZE = 50
DEFAULT_TIMEOUT_S = 10.0

PRODUCTS_PATH = "/v1/products/"
ORDERS_PATH = "/v1/managers/store/orders"


def response_data(payload: Any) -> List[Any]:
    """Return the ``data`` list of an API payload, or ``[]`` if malformed."""
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        return payload["data"]
    return []


class ZidClient:
    """Authenticated GET requests against the Zid API."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        access_token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_S,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, path: str, params: Dict[str, Any]) -> Optional[Any]:
        """Send a GET request and decode the JSON body.

        Returns ``None`` without touching the network when no access token
        is configured.

        Raises:
            ProviderError: On transport errors, non-2xx responses or a body
                that is not JSON.
        """
        if not self.access_token:
            logger.warning(
                "No Zid access token configured, skipping request",
                extra={"path": path},
            )
            return None

        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
        }
        start_time = time.time()
        try:
            response = self.session.get(
                f"{self.base_url}{path}",
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            raise ProviderError(path, e) from e

        logger.info(
            "Zid API request completed",
            extra={
                "path": path,
                "status_code": response.status_code,
                "duration_ms": round((time.time() - start_time) * 1000, 2),
            },
        )
        return payload

    def fetch_products(
        self, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE
    ) -> Optional[Any]:
        """Fetch one page of products."""
        return self._get(PRODUCTS_PATH, {"page": page, "page_size": page_size})

    def fetch_orders(
        self, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE
    ) -> Optional[Any]:
        """Fetch one page of store orders."""
        return self._get(ORDERS_PATH, {"page": page, "page_size": page_size})
