from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import requests

from design_surface.core import API_BASE_URL, ValidationResult

logger = logging.getLogger(__name__)


class PersistenceError(RuntimeError):
    """The product store could not be reached or rejected a request."""


class ProductClient:
    """Thin JSON client for the product store that persists surface records.

    The store exposes ``GET`` and ``PUT`` on ``/api/products/<id>``; a PUT
    may carry a partial record. Version conflicts are the store's concern.
    """

    def __init__(self, base_url: str = API_BASE_URL, timeout: float = 10.0, session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, product_id: str) -> str:
        return f"{self.base_url}/api/products/{product_id}"

    def _request(self, method: str, product_id: str, **kwargs) -> Dict[str, Any]:
        url = self._url(product_id)
        try:
            res = self.session.request(method, url, timeout=self.timeout, **kwargs)
            res.raise_for_status()
            return res.json()
        except requests.exceptions.RequestException as e:
            logger.exception(f"{method} {url} failed")
            raise PersistenceError(f"{method} {url} failed: {e}") from e
        except ValueError as e:
            logger.exception(f"{method} {url} returned invalid JSON")
            raise PersistenceError(f"{method} {url} returned invalid JSON") from e

    def get_product(self, product_id: str) -> Dict[str, Any]:
        return self._request("GET", product_id)

    def update_product(self, product_id: str, partial: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", product_id, json=partial)

    def save_surface(self, product_id: str, surface) -> Tuple[ValidationResult, Optional[Dict[str, Any]]]:
        """Validate a DesignSurface and PUT its geometry if it is valid.

        Returns the validation result and the stored product (None when
        validation failed and nothing was sent).
        """
        result, payload = surface.save_payload()
        if payload is None:
            return result, None
        stored = self.update_product(product_id, payload)
        logger.info(f"Saved design surface for product {product_id}")
        return result, stored

    def close(self) -> None:
        self.session.close()
