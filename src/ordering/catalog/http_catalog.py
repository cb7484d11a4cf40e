"""HTTP catalog adapter: reads products and farms from the catalog service.

Connection failures surface as ``Unavailable`` and slow responses as
``Timeout``. Nothing is retried here; callers decide.
"""

import requests
import structlog
from shared.errors import NotFound, Timeout, Unavailable

from ordering import settings
from ordering.catalog.port import CatalogPort

logger = structlog.get_logger(__name__)


class HttpCatalog(CatalogPort):
    def __init__(self, base_url: str | None = None, timeout: float | None = None, session=None):
        self.base_url = (base_url or settings.CATALOG_URL).rstrip("/")
        self.timeout = timeout or settings.CATALOG_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def _get(self, path: str) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.Timeout as exc:
            logger.warning("Catalog request timed out", url=url, timeout=self.timeout)
            raise Timeout(f"Catalog did not answer within {self.timeout}s") from exc
        except requests.ConnectionError as exc:
            logger.error("Catalog unreachable", url=url, error=str(exc))
            raise Unavailable("Catalog service is unreachable") from exc

        if response.status_code != 404 and not response.ok:
            logger.error("Catalog returned an error", url=url, status_code=response.status_code)
            raise Unavailable(f"Catalog service failed with HTTP {response.status_code}")
        return response

    def get_product(self, product_id: str) -> dict:
        response = self._get(f"/products/{product_id}")
        if response.status_code == 404:
            raise NotFound(f"Product {product_id} does not exist")

        body = response.json()
        data = body.get("data", body)
        return {
            "product_id": str(data.get("product_id") or data.get("id") or product_id),
            "farm_id": str(data["farm_id"]),
            "name": data.get("name", str(product_id)),
            "unit_price": float(data.get("unit_price", data.get("price", 0.0))),
            "available_quantity": int(data.get("available_quantity", data.get("quantity", 0))),
        }

    def farm_exists(self, farm_id: str) -> bool:
        response = self._get(f"/farms/{farm_id}")
        return response.status_code != 404
