"""Catalog port: read-only view of products, prices, stock and farms.

The catalog is owned by another service. The ordering core only reads it:
to snapshot a price when a product enters a cart, and to re-check stock at
checkout.
"""

from abc import ABC, abstractmethod


class CatalogPort(ABC):
    """Abstract interface for catalog adapters."""

    @abstractmethod
    def get_product(self, product_id: str) -> dict:
        """Look up a product.

        Returns:
            dict with keys: product_id, farm_id, name, unit_price, available_quantity

        Raises:
            NotFound: when the catalog does not know the product.
        """
        ...

    @abstractmethod
    def farm_exists(self, farm_id: str) -> bool:
        """Return True when the farm is registered in the catalog."""
        ...
