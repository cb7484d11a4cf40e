"""Fake catalog adapter: in-memory product table for tests and development."""

from shared.errors import NotFound, Unavailable

from ordering.catalog.port import CatalogPort


class FakeCatalog(CatalogPort):
    """Catalog backed by a dict; products are registered explicitly."""

    def __init__(self):
        self.products: dict[str, dict] = {}
        self.farms: set[str] = set()
        self.should_succeed = True
        self.failure_reason = "Catalog unavailable"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Catalog unavailable"):
        """Configure the fake catalog behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def register_product(
        self,
        product_id: str,
        farm_id: str,
        unit_price: float,
        available_quantity: int = 100,
        name: str | None = None,
    ) -> dict:
        product = {
            "product_id": str(product_id),
            "farm_id": str(farm_id),
            "name": name or str(product_id),
            "unit_price": float(unit_price),
            "available_quantity": int(available_quantity),
        }
        self.products[str(product_id)] = product
        self.farms.add(str(farm_id))
        return product

    def set_price(self, product_id: str, unit_price: float) -> None:
        self.products[str(product_id)]["unit_price"] = float(unit_price)

    def set_stock(self, product_id: str, available_quantity: int) -> None:
        self.products[str(product_id)]["available_quantity"] = int(available_quantity)

    def _guard(self) -> None:
        if not self.should_succeed:
            raise Unavailable(self.failure_reason)

    def get_product(self, product_id: str) -> dict:
        self._guard()
        product = self.products.get(str(product_id))
        if product is None:
            raise NotFound(f"Product {product_id} does not exist")
        return dict(product)

    def farm_exists(self, farm_id: str) -> bool:
        self._guard()
        return str(farm_id) in self.farms

    def reset(self):
        """Forget every product and farm (useful between tests)."""
        self.products.clear()
        self.farms.clear()
        self.should_succeed = True
        self.failure_reason = "Catalog unavailable"
