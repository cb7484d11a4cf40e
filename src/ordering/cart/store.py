"""Cart store: the only way carts are read or mutated.

Each mutation is a read-modify-write of one cached document performed while
holding that buyer's lock, so concurrent requests for the same buyer are
applied one after the other and none is lost. Different buyers never wait on
each other.
"""

from contextlib import contextmanager

import structlog
from shared.deadline import Deadline
from shared.errors import InvalidReference, NotFound

from ordering import settings
from ordering.cart.cache import CartCache, get_cart_cache
from ordering.cart.cart import Cart, validate_quantity
from ordering.catalog import get_catalog

logger = structlog.get_logger(__name__)


class CartStore:
    def __init__(self, cache: CartCache | None = None, catalog=None, ttl: int | None = None):
        self._cache = cache
        self._catalog = catalog
        self.ttl = ttl if ttl is not None else settings.CART_TTL_SECONDS

    @property
    def cache(self) -> CartCache:
        return self._cache or get_cart_cache()

    @property
    def catalog(self):
        return self._catalog or get_catalog()

    @staticmethod
    def key_for(buyer_id: str) -> str:
        return f"{settings.CART_KEY_PREFIX}{buyer_id}"

    @staticmethod
    def _deadline(timeout) -> Deadline:
        return Deadline.of(settings.DEFAULT_TIMEOUT_SECONDS if timeout is None else timeout)

    @staticmethod
    def _require_buyer(buyer_id) -> str:
        if buyer_id is None or not str(buyer_id).strip():
            raise InvalidReference("A buyer id is required")
        return str(buyer_id)

    # -------------------------------------------------------------------
    # Low-level primitives, valid only while the buyer lock is held
    # -------------------------------------------------------------------
    @contextmanager
    def hold(self, buyer_id: str, timeout=None):
        """Hold the buyer's cart lock for the duration of the block."""
        buyer_id = self._require_buyer(buyer_id)
        with self.cache.lock(self.key_for(buyer_id), self._deadline(timeout)):
            yield

    def load(self, buyer_id: str) -> Cart:
        payload = self.cache.get(self.key_for(buyer_id))
        if payload is None:
            return Cart.empty(buyer_id)
        return Cart.from_payload(payload)

    def save(self, cart: Cart) -> None:
        if cart.is_empty:
            self.discard(cart.buyer_id)
            return
        self.cache.set(self.key_for(cart.buyer_id), cart.to_payload(), ttl=self.ttl)

    def discard(self, buyer_id: str) -> None:
        self.cache.delete(self.key_for(buyer_id))

    # -------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------
    def add_item(self, buyer_id: str, product_id: str, quantity: int, timeout=None) -> Cart:
        """Add a product to the buyer's cart, merging with an existing line."""
        buyer_id = self._require_buyer(buyer_id)
        validate_quantity(quantity)

        deadline = self._deadline(timeout)
        with self.cache.lock(self.key_for(buyer_id), deadline):
            cart = self.load(buyer_id)
            line = cart.line_for(product_id)
            if line is None:
                try:
                    product = self.catalog.get_product(product_id)
                except NotFound as exc:
                    raise InvalidReference(f"Product {product_id} does not exist") from exc
                deadline.check("add_item")
                cart.add_line(product_id, product["farm_id"], quantity, product["unit_price"])
            else:
                cart.add_line(product_id, line.farm_id, quantity, line.unit_price)
            self.save(cart)

        logger.debug(
            "Cart item added",
            buyer_id=buyer_id,
            product_id=str(product_id),
            quantity=quantity,
            revision=cart.revision,
        )
        return cart

    def update_item(self, buyer_id: str, product_id: str, quantity: int, timeout=None) -> Cart:
        """Set a line's absolute quantity; zero removes the line."""
        buyer_id = self._require_buyer(buyer_id)
        validate_quantity(quantity, allow_zero=True)

        with self.cache.lock(self.key_for(buyer_id), self._deadline(timeout)):
            cart = self.load(buyer_id)
            cart.set_quantity(product_id, quantity)
            self.save(cart)

        logger.debug("Cart item updated", buyer_id=buyer_id, product_id=str(product_id), quantity=quantity)
        return cart

    def remove_item(self, buyer_id: str, product_id: str, timeout=None) -> Cart:
        buyer_id = self._require_buyer(buyer_id)

        with self.cache.lock(self.key_for(buyer_id), self._deadline(timeout)):
            cart = self.load(buyer_id)
            if cart.remove_line(product_id):
                self.save(cart)
        return cart

    def get_cart(self, buyer_id: str, timeout=None) -> Cart:
        """Return the buyer's cart, or an empty cart when none is stored."""
        buyer_id = self._require_buyer(buyer_id)

        with self.cache.lock(self.key_for(buyer_id), self._deadline(timeout)):
            return self.load(buyer_id)

    def clear_cart(self, buyer_id: str, timeout=None) -> None:
        buyer_id = self._require_buyer(buyer_id)

        with self.cache.lock(self.key_for(buyer_id), self._deadline(timeout)):
            self.discard(buyer_id)
        logger.debug("Cart cleared", buyer_id=buyer_id)
