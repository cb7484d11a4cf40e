"""Order lifecycle engine: checkout, status changes and delivery tracking.

Checkout converts a buyer's cart into one pending order per farm:

    1. Take the buyer's cart lock and keep it until the cart is updated
    2. Re-check every product against the catalog (existence and stock)
    3. Partition the lines by farm, in order of first appearance
    4. Create one order per farm at the prices frozen in the cart
    5. Remove the ordered lines from the cart

Each farm's order stands on its own: when one farm fails, the orders already
created for other farms are kept and the failure is reported per farm. The
lines of a failed farm stay in the cart so the buyer can retry.
"""

from dataclasses import dataclass, field

import structlog
from shared.access import Caller, require_buyer, require_farm_access, require_order_visibility
from shared.deadline import Deadline
from shared.errors import EmptyCart, InsufficientStock, InvalidReference, MarketError, NotFound

from ordering import settings
from ordering.cart.store import CartStore
from ordering.order.order import Order
from ordering.order.store import OrderStore

logger = structlog.get_logger(__name__)


@dataclass
class FarmOutcome:
    farm_id: str
    product_ids: list[str]
    order: Order | None = None
    error: MarketError | None = None

    @property
    def succeeded(self) -> bool:
        return self.order is not None


@dataclass
class CheckoutResult:
    buyer_id: str
    outcomes: list[FarmOutcome] = field(default_factory=list)

    @property
    def orders(self) -> list[Order]:
        return [outcome.order for outcome in self.outcomes if outcome.succeeded]

    @property
    def failures(self) -> list[FarmOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]

    @property
    def complete(self) -> bool:
        return not self.failures


def partition_by_farm(lines) -> dict[str, list]:
    """Group cart lines by farm, keeping the order farms first appear in."""
    groups: dict[str, list] = {}
    for line in lines:
        groups.setdefault(str(line.farm_id), []).append(line)
    return groups


class OrderLifecycleEngine:
    def __init__(self, cart_store: CartStore | None = None, order_store: OrderStore | None = None, catalog=None):
        self.cart_store = cart_store or CartStore(catalog=catalog)
        self.order_store = order_store or OrderStore(catalog=catalog)
        self._catalog = catalog

    @property
    def catalog(self):
        return self.cart_store.catalog if self._catalog is None else self._catalog

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    def _recheck_catalog(self, lines, deadline: Deadline) -> None:
        for line in lines:
            product_id = str(line.product_id)
            try:
                product = self.catalog.get_product(product_id)
            except NotFound as exc:
                raise InvalidReference(f"Product {product_id} is no longer in the catalog") from exc

            available = int(product.get("available_quantity", 0))
            if available < line.quantity:
                raise InsufficientStock(
                    f"Only {available} of product {product_id} available, {line.quantity} requested",
                    product_id=product_id,
                    requested=line.quantity,
                    available=available,
                )
            if abs(float(product["unit_price"]) - line.unit_price) > 0.005:
                logger.info(
                    "Catalog price drifted since product was added to cart",
                    product_id=product_id,
                    cart_price=line.unit_price,
                    catalog_price=float(product["unit_price"]),
                )
            deadline.check("checkout")

    def checkout(
        self,
        caller: Caller,
        delivery_method: str | None = None,
        delivery_address: dict | None = None,
        notes: str | None = None,
        timeout=None,
    ) -> CheckoutResult:
        """Convert the caller's cart into one order per farm."""
        require_buyer(caller)
        buyer_id = str(caller.actor_id)
        deadline = Deadline.of(settings.DEFAULT_TIMEOUT_SECONDS if timeout is None else timeout)

        with self.cart_store.hold(buyer_id, deadline):
            cart = self.cart_store.load(buyer_id)
            if cart.is_empty:
                raise EmptyCart("Cart is empty")

            lines = cart.ordered_lines
            self._recheck_catalog(lines, deadline)

            result = CheckoutResult(buyer_id=buyer_id)
            for farm_id, farm_lines in partition_by_farm(lines).items():
                outcome = FarmOutcome(farm_id=farm_id, product_ids=[str(line.product_id) for line in farm_lines])
                try:
                    outcome.order = self.order_store.create_order(
                        buyer_id=buyer_id,
                        farm_id=farm_id,
                        items=[{"product_id": str(line.product_id), "quantity": line.quantity} for line in farm_lines],
                        prices_at_order_time={str(line.product_id): line.unit_price for line in farm_lines},
                        delivery_method=delivery_method,
                        delivery_address=delivery_address,
                        notes=notes,
                        timeout=deadline,
                    )
                except MarketError as exc:
                    outcome.error = exc
                    logger.warning(
                        "Checkout failed for farm",
                        buyer_id=buyer_id,
                        farm_id=farm_id,
                        error=exc.kind.value,
                        message=exc.message,
                    )
                result.outcomes.append(outcome)

            if not result.orders:
                raise result.outcomes[0].error

            ordered = [
                product_id for outcome in result.outcomes if outcome.succeeded for product_id in outcome.product_ids
            ]
            cart.remove_products(ordered)
            self.cart_store.save(cart)

        logger.info(
            "Checkout completed",
            buyer_id=buyer_id,
            orders=[str(order.id) for order in result.orders],
            failed_farms=[outcome.farm_id for outcome in result.failures],
        )
        return result

    # -------------------------------------------------------------------
    # Status and tracking
    # -------------------------------------------------------------------
    def update_status(
        self,
        caller: Caller,
        order_id: str,
        new_status,
        expected_status=None,
        note: str | None = None,
        timeout=None,
    ) -> Order:
        order = self.order_store.get_order(order_id)
        require_farm_access(caller, order.farm_id)
        return self.order_store.append_status_transition(
            order_id,
            new_status,
            actor_id=caller.actor_id,
            expected_status=expected_status,
            note=note,
            timeout=timeout,
        )

    def add_tracking(self, caller: Caller, order_id: str, event: dict, timeout=None) -> Order:
        order = self.order_store.get_order(order_id)
        require_farm_access(caller, order.farm_id)
        return self.order_store.append_tracking_event(order_id, event, actor_id=caller.actor_id, timeout=timeout)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get_order(self, caller: Caller, order_id: str) -> Order:
        order = self.order_store.get_order(order_id)
        require_order_visibility(caller, order.buyer_id, order.farm_id)
        return order

    def list_buyer_orders(self, caller: Caller, status=None, limit=None, offset=None) -> list[Order]:
        return self.order_store.list_orders_for_buyer(caller.actor_id, status=status, limit=limit, offset=offset)

    def list_farm_orders(self, caller: Caller, farm_id: str, status=None, limit=None, offset=None) -> list[Order]:
        require_farm_access(caller, farm_id)
        return self.order_store.list_orders_for_farm(farm_id, status=status, limit=limit, offset=offset)
