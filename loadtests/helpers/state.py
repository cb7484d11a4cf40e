"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; no cross-user sharing.
State tracks ids returned by the API so follow-up requests can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class BuyerState:
    """Tracks a simulated buyer's cart and placed orders."""

    buyer_id: str | None = None
    cart_quantity: int = 0
    order_ids: list[str] = field(default_factory=list)


@dataclass
class OrderState:
    """Tracks a single order as its farm moves it along."""

    order_id: str | None = None
    farm_id: str | None = None
    current_status: str = "pending"
