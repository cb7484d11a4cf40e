"""Flat, immutable views of orders that the analytics functions work on."""

from dataclasses import dataclass, field
from datetime import datetime

from shared.clock import as_utc

from ordering.order.order import OrderStatus


@dataclass(frozen=True)
class ItemFact:
    product_id: str
    quantity: int
    unit_price: float

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class OrderFact:
    order_id: str
    buyer_id: str
    farm_id: str
    status: str
    total_amount: float
    created_at: datetime
    items: tuple[ItemFact, ...] = field(default_factory=tuple)
    confirmed_at: datetime | None = None
    delivered_at: datetime | None = None

    @property
    def cancelled(self) -> bool:
        return self.status == OrderStatus.CANCELLED.value

    @property
    def delivered(self) -> bool:
        return self.status == OrderStatus.DELIVERED.value

    @classmethod
    def from_order(cls, order) -> "OrderFact":
        return cls(
            order_id=str(order.id),
            buyer_id=str(order.buyer_id),
            farm_id=str(order.farm_id),
            status=order.status,
            total_amount=order.total_amount or 0.0,
            created_at=as_utc(order.created_at),
            items=tuple(
                ItemFact(product_id=str(item.product_id), quantity=item.quantity, unit_price=item.unit_price)
                for item in order.ordered_items
            ),
            confirmed_at=order.reached_at(OrderStatus.CONFIRMED),
            delivered_at=order.reached_at(OrderStatus.DELIVERED),
        )
