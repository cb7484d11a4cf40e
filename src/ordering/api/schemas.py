"""Pydantic request/response schemas for the Ordering API.

These are external contracts, separate from the Protean aggregates. View
models are built from aggregates with ``from_domain``.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    street: str | None = None
    city: str
    region: str | None = None
    country: str | None = None


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddItemRequest(BaseModel):
    product_id: str = Field(min_length=1)
    quantity: int = 1

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "prod-maize-001",
                    "quantity": 2,
                }
            ]
        }
    }


class UpdateItemRequest(BaseModel):
    quantity: int


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    delivery_method: Literal["pickup", "delivery"] = "pickup"
    delivery_address: AddressSchema | None = None
    notes: str | None = Field(default=None, max_length=1000)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "delivery_method": "delivery",
                    "delivery_address": {"street": "12 Rue du Marché", "city": "Lomé", "country": "TG"},
                    "notes": "Leave with the gate keeper",
                }
            ]
        }
    }


class StatusUpdateRequest(BaseModel):
    status: str
    expected_status: str | None = None
    note: str | None = Field(default=None, max_length=500)


class TrackingRequest(BaseModel):
    location: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=500)
    status_label: str | None = Field(default=None, max_length=100)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    estimated_arrival: datetime | None = None


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------
class CartLineView(BaseModel):
    product_id: str
    farm_id: str
    quantity: int
    unit_price: float
    line_total: float
    added_at: datetime | None = None


class CartView(BaseModel):
    buyer_id: str
    lines: list[CartLineView]
    line_count: int
    total_quantity: int
    estimated_total: float
    revision: int
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, cart) -> "CartView":
        return cls(
            buyer_id=str(cart.buyer_id),
            lines=[
                CartLineView(
                    product_id=str(line.product_id),
                    farm_id=str(line.farm_id),
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    line_total=line.line_total,
                    added_at=line.added_at,
                )
                for line in cart.ordered_lines
            ],
            revision=cart.revision or 0,
            updated_at=cart.updated_at,
            **cart.summary(),
        )


class OrderItemView(BaseModel):
    product_id: str
    quantity: int
    unit_price: float
    line_total: float


class StatusChangeView(BaseModel):
    status: str
    actor_id: str
    note: str | None = None
    changed_at: datetime


class TrackingEventView(BaseModel):
    location: str | None = None
    description: str | None = None
    status_label: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    estimated_arrival: datetime | None = None
    actor_id: str
    recorded_at: datetime


class OrderView(BaseModel):
    order_id: str
    buyer_id: str
    farm_id: str
    status: str
    total_amount: float
    currency: str
    delivery_method: str | None = None
    delivery_address: AddressSchema | None = None
    notes: str | None = None
    items: list[OrderItemView]
    status_history: list[StatusChangeView]
    tracking: list[TrackingEventView]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, order) -> "OrderView":
        address = order.delivery_address
        return cls(
            order_id=str(order.id),
            buyer_id=str(order.buyer_id),
            farm_id=str(order.farm_id),
            status=order.status,
            total_amount=order.total_amount,
            currency=order.currency,
            delivery_method=order.delivery_method,
            delivery_address=(
                AddressSchema(street=address.street, city=address.city, region=address.region, country=address.country)
                if address
                else None
            ),
            notes=order.notes,
            items=[
                OrderItemView(
                    product_id=str(item.product_id),
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    line_total=item.line_total,
                )
                for item in order.ordered_items
            ],
            status_history=[
                StatusChangeView(
                    status=change.status,
                    actor_id=str(change.actor_id),
                    note=change.note,
                    changed_at=change.changed_at,
                )
                for change in order.history
            ],
            tracking=[
                TrackingEventView(
                    location=event.location,
                    description=event.description,
                    status_label=event.status_label,
                    latitude=event.latitude,
                    longitude=event.longitude,
                    estimated_arrival=event.estimated_arrival,
                    actor_id=str(event.actor_id),
                    recorded_at=event.recorded_at,
                )
                for event in order.tracking
            ],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class FarmOutcomeView(BaseModel):
    farm_id: str
    product_ids: list[str]
    status: Literal["created", "failed"]
    order: OrderView | None = None
    error: str | None = None
    message: str | None = None


class CheckoutView(BaseModel):
    buyer_id: str
    complete: bool
    orders: list[OrderView]
    outcomes: list[FarmOutcomeView]

    @classmethod
    def from_domain(cls, result) -> "CheckoutView":
        outcomes = []
        for outcome in result.outcomes:
            if outcome.succeeded:
                outcomes.append(
                    FarmOutcomeView(
                        farm_id=outcome.farm_id,
                        product_ids=outcome.product_ids,
                        status="created",
                        order=OrderView.from_domain(outcome.order),
                    )
                )
            else:
                outcomes.append(
                    FarmOutcomeView(
                        farm_id=outcome.farm_id,
                        product_ids=outcome.product_ids,
                        status="failed",
                        error=outcome.error.kind.value,
                        message=outcome.error.message,
                    )
                )
        return cls(
            buyer_id=result.buyer_id,
            complete=result.complete,
            orders=[outcome.order for outcome in outcomes if outcome.order is not None],
            outcomes=outcomes,
        )


class DevProductRequest(BaseModel):
    product_id: str
    farm_id: str
    unit_price: float = Field(ge=0)
    available_quantity: int = Field(ge=0, default=100)
    name: str | None = None
