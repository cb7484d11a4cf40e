"""Buyer cart aggregate: one entry per buyer, kept in a key-value cache.

A cart holds at most one line per product. Adding a product that is already
in the cart merges the quantities and keeps the price captured when the
product first entered the cart. Every mutation bumps ``revision`` and moves
``updated_at`` strictly forward, even when the wall clock has not advanced.
"""

from datetime import UTC, datetime, timedelta

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer
from shared.errors import InvalidQuantity, ItemNotFound

from ordering.domain import ordering


def validate_quantity(quantity, allow_zero: bool = False) -> int:
    """Return ``quantity`` as an int or raise ``InvalidQuantity``."""
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantity(f"Quantity must be a whole number, got {quantity!r}")
    if quantity < 0 or (quantity == 0 and not allow_zero):
        raise InvalidQuantity(f"Quantity must be positive, got {quantity}")
    return quantity


def _parse_datetime(value):
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@ordering.entity(part_of="Cart")
class CartLine:
    product_id = Identifier(required=True)
    farm_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)  # frozen when first added
    position = Integer(default=0)
    added_at = DateTime()

    @property
    def line_total(self) -> float:
        return round(self.quantity * self.unit_price, 2)


@ordering.aggregate
class Cart:
    buyer_id = Identifier(identifier=True, required=True)
    lines = HasMany(CartLine)
    revision = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def lines_must_be_unique_and_positive(self):
        seen = set()
        for line in self.lines or []:
            if line.quantity is None or line.quantity <= 0:
                raise ValidationError({"lines": [f"Quantity for {line.product_id} must be positive"]})
            if str(line.product_id) in seen:
                raise ValidationError({"lines": [f"Product {line.product_id} appears more than once"]})
            seen.add(str(line.product_id))

    # -------------------------------------------------------------------
    # Factory / serialization
    # -------------------------------------------------------------------
    @classmethod
    def empty(cls, buyer_id: str) -> "Cart":
        return cls(buyer_id=str(buyer_id), revision=0)

    @classmethod
    def from_payload(cls, payload: dict) -> "Cart":
        """Rebuild a cart from its cached JSON form."""
        cart = cls(
            buyer_id=payload["buyer_id"],
            revision=payload.get("revision", 0),
            created_at=_parse_datetime(payload.get("created_at")),
            updated_at=_parse_datetime(payload.get("updated_at")),
        )
        for line in payload.get("lines", []):
            cart.add_lines(
                CartLine(
                    product_id=line["product_id"],
                    farm_id=line["farm_id"],
                    quantity=line["quantity"],
                    unit_price=line["unit_price"],
                    position=line.get("position", 0),
                    added_at=_parse_datetime(line.get("added_at")),
                )
            )
        return cart

    def to_payload(self) -> dict:
        return {
            "buyer_id": str(self.buyer_id),
            "revision": self.revision or 0,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "lines": [
                {
                    "product_id": str(line.product_id),
                    "farm_id": str(line.farm_id),
                    "quantity": line.quantity,
                    "unit_price": line.unit_price,
                    "position": line.position,
                    "added_at": line.added_at.isoformat() if line.added_at else None,
                }
                for line in self.ordered_lines
            ],
        }

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def ordered_lines(self) -> list:
        return sorted(self.lines or [], key=lambda line: line.position or 0)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def line_for(self, product_id):
        return next((line for line in self.lines or [] if str(line.product_id) == str(product_id)), None)

    def summary(self) -> dict:
        lines = self.ordered_lines
        return {
            "line_count": len(lines),
            "total_quantity": sum(line.quantity for line in lines),
            "estimated_total": round(sum(line.quantity * line.unit_price for line in lines), 2),
        }

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def _touch(self) -> None:
        now = datetime.now(UTC)
        if self.updated_at is not None and now <= self.updated_at:
            now = self.updated_at + timedelta(microseconds=1)
        if self.created_at is None:
            self.created_at = now
        self.updated_at = now
        self.revision = (self.revision or 0) + 1

    def add_line(self, product_id, farm_id, quantity, unit_price) -> CartLine:
        """Add ``quantity`` of a product, merging into an existing line."""
        quantity = validate_quantity(quantity)

        existing = self.line_for(product_id)
        if existing is not None:
            existing.quantity = existing.quantity + quantity
            self._touch()
            return existing

        self._touch()
        line = CartLine(
            product_id=str(product_id),
            farm_id=str(farm_id),
            quantity=quantity,
            unit_price=float(unit_price),
            position=max((line.position or 0 for line in self.lines or []), default=-1) + 1,
            added_at=self.updated_at,
        )
        self.add_lines(line)
        return line

    def set_quantity(self, product_id, quantity) -> CartLine | None:
        """Set the absolute quantity of a line; zero removes it."""
        quantity = validate_quantity(quantity, allow_zero=True)

        line = self.line_for(product_id)
        if line is None:
            raise ItemNotFound(f"Product {product_id} is not in the cart")

        if quantity == 0:
            self.remove_lines(line)
            self._touch()
            return None

        line.quantity = quantity
        self._touch()
        return line

    def remove_line(self, product_id) -> bool:
        """Remove a product's line. Removing an absent product is a no-op."""
        line = self.line_for(product_id)
        if line is None:
            return False
        self.remove_lines(line)
        self._touch()
        return True

    def remove_products(self, product_ids) -> None:
        wanted = {str(product_id) for product_id in product_ids}
        doomed = [line for line in self.lines or [] if str(line.product_id) in wanted]
        for line in doomed:
            self.remove_lines(line)
        if doomed:
            self._touch()
