"""Caller identity as forwarded by the access-control gateway.

Authentication happens upstream; by the time a request reaches the ordering
core it carries an already-validated actor id, a role and, for farmers, the
farm they act for.
"""

from dataclasses import dataclass
from enum import Enum

from shared.errors import Forbidden


class Role(Enum):
    BUYER = "buyer"
    FARMER = "farmer"
    ADMIN = "admin"


@dataclass(frozen=True)
class Caller:
    actor_id: str
    role: Role
    farm_id: str | None = None

    @classmethod
    def from_values(cls, actor_id: str, role: str, farm_id: str | None = None) -> "Caller":
        try:
            parsed = Role(role.lower())
        except ValueError:
            raise Forbidden(f"Unknown role {role!r}") from None
        return cls(actor_id=actor_id, role=parsed, farm_id=farm_id or None)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def acts_for_farm(self, farm_id: str) -> bool:
        return self.role == Role.FARMER and self.farm_id is not None and str(self.farm_id) == str(farm_id)


def require_buyer(caller: Caller) -> None:
    if caller.role not in (Role.BUYER, Role.ADMIN):
        raise Forbidden("Only buyers can manage a cart or check out")


def require_farm_access(caller: Caller, farm_id: str) -> None:
    """Allow admins and the farmer acting for ``farm_id``."""
    if caller.is_admin or caller.acts_for_farm(farm_id):
        return
    raise Forbidden(f"Actor {caller.actor_id} cannot act for farm {farm_id}")


def require_order_visibility(caller: Caller, buyer_id: str, farm_id: str) -> None:
    """Allow the owning buyer, the owning farm and admins."""
    if caller.is_admin or caller.acts_for_farm(farm_id):
        return
    if str(caller.actor_id) == str(buyer_id):
        return
    raise Forbidden(f"Actor {caller.actor_id} cannot view this order")
