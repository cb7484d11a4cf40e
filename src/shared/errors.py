"""Error taxonomy shared by the cart, order and analytics components.

Every failure the core surfaces is a ``MarketError`` carrying a stable
``ErrorKind``. The HTTP layer maps kinds to status codes; callers branch on
``kind`` rather than on exception classes or message text.
"""

from enum import Enum


class ErrorKind(Enum):
    INVALID_QUANTITY = "InvalidQuantity"
    ITEM_NOT_FOUND = "ItemNotFound"
    EMPTY_CART = "EmptyCart"
    EMPTY_ORDER = "EmptyOrder"
    INVALID_REFERENCE = "InvalidReference"
    INSUFFICIENT_STOCK = "InsufficientStock"
    INVALID_TRANSITION = "InvalidTransition"
    TERMINAL_STATE = "TerminalState"
    INVALID_STATE = "InvalidState"
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    TIMEOUT = "Timeout"
    UNAVAILABLE = "Unavailable"
    FORBIDDEN = "Forbidden"
    UNAUTHENTICATED = "Unauthenticated"
    INVALID_REQUEST = "InvalidRequest"


class MarketError(Exception):
    """Base class for every error raised by the ordering core."""

    kind: ErrorKind = ErrorKind.INVALID_REQUEST

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        payload = {"error": self.kind.value, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class InvalidQuantity(MarketError):
    kind = ErrorKind.INVALID_QUANTITY


class ItemNotFound(MarketError):
    kind = ErrorKind.ITEM_NOT_FOUND


class EmptyCart(MarketError):
    kind = ErrorKind.EMPTY_CART


class EmptyOrder(MarketError):
    kind = ErrorKind.EMPTY_ORDER


class InvalidReference(MarketError):
    kind = ErrorKind.INVALID_REFERENCE


class InsufficientStock(MarketError):
    """Requested quantity exceeds what the catalog reports as available."""

    kind = ErrorKind.INSUFFICIENT_STOCK

    def __init__(self, message: str, product_id: str, requested: int, available: int):
        super().__init__(message, product_id=product_id, requested=requested, available=available)
        self.product_id = product_id
        self.requested = requested
        self.available = available


class InvalidTransition(MarketError):
    kind = ErrorKind.INVALID_TRANSITION


class TerminalState(MarketError):
    kind = ErrorKind.TERMINAL_STATE


class InvalidState(MarketError):
    kind = ErrorKind.INVALID_STATE


class NotFound(MarketError):
    kind = ErrorKind.NOT_FOUND


class Conflict(MarketError):
    kind = ErrorKind.CONFLICT


class Timeout(MarketError):
    kind = ErrorKind.TIMEOUT


class Unavailable(MarketError):
    kind = ErrorKind.UNAVAILABLE


class Forbidden(MarketError):
    kind = ErrorKind.FORBIDDEN


class Unauthenticated(MarketError):
    kind = ErrorKind.UNAUTHENTICATED


class InvalidRequest(MarketError):
    kind = ErrorKind.INVALID_REQUEST
