"""Event relay abstraction: pluggable delivery of ordering events."""

import os

import structlog

logger = structlog.get_logger(__name__)

_relay_instance = None


def get_relay():
    """Return the configured event relay (singleton).

    Publishes through the domain broker by default; configure via
    RELAY_ADAPTER ("broker" or "fake").
    """
    global _relay_instance
    if _relay_instance is None:
        adapter = os.environ.get("RELAY_ADAPTER", "broker")
        if adapter == "broker":
            from ordering.relay.broker_relay import BrokerEventRelay

            _relay_instance = BrokerEventRelay()
        elif adapter == "fake":
            from ordering.relay.fake_relay import FakeEventRelay

            _relay_instance = FakeEventRelay()
        else:
            raise ValueError(f"Unknown relay adapter: {adapter}")
    return _relay_instance


def reset_relay():
    """Reset the relay singleton (useful for testing)."""
    global _relay_instance
    _relay_instance = None


def publish_all(events) -> int:
    """Publish events after they have been persisted.

    Delivery is best effort: the order is already stored, so a relay failure
    is logged and the remaining events are still attempted. Returns the
    number of events delivered.
    """
    relay = get_relay()
    delivered = 0
    for event in events:
        try:
            relay.publish(event)
            delivered += 1
        except Exception as exc:
            logger.error(
                "Event relay failed",
                event_type=event.__class__.__name__,
                order_id=str(getattr(event, "order_id", "")),
                error=str(exc),
            )
    return delivered
