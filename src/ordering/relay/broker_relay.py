"""Broker event relay: publishes ordering events through the domain's Protean broker.

The broker is whatever ``brokers.<name>`` the ordering domain is configured
with (inline in development, Redis in production). Subscribers of the
notification service read the ``RELAY_STREAM`` stream.
"""

from uuid import uuid4

import structlog
from protean.utils.globals import current_domain

from ordering import settings
from ordering.relay.port import EventRelay

logger = structlog.get_logger(__name__)


class BrokerEventRelay(EventRelay):
    def __init__(self, broker_name: str | None = None, stream: str | None = None):
        self.broker_name = broker_name or settings.RELAY_BROKER
        self.stream = stream or settings.RELAY_STREAM

    @property
    def broker(self):
        return current_domain.brokers[self.broker_name]

    def publish(self, event) -> dict:
        message_id = f"evt-{uuid4().hex[:12]}"
        message = {
            "message_id": message_id,
            "type": event.__class__.__name__,
            "version": getattr(event, "__version__", "v1"),
            "payload": event.to_dict(),
        }
        identifier = self.broker.publish(self.stream, message)
        logger.debug("Event relayed", stream=self.stream, event_type=message["type"], broker_message_id=identifier)
        return {"message_id": message_id, "broker_message_id": identifier, "status": "sent"}
