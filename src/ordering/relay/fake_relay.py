"""Fake event relay: records published events for test assertions."""

from uuid import uuid4

from ordering.relay.port import EventRelay


class FakeEventRelay(EventRelay):
    # Oldest records are dropped beyond this many
    MAX_RECORDS = 1000

    def __init__(self):
        self.published: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Relay unavailable"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Relay unavailable"):
        """Configure the fake relay behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def publish(self, event) -> dict:
        if not self.should_succeed:
            raise ConnectionError(self.failure_reason)

        message_id = f"evt-{uuid4().hex[:12]}"
        self.published.append(
            {
                "message_id": message_id,
                "type": event.__class__.__name__,
                "payload": event.to_dict(),
            }
        )
        del self.published[: -self.MAX_RECORDS]
        return {"message_id": message_id, "status": "sent"}

    def of_type(self, event_type: str) -> list[dict]:
        return [record for record in self.published if record["type"] == event_type]

    def reset(self):
        """Clear published events (useful between tests)."""
        self.published.clear()
        self.should_succeed = True
        self.failure_reason = "Relay unavailable"
