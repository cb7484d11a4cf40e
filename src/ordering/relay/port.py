"""Event relay port: hands ordering events to the notification service."""

from abc import ABC, abstractmethod


class EventRelay(ABC):
    @abstractmethod
    def publish(self, event) -> dict:
        """Publish a domain event.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (on failure)
        """
        ...
