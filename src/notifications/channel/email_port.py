"""Email channel port — the interface notification dispatch sends through."""

from abc import ABC, abstractmethod


class EmailDeliveryError(Exception):
    """The adapter could not hand the message over."""


class EmailPort(ABC):
    @abstractmethod
    def send(self, to: str, subject: str, body: str) -> str:
        """Send one message and return the provider's message id.

        Raises ``EmailDeliveryError`` when the message was not accepted.
        """
