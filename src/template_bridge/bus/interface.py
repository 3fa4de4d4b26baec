"""
Abstract interface for the message bus.

The bridge publishes bytes to a named channel; subscribers receive a copy.
"""

from abc import ABC, abstractmethod


class MessageBus(ABC):
    """Minimal pub/sub surface used by the bridge."""

    @abstractmethod
    async def connect(self) -> None:
        """Open the connection to the bus."""
        pass

    @abstractmethod
    async def ping(self) -> None:
        """
        Check that the bus is reachable.

        Raises:
            BusConnectionError: If the bus does not answer
        """
        pass

    @abstractmethod
    async def publish(self, channel: str, data: bytes) -> int:
        """
        Publish a message on a channel.

        Args:
            channel: Channel name
            data: Message payload

        Returns:
            Number of subscribers that received the message

        Raises:
            BusPublishError: If the message could not be sent
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the connection to the bus."""
        pass
