"""
Exception hierarchy for the template bridge.

Startup errors are fatal and abort the process. Steady-state errors
(node, publish, bus) are logged by the loops and retried on the next cycle.
"""

from typing import Optional


class BridgeError(Exception):
    """Base class for all bridge errors."""
    pass


class ConfigError(BridgeError):
    """Raised when the configuration file or environment is invalid."""
    pass


class AddressDerivationError(BridgeError):
    """Raised when the payout address cannot be derived from key material."""
    pass


class StartupError(BridgeError):
    """Raised when a fatal condition prevents the bridge from starting."""
    pass


class NodeConnectionError(BridgeError):
    """Raised when connection to the node fails."""
    pass


class TemplateFetchError(BridgeError):
    """Raised when the node rejects or fails a block template request."""
    pass


class BusError(BridgeError):
    """Base class for message bus transport errors."""
    pass


class BusConnectionError(BusError):
    """Raised when the message bus cannot be reached."""
    pass


class BusPublishError(BusError):
    """Raised when a message cannot be published to the bus."""
    pass


class PublishError(BridgeError):
    """
    Raised when a template could not be broadcast.

    Attributes:
        stage: "serialize" if encoding failed, "transport" if the bus failed
    """

    SERIALIZE = "serialize"
    TRANSPORT = "transport"

    def __init__(self, message: str, stage: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.stage = stage
        self.cause = cause
