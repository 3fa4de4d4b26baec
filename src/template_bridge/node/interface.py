"""
Abstract interface for Kaspa node integration.

Defines the contract for node access that all node adapters must implement.
"""

from abc import ABC, abstractmethod

from template_bridge.core.template import BlockTemplate


class NodeInterface(ABC):
    """
    Abstract interface for Kaspa node access.

    The bridge only needs block template retrieval for a payout address.
    """

    @abstractmethod
    async def connect(self) -> None:
        """
        Establish connection to the node.

        Raises:
            NodeConnectionError: If connection cannot be established
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection to the node."""
        pass

    @abstractmethod
    async def get_block_template(self, miner_address: str) -> BlockTemplate:
        """
        Get a new block template paying out to the given address.

        Args:
            miner_address: Address credited with the block reward

        Returns:
            The block template built by the node

        Raises:
            NodeConnectionError: If the node cannot be reached
            TemplateFetchError: If the node returns an error or a malformed template
        """
        pass
