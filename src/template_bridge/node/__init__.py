"""
Node Integration Layer.

Provides abstracted access to a Kaspa full node for block template retrieval.
"""

from template_bridge.node.interface import NodeInterface
from template_bridge.node.wrpc import KaspadWrpcAdapter

__all__ = [
    "NodeInterface",
    "KaspadWrpcAdapter",
]
