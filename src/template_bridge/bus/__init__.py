"""
Message bus layer.

Publishes serialized block templates to a pub/sub channel.
"""

from template_bridge.bus.interface import MessageBus
from template_bridge.bus.publisher import (
    TemplatePublisher,
    deserialize_template,
    serialize_template,
)
from template_bridge.bus.redis_bus import RedisBus

__all__ = [
    "MessageBus",
    "RedisBus",
    "TemplatePublisher",
    "serialize_template",
    "deserialize_template",
]
