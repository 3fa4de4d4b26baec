"""
Template Publisher - broadcasts block templates on the message bus.
"""

import json

import structlog

from template_bridge.bus.interface import MessageBus
from template_bridge.core.template import BlockTemplate
from template_bridge.errors import BusError, PublishError

logger = structlog.get_logger(__name__)


def serialize_template(template: BlockTemplate) -> bytes:
    """
    Encode a template as canonical JSON.

    Keys are sorted and separators compact, so equal templates always encode
    to identical bytes.

    Raises:
        TypeError, ValueError: If the template holds non-JSON values
    """
    return json.dumps(
        template.to_dict(),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    ).encode("utf-8")


def deserialize_template(data: bytes) -> BlockTemplate:
    """Decode a published payload back into a template."""
    return BlockTemplate.from_rpc(json.loads(data))


class TemplatePublisher:
    """
    Serializes templates and publishes them to a bus channel.

    Failures are raised as PublishError for the caller to log; they never
    affect the cached template.
    """

    def __init__(self, bus: MessageBus):
        self.bus = bus

    async def publish(self, channel: str, template: BlockTemplate) -> int:
        """
        Publish a template.

        Args:
            channel: Bus channel name
            template: Template to broadcast

        Returns:
            Number of subscribers that received it

        Raises:
            PublishError: If serialization or the transport fails
        """
        try:
            payload = serialize_template(template)
        except (TypeError, ValueError) as e:
            raise PublishError(
                f"error serializing template to JSON: {e}",
                stage=PublishError.SERIALIZE,
                cause=e,
            )

        try:
            receivers = await self.bus.publish(channel, payload)
        except BusError as e:
            raise PublishError(str(e), stage=PublishError.TRANSPORT, cause=e)

        logger.info(
            "template_published",
            channel=channel,
            receivers=receivers,
            size=len(payload),
        )
        return receivers
