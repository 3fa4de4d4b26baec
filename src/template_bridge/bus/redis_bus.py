"""
Redis pub/sub adapter for the message bus.
"""

from typing import Optional

import redis.asyncio as aioredis
import structlog
from redis.exceptions import RedisError

from template_bridge.bus.interface import MessageBus
from template_bridge.config import BridgeConfig
from template_bridge.errors import BusConnectionError, BusPublishError

logger = structlog.get_logger(__name__)


class RedisBus(MessageBus):
    """
    Redis adapter.

    Implements the MessageBus using Redis PUBLISH.
    """

    def __init__(self, config: BridgeConfig):
        self.config = config
        self.url = config.redis_url
        self._client: Optional[aioredis.Redis] = None

    async def connect(self) -> None:
        if self._client is not None:
            return
        self._client = aioredis.Redis.from_url(
            self.url,
            socket_timeout=self.config.redis_timeout_seconds,
            socket_connect_timeout=self.config.redis_timeout_seconds,
        )

    async def ping(self) -> None:
        if self._client is None:
            await self.connect()
        try:
            await self._client.ping()
        except (RedisError, OSError) as e:
            raise BusConnectionError(f"could not connect to Redis at {self.config.redis_address}: {e}")
        logger.info("redis_connected", address=self.config.redis_address)

    async def publish(self, channel: str, data: bytes) -> int:
        if self._client is None:
            await self.connect()
        try:
            return await self._client.publish(channel, data)
        except (RedisError, OSError) as e:
            raise BusPublishError(f"error publishing to Redis: {e}")

    async def close(self) -> None:
        if self._client is None:
            return
        await self._client.aclose()
        self._client = None
        logger.info("redis_closed")
