"""
Main bridge orchestrator.

Wires the node, the template cache, the publisher and the two background
loops together, and owns the startup and shutdown sequence.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional

import structlog

from template_bridge.bus.interface import MessageBus
from template_bridge.bus.publisher import TemplatePublisher
from template_bridge.bus.redis_bus import RedisBus
from template_bridge.config import BridgeConfig
from template_bridge.core.cache import TemplateCache
from template_bridge.core.poller import TemplatePoller
from template_bridge.core.status import StatusReporter
from template_bridge.errors import (
    AddressDerivationError,
    BusError,
    NodeConnectionError,
    StartupError,
)
from template_bridge.node.interface import NodeInterface
from template_bridge.node.wrpc import KaspadWrpcAdapter
from template_bridge.wallet.address import address_from_private_key_hex

logger = structlog.get_logger(__name__)


class TemplateBridge:
    """
    Relays block templates from a Kaspa node to a pub/sub channel.

    Coordinates:
    - Payout address derivation
    - Node and bus connections (both checked at startup)
    - The template poller (fetch, cache, publish)
    - The status reporter (read-only diagnostics)

    Usage:
        ```python
        bridge = TemplateBridge(config)
        await bridge.initialize()
        await bridge.start()  # Runs until stop()
        ```
    """

    def __init__(
        self,
        config: BridgeConfig,
        node: Optional[NodeInterface] = None,
        bus: Optional[MessageBus] = None,
        cache: Optional[TemplateCache] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        """
        Initialize the bridge.

        Args:
            config: Bridge configuration
            node: Custom node interface (wRPC adapter if not provided)
            bus: Custom message bus (Redis if not provided)
            cache: Template cache (a new empty one if not provided)
            sleep: Sleep coroutine function for both loops (asyncio.sleep if not provided)
        """
        self.config = config
        self.node = node or KaspadWrpcAdapter(config)
        self.bus = bus or RedisBus(config)
        self.cache = cache or TemplateCache()
        self._sleep = sleep

        self.miner_address: Optional[str] = None
        self._poller: Optional[TemplatePoller] = None
        self._reporter: Optional[StatusReporter] = None
        self._tasks: List[asyncio.Task] = []
        self._initialized = False

    @property
    def poller(self) -> Optional[TemplatePoller]:
        return self._poller

    @property
    def reporter(self) -> Optional[StatusReporter]:
        return self._reporter

    def derive_miner_address(self) -> str:
        """
        Derive the payout address from the configured private key.

        Raises:
            AddressDerivationError: If the key is missing or invalid
        """
        key = self.config.treasury_private_key
        return address_from_private_key_hex(
            self.config.network,
            key.get_secret_value() if key is not None else None,
        )

    async def initialize(self) -> None:
        """
        Run the startup sequence.

        Raises:
            StartupError: On any fatal condition (bad key, unreachable node or bus)
        """
        if self._initialized:
            return

        logger.info("bridge_initializing", config=self.config.redacted())

        try:
            self.miner_address = self.derive_miner_address()
        except AddressDerivationError as e:
            raise StartupError(f"failed to retrieve address from private key: {e}")
        logger.info("miner_address", address=self.miner_address)

        try:
            await self.node.connect()
        except NodeConnectionError as e:
            raise StartupError(f"failed to initialize node client: {e}")

        try:
            await self.bus.connect()
            await self.bus.ping()
        except BusError as e:
            await self.bus.close()
            await self.node.disconnect()
            raise StartupError(f"could not connect to message bus: {e}")

        self._poller = TemplatePoller(
            node=self.node,
            cache=self.cache,
            publisher=TemplatePublisher(self.bus),
            miner_address=self.miner_address,
            channel=self.config.redis_channel,
            interval_seconds=self.config.block_wait_time_seconds,
            sleep=self._sleep,
        )
        self._reporter = StatusReporter(
            view=self.cache.read_only(),
            interval_seconds=self.config.status_interval_seconds,
            sleep=self._sleep,
        )

        self._initialized = True
        logger.info("bridge_initialized")

    async def start(self) -> None:
        """Run the poller and status reporter until stopped."""
        if not self._initialized:
            await self.initialize()

        logger.info("bridge_starting")
        self._tasks = [
            asyncio.create_task(self._poller.start(), name="template-poller"),
            asyncio.create_task(self._reporter.start(), name="status-reporter"),
        ]

        try:
            await asyncio.gather(*self._tasks)
        except asyncio.CancelledError:
            logger.info("bridge_cancelled")
        finally:
            await self.shutdown()

    def stop(self) -> None:
        """Stop both loops."""
        logger.info("bridge_stopping")
        if self._poller:
            self._poller.stop()
        if self._reporter:
            self._reporter.stop()
        for task in self._tasks:
            if not task.done():
                task.cancel()

    async def shutdown(self) -> None:
        """Close the bus and node connections."""
        self.stop()
        self._tasks = []

        try:
            await self.bus.close()
        except Exception as e:
            logger.warning("bus_close_failed", error=str(e))

        try:
            await self.node.disconnect()
        except Exception as e:
            logger.warning("node_disconnect_failed", error=str(e))

        self._initialized = False
        logger.info("bridge_shutdown")

    def get_stats(self) -> dict:
        """Get bridge statistics."""
        template = self.cache.get()
        return {
            "initialized": self._initialized,
            "miner_address": self.miner_address,
            "channel": self.config.redis_channel,
            "cache_updates": self.cache.update_count,
            "cached_daa_score": template.header.daa_score if template else None,
            "poller": self._poller.get_stats() if self._poller else {},
        }
