"""
Template Poller - the fetch, cache, publish, sleep loop.

Coordinates the node, the template cache and the publisher.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Optional

import structlog

from template_bridge.bus.publisher import TemplatePublisher
from template_bridge.core.cache import TemplateCache
from template_bridge.core.template import BlockTemplate
from template_bridge.errors import PublishError
from template_bridge.node.interface import NodeInterface

logger = structlog.get_logger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class PollState(str, Enum):
    """State of the poll loop."""
    IDLE = "idle"                 # Not started, or stopped
    FETCHING = "fetching"         # Waiting on the node
    CACHING = "caching"           # Storing the fetched template
    PUBLISHING = "publishing"     # Broadcasting on the bus
    SLEEPING = "sleeping"         # Waiting for the next cycle


@dataclass
class CycleResult:
    """Outcome of a single poll cycle."""
    template: Optional[BlockTemplate] = None
    fetch_error: Optional[Exception] = None
    publish_error: Optional[PublishError] = None
    receivers: int = 0

    @property
    def fetched(self) -> bool:
        return self.template is not None

    @property
    def published(self) -> bool:
        return self.fetched and self.publish_error is None


class TemplatePoller:
    """
    Polls the node for block templates and relays them.

    Each cycle fetches a template, caches it, publishes it and then sleeps for
    the configured interval. A failed fetch skips straight to sleeping; the
    next cycle is the retry. The cache is always written before publishing,
    so a bus failure never loses the latest template locally.

    Usage:
        ```python
        poller = TemplatePoller(node, cache, publisher, address, channel, 1)
        await poller.start()  # Runs until stop()
        ```
    """

    def __init__(
        self,
        node: NodeInterface,
        cache: TemplateCache,
        publisher: TemplatePublisher,
        miner_address: str,
        channel: str,
        interval_seconds: float,
        sleep: Optional[SleepFunc] = None,
    ):
        """
        Initialize the poller.

        Args:
            node: Node to fetch templates from
            cache: Cache holding the latest template
            publisher: Publisher for the bus
            miner_address: Payout address passed to the node
            channel: Bus channel templates are published on
            interval_seconds: Wait between cycles
            sleep: Sleep coroutine function (defaults to asyncio.sleep)
        """
        self.node = node
        self.cache = cache
        self.publisher = publisher
        self.miner_address = miner_address
        self.channel = channel
        self.interval_seconds = interval_seconds
        self._sleep = sleep or asyncio.sleep

        self._state = PollState.IDLE
        self._running = False

        self._stats = {
            "cycles": 0,
            "fetch_failures": 0,
            "published": 0,
            "publish_failures": 0,
        }
        self._last_success_time: Optional[datetime] = None

    @property
    def state(self) -> PollState:
        return self._state

    @property
    def running(self) -> bool:
        return self._running

    async def start(self, max_cycles: Optional[int] = None) -> None:
        """
        Run the poll loop.

        Args:
            max_cycles: Stop after this many cycles (runs forever if None)
        """
        self._running = True
        logger.info(
            "poller_starting",
            miner_address=self.miner_address,
            channel=self.channel,
            interval_seconds=self.interval_seconds,
        )

        cycles = 0
        try:
            while self._running:
                await self.run_cycle()
                cycles += 1

                if max_cycles is not None and cycles >= max_cycles:
                    break

                self._state = PollState.SLEEPING
                await self._sleep(self.interval_seconds)

        except asyncio.CancelledError:
            logger.info("poller_cancelled")
        finally:
            self._running = False
            self._state = PollState.IDLE

    def stop(self) -> None:
        """Stop the poll loop after the current step."""
        self._running = False
        logger.info("poller_stopping")

    async def run_cycle(self) -> CycleResult:
        """Run one fetch, cache, publish pass (without sleeping)."""
        result = CycleResult()
        self._stats["cycles"] += 1

        # 1. Fetch
        self._state = PollState.FETCHING
        try:
            template = await self.node.get_block_template(self.miner_address)
        except Exception as e:
            self._stats["fetch_failures"] += 1
            result.fetch_error = e
            logger.error("template_fetch_failed", error=str(e))
            return result

        result.template = template
        self._last_success_time = datetime.utcnow()

        # 2. Cache, strictly before publishing
        self._state = PollState.CACHING
        self.cache.set(template)

        # 3. Publish
        self._state = PollState.PUBLISHING
        try:
            result.receivers = await self.publisher.publish(self.channel, template)
            self._stats["published"] += 1
        except PublishError as e:
            self._stats["publish_failures"] += 1
            result.publish_error = e
            logger.error(
                "template_publish_failed",
                channel=self.channel,
                stage=e.stage,
                error=str(e),
            )

        return result

    def get_stats(self) -> dict:
        """Get poller statistics."""
        return {
            **self._stats,
            "state": self._state.value,
            "running": self._running,
            "last_success_time": (
                self._last_success_time.isoformat() if self._last_success_time else None
            ),
        }
