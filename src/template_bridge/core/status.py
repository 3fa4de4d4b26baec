"""
Status Reporter - periodic diagnostics about the cached template.

Only reads the cache; never fetches, publishes or writes.
"""

import asyncio
from typing import Awaitable, Callable, Optional

import structlog

from template_bridge.core.cache import TemplateView
from template_bridge.core.template import BlockTemplate

logger = structlog.get_logger(__name__)

NO_TEMPLATE_MESSAGE = "No block template fetched yet."


def format_template_status(template: BlockTemplate) -> str:
    """Render the key fields of a template as a human-readable block."""
    header = template.header
    rows = [
        ("HashMerkleRoot", header.hash_merkle_root),
        ("AcceptedIDMerkleRoot", header.accepted_id_merkle_root),
        ("UTXOCommitment", header.utxo_commitment),
        ("Timestamp", header.timestamp),
        ("Bits", header.bits),
        ("Nonce", header.nonce),
        ("DAAScore", header.daa_score),
        ("BlueWork", header.blue_work),
        ("BlueScore", header.blue_score),
        ("PruningPoint", header.pruning_point),
        ("Transactions Length", template.transaction_count),
        ("IsSynced", template.is_synced),
    ]
    lines = [f"{name:<22}: {value}" for name, value in rows]
    lines.append("-" * 39)
    return "\n".join(lines)


class StatusReporter:
    """
    Periodically reports on the most recent template.

    Given a TemplateView rather than the cache itself, so it has no way to
    modify shared state.
    """

    def __init__(
        self,
        view: TemplateView,
        interval_seconds: float = 5.0,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        emit: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize the reporter.

        Args:
            view: Read-only view of the template cache
            interval_seconds: Seconds between reports
            sleep: Sleep coroutine function (defaults to asyncio.sleep)
            emit: Where report text goes (defaults to the logger)
        """
        self.view = view
        self.interval_seconds = interval_seconds
        self._sleep = sleep or asyncio.sleep
        self._emit = emit
        self._running = False

    def report(self) -> str:
        """Produce one status report."""
        template = self.view.get()

        if template is None:
            text = NO_TEMPLATE_MESSAGE
            if self._emit is None:
                logger.info("template_status", status="empty", message=text)
        else:
            text = format_template_status(template)
            if self._emit is None:
                logger.info(
                    "template_status",
                    status="ready",
                    daa_score=template.header.daa_score,
                    blue_score=template.header.blue_score,
                    timestamp=template.header.timestamp,
                    bits=template.header.bits,
                    transactions=template.transaction_count,
                )
                logger.debug("template_status_detail", detail=text)

        if self._emit is not None:
            self._emit(text)
        return text

    async def start(self, max_ticks: Optional[int] = None) -> None:
        """
        Run the reporting loop.

        Args:
            max_ticks: Stop after this many reports (runs forever if None)
        """
        self._running = True
        ticks = 0
        try:
            while self._running:
                await self._sleep(self.interval_seconds)
                if not self._running:
                    break

                self.report()
                ticks += 1

                if max_ticks is not None and ticks >= max_ticks:
                    break

        except asyncio.CancelledError:
            logger.info("status_reporter_cancelled")
        finally:
            self._running = False

    def stop(self) -> None:
        """Stop the reporting loop."""
        self._running = False
