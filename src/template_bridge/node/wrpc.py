"""
Kaspad wRPC adapter for node integration.

Provides block templates via the node's JSON-RPC over WebSocket interface.
"""

import asyncio
import itertools
import json
from typing import Any, Dict, Optional

import structlog
import websockets

from template_bridge.config import BridgeConfig
from template_bridge.core.template import BlockTemplate
from template_bridge.errors import NodeConnectionError, TemplateFetchError
from template_bridge.node.interface import NodeInterface

logger = structlog.get_logger(__name__)


class KaspadWrpcAdapter(NodeInterface):
    """
    Kaspad wRPC (JSON encoding) adapter.

    Implements the NodeInterface over a single WebSocket connection. Responses
    are matched to requests by id in a background receive loop.
    """

    def __init__(self, config: BridgeConfig):
        """
        Initialize the wRPC adapter.

        Args:
            config: Bridge configuration
        """
        self.config = config
        self.url = config.node_url
        self.timeout = config.node_timeout_seconds
        self.extra_data = config.extra_data
        self._ws: Optional[Any] = None
        self._pending_requests: Dict[int, asyncio.Future] = {}
        self._receive_task: Optional[asyncio.Task] = None
        self._ids = itertools.count(1)

    @property
    def connected(self) -> bool:
        return self._ws is not None

    async def connect(self) -> None:
        """Establish WebSocket connection to the node."""
        if self._ws is not None:
            return

        try:
            self._ws = await websockets.connect(
                self.url,
                ping_interval=30,
                ping_timeout=10,
                max_size=None,
            )
        except Exception as e:
            raise NodeConnectionError(f"Failed to connect to node at {self.url}: {e}")

        self._receive_task = asyncio.create_task(self._receive_loop())
        logger.info("node_connected", url=self.url)

    async def disconnect(self) -> None:
        """Close WebSocket connection."""
        if self._receive_task:
            self._receive_task.cancel()
            try:
                await self._receive_task
            except asyncio.CancelledError:
                pass
            self._receive_task = None

        if self._ws:
            await self._ws.close()
            self._ws = None
            logger.info("node_disconnected", url=self.url)

        self._fail_pending(NodeConnectionError("Node connection closed"))

    async def _receive_loop(self) -> None:
        """Background task to receive WebSocket messages."""
        ws = self._ws
        try:
            async for message in ws:
                self._handle_message(message)
        except websockets.ConnectionClosed:
            logger.warning("node_connection_closed", url=self.url)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("node_receive_error", error=str(e))

        # Connection is gone; the next request reconnects.
        if self._ws is ws:
            self._ws = None
            self._fail_pending(NodeConnectionError("Node connection lost"))

    def _handle_message(self, message: Any) -> None:
        """Resolve the pending request a response belongs to."""
        try:
            data = json.loads(message)
        except (TypeError, ValueError):
            logger.warning("node_message_undecodable")
            return
        if not isinstance(data, dict):
            return

        request_id = data.get("id")
        if not isinstance(request_id, int):
            return
        future = self._pending_requests.pop(request_id, None)
        if future is None:
            # Notifications and late responses are not used.
            return
        if future.done():
            return

        error = data.get("error")
        if error:
            message_text = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            future.set_exception(TemplateFetchError(f"Node returned error: {message_text}"))
        else:
            # Responses carry their payload in "params"; accept "result" as well.
            future.set_result(data.get("params", data.get("result")))

    def _fail_pending(self, error: Exception) -> None:
        pending, self._pending_requests = self._pending_requests, {}
        for future in pending.values():
            if not future.done():
                future.set_exception(error)

    async def _request(
        self,
        method: str,
        params: Optional[dict] = None,
    ) -> Any:
        """Send a JSON-RPC request and await response."""
        if not self._ws:
            await self.connect()

        request_id = next(self._ids)
        request = {
            "id": request_id,
            "method": method,
            "params": params or {},
        }

        future = asyncio.get_running_loop().create_future()
        self._pending_requests[request_id] = future

        try:
            await self._ws.send(json.dumps(request))
            return await asyncio.wait_for(future, timeout=self.timeout)
        except asyncio.TimeoutError:
            self._pending_requests.pop(request_id, None)
            raise NodeConnectionError(f"Node request timeout: {method}")
        except (NodeConnectionError, TemplateFetchError):
            self._pending_requests.pop(request_id, None)
            raise
        except Exception as e:
            self._pending_requests.pop(request_id, None)
            raise NodeConnectionError(f"Node request failed: {e}")

    async def get_block_template(self, miner_address: str) -> BlockTemplate:
        """Get a block template from the node."""
        result = await self._request(
            "getBlockTemplate",
            {
                "payAddress": miner_address,
                "extraData": list(self.extra_data.encode("utf-8")),
            },
        )

        if not isinstance(result, dict):
            raise TemplateFetchError("failed fetching new block template from kaspa: empty response")

        try:
            template = BlockTemplate.from_rpc(result)
        except (TypeError, ValueError) as e:
            raise TemplateFetchError(f"failed fetching new block template from kaspa: {e}")

        if not template.is_synced:
            logger.warning("node_not_synced", url=self.url)

        return template
