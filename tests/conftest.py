"""
Pytest configuration and shared fixtures for the test suite.
"""

import asyncio
from typing import Callable, List, Optional, Tuple, Union

import pytest

from template_bridge.bus.interface import MessageBus
from template_bridge.config import BridgeConfig, NetworkType
from template_bridge.core.template import BlockHeader, BlockTemplate
from template_bridge.errors import BusConnectionError, BusPublishError, TemplateFetchError
from template_bridge.node.interface import NodeInterface

# Private key 1: its public key is the generator point's x coordinate.
TEST_PRIVATE_KEY_HEX = "00" * 31 + "01"
TEST_MAINNET_ADDRESS = "kaspa:qpumuen7l8wthtz45p3ftn58pvrs9xlumvkuu2xet8egzkcklqtes4ypce9sf"
TEST_TESTNET_ADDRESS = "kaspatest:qpumuen7l8wthtz45p3ftn58pvrs9xlumvkuu2xet8egzkcklqtes5z8rkmpd"


# ============================================================================
# Configuration Fixtures
# ============================================================================

def make_config(**overrides) -> BridgeConfig:
    """Build a config without reading any .env file."""
    values = dict(
        node=["127.0.0.1:18110"],
        network=NetworkType.TESTNET_10,
        block_wait_time_seconds=2,
        status_interval_seconds=5,
        redis_address="localhost:6379",
        redis_channel="block-templates",
        treasury_private_key=TEST_PRIVATE_KEY_HEX,
    )
    values.update(overrides)
    return BridgeConfig(_env_file=None, **values)


@pytest.fixture
def test_config() -> BridgeConfig:
    """Create a test configuration."""
    return make_config()


# ============================================================================
# Test Data Generators
# ============================================================================

def make_template(tag: int, tx_count: int = 2) -> BlockTemplate:
    """Create a template whose every field is derived from tag."""
    header = BlockHeader(
        version=1,
        parents=((f"{tag:064x}",),),
        hash_merkle_root=f"{tag:064x}",
        accepted_id_merkle_root=f"{tag + 1:064x}",
        utxo_commitment=f"{tag + 2:064x}",
        timestamp=1_700_000_000_000 + tag,
        bits=tag,
        nonce=0,
        daa_score=tag,
        blue_work=f"{tag:x}",
        blue_score=tag,
        pruning_point=f"{tag + 3:064x}",
    )
    transactions = tuple({"tag": tag, "index": i} for i in range(tx_count))
    return BlockTemplate(header=header, transactions=transactions, is_synced=True)


def rpc_payload(tag: int) -> dict:
    """A getBlockTemplate response as the node sends it."""
    return {
        "block": {
            "header": {
                "version": 1,
                "parentsByLevel": [[f"{tag:064x}"]],
                "hashMerkleRoot": f"{tag:064x}",
                "acceptedIdMerkleRoot": f"{tag + 1:064x}",
                "utxoCommitment": f"{tag + 2:064x}",
                "timestamp": 1_700_000_000_000 + tag,
                "bits": tag,
                "nonce": 0,
                "daaScore": tag,
                "blueWork": f"{tag:x}",
                "blueScore": tag,
                "pruningPoint": f"{tag + 3:064x}",
            },
            "transactions": [{"tag": tag, "index": 0}, {"tag": tag, "index": 1}],
        },
        "isSynced": True,
    }


@pytest.fixture
def sample_template() -> BlockTemplate:
    return make_template(1)


# ============================================================================
# Mock Node Interface
# ============================================================================

class MockNodeInterface(NodeInterface):
    """Node returning a scripted sequence of templates and errors."""

    def __init__(self, script: Optional[List[Union[BlockTemplate, Exception]]] = None):
        self.script = list(script or [])
        self.calls: List[str] = []
        self.connected = False
        self.connect_calls = 0
        self.connect_error: Optional[Exception] = None

    async def connect(self) -> None:
        self.connect_calls += 1
        if self.connect_error:
            raise self.connect_error
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    async def get_block_template(self, miner_address: str) -> BlockTemplate:
        self.calls.append(miner_address)
        if not self.script:
            raise TemplateFetchError("script exhausted")
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def mock_node() -> MockNodeInterface:
    return MockNodeInterface()


# ============================================================================
# Fake Message Bus
# ============================================================================

class FakeBus(MessageBus):
    """Bus recording published payloads, with switchable failures."""

    def __init__(self):
        self.published: List[Tuple[str, bytes]] = []
        self.connected = False
        self.closed = False
        self.connect_calls = 0
        self.ping_calls = 0
        self.fail_ping = False
        self.fail_publish = False

    async def connect(self) -> None:
        self.connect_calls += 1
        self.connected = True

    async def ping(self) -> None:
        self.ping_calls += 1
        if self.fail_ping:
            raise BusConnectionError("connection refused")

    async def publish(self, channel: str, data: bytes) -> int:
        if self.fail_publish:
            raise BusPublishError("broken pipe")
        self.published.append((channel, data))
        return 1

    async def close(self) -> None:
        self.closed = True

    @property
    def payloads(self) -> List[bytes]:
        return [data for _, data in self.published]


@pytest.fixture
def fake_bus() -> FakeBus:
    return FakeBus()


# ============================================================================
# Sleep Recorder
# ============================================================================

class RecordingSleep:
    """Replaces asyncio.sleep; records requested delays without waiting."""

    def __init__(self, on_call: Optional[Callable[[int], None]] = None):
        self.calls: List[float] = []
        self.on_call = on_call

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self.on_call:
            self.on_call(len(self.calls))
        await asyncio.sleep(0)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()
