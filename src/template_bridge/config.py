"""
Configuration management for the template bridge.

Settings come from a JSON config file, with environment variables and a .env
file as a fallback. The treasury private key is read from TREASURY_PRIVATE_KEY.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from template_bridge.errors import ConfigError

DEFAULT_CONFIG_PATH = "./config.json"
DEFAULT_ENV_FILE = "../.env"


class NetworkType(str, Enum):
    """Kaspa network identifiers."""
    MAINNET = "mainnet"
    TESTNET_10 = "testnet-10"
    TESTNET_11 = "testnet-11"
    DEVNET = "devnet"
    SIMNET = "simnet"

    @property
    def address_prefix(self) -> str:
        """Bech32-style prefix used when encoding addresses on this network."""
        return _ADDRESS_PREFIXES[self]


_ADDRESS_PREFIXES = {
    NetworkType.MAINNET: "kaspa",
    NetworkType.TESTNET_10: "kaspatest",
    NetworkType.TESTNET_11: "kaspatest",
    NetworkType.DEVNET: "kaspadev",
    NetworkType.SIMNET: "kaspasim",
}


class BridgeConfig(BaseSettings):
    """
    Configuration settings for the template bridge.

    Loaded once at startup and never mutated. Fields may also be supplied via
    environment variables with the BRIDGE_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="BRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Node settings
    node: List[str] = Field(
        min_length=1,
        description="Node wRPC endpoints; the first entry is used"
    )
    network: NetworkType = Field(
        description="Network identifier, selects the address prefix"
    )
    node_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single node RPC call"
    )
    redis_timeout_seconds: float = Field(
        default=3.0,
        gt=0,
        description="Socket connect and read timeout for Redis"
    )
    extra_data: str = Field(
        default="Katpool",
        description="Extra data embedded in requested block templates"
    )

    # Polling settings
    block_wait_time_seconds: int = Field(
        gt=0,
        description="Seconds to wait between template polls"
    )
    status_interval_seconds: int = Field(
        default=5,
        gt=0,
        description="Seconds between status report lines"
    )

    # Message bus settings
    redis_address: str = Field(
        description="Redis address (host:port or redis:// URL)"
    )
    redis_channel: str = Field(
        min_length=1,
        description="Channel templates are published on"
    )

    # Payout key
    treasury_private_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices(
            "TREASURY_PRIVATE_KEY",
            "BRIDGE_TREASURY_PRIVATE_KEY",
            "treasury_private_key",
        ),
        description="Hex-encoded private key used to derive the payout address"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )

    @field_validator("block_wait_time_seconds", mode="before")
    @classmethod
    def _parse_wait_time(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("must be an integer number of seconds")
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                raise ValueError(
                    f"must be an integer number of seconds, got {value!r}"
                )
        return value

    @field_validator("node")
    @classmethod
    def _strip_nodes(cls, value: List[str]) -> List[str]:
        nodes = [n.strip() for n in value if n and n.strip()]
        if not nodes:
            raise ValueError("at least one node endpoint is required")
        return nodes

    @property
    def node_url(self) -> str:
        """WebSocket URL of the node in use."""
        endpoint = self.node[0]
        if "://" not in endpoint:
            return f"ws://{endpoint}"
        return endpoint

    @property
    def redis_url(self) -> str:
        """Redis connection URL."""
        if "://" not in self.redis_address:
            return f"redis://{self.redis_address}"
        return self.redis_address

    def redacted(self) -> Dict[str, Any]:
        """Config values safe to log (no key material)."""
        data = self.model_dump(mode="json", exclude={"treasury_private_key"})
        data["treasury_private_key_set"] = self.treasury_private_key is not None
        return data


def load_config(
    path: str = DEFAULT_CONFIG_PATH,
    env_file: Optional[str] = DEFAULT_ENV_FILE,
) -> BridgeConfig:
    """
    Load configuration from a JSON file.

    Values in the file take precedence over environment variables.

    Args:
        path: Path to the JSON config file
        env_file: Optional .env file consulted for environment values

    Returns:
        Validated configuration

    Raises:
        ConfigError: If the file is missing, malformed or fails validation
    """
    config_path = Path(path)
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}")
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file {path}: {e}")

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")

    try:
        return BridgeConfig(_env_file=env_file, **raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}")
