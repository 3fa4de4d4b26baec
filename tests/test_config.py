"""
Test suite for configuration loading and startup validation.
"""

import json

import pytest
from unittest.mock import MagicMock, patch

from conftest import TEST_PRIVATE_KEY_HEX, make_config

from template_bridge import cli
from template_bridge.config import BridgeConfig, NetworkType, load_config
from template_bridge.errors import ConfigError


def write_config(tmp_path, **overrides):
    values = {
        "node": ["localhost:18110"],
        "network": "testnet-10",
        "block_wait_time_seconds": "5",
        "redis_address": "localhost:6379",
        "redis_channel": "templates",
    }
    values.update(overrides)
    path = tmp_path / "config.json"
    path.write_text(json.dumps(values))
    return path


class TestLoadConfig:
    """Tests for reading the JSON config file."""

    def test_load_valid_file(self, tmp_path):
        path = write_config(tmp_path)

        config = load_config(str(path), env_file=None)

        assert config.node == ["localhost:18110"]
        assert config.network == NetworkType.TESTNET_10
        assert config.block_wait_time_seconds == 5
        assert config.redis_channel == "templates"
        assert config.status_interval_seconds == 5
        assert config.extra_data == "Katpool"

    def test_integer_wait_time_accepted(self, tmp_path):
        path = write_config(tmp_path, block_wait_time_seconds=3)

        assert load_config(str(path), env_file=None).block_wait_time_seconds == 3

    @pytest.mark.parametrize("value", ["abc", "1.5", "", "0", "-2", True])
    def test_invalid_wait_time(self, tmp_path, value):
        path = write_config(tmp_path, block_wait_time_seconds=value)

        with pytest.raises(ConfigError):
            load_config(str(path), env_file=None)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(str(tmp_path / "nope.json"), env_file=None)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")

        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_config(str(path), env_file=None)

    def test_non_object_root(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")

        with pytest.raises(ConfigError):
            load_config(str(path), env_file=None)

    def test_empty_node_list(self, tmp_path):
        path = write_config(tmp_path, node=[])

        with pytest.raises(ConfigError):
            load_config(str(path), env_file=None)

    def test_unknown_network(self, tmp_path):
        path = write_config(tmp_path, network="moonnet")

        with pytest.raises(ConfigError):
            load_config(str(path), env_file=None)

    def test_unknown_keys_ignored(self, tmp_path):
        path = write_config(tmp_path, comment="kept for operators")

        assert load_config(str(path), env_file=None).redis_channel == "templates"

    def test_private_key_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TREASURY_PRIVATE_KEY", TEST_PRIVATE_KEY_HEX)
        path = write_config(tmp_path)

        config = load_config(str(path), env_file=None)

        assert config.treasury_private_key.get_secret_value() == TEST_PRIVATE_KEY_HEX

    def test_private_key_from_env_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("TREASURY_PRIVATE_KEY", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text(f"TREASURY_PRIVATE_KEY={TEST_PRIVATE_KEY_HEX}\n")
        path = write_config(tmp_path)

        config = load_config(str(path), env_file=str(env_file))

        assert config.treasury_private_key.get_secret_value() == TEST_PRIVATE_KEY_HEX


class TestBridgeConfig:
    """Tests for config properties."""

    def test_network_prefixes(self):
        assert NetworkType.MAINNET.address_prefix == "kaspa"
        assert NetworkType.TESTNET_10.address_prefix == "kaspatest"
        assert NetworkType.TESTNET_11.address_prefix == "kaspatest"
        assert NetworkType.DEVNET.address_prefix == "kaspadev"
        assert NetworkType.SIMNET.address_prefix == "kaspasim"

    def test_node_url_adds_scheme(self):
        assert make_config(node=["10.0.0.1:18110"]).node_url == "ws://10.0.0.1:18110"
        assert make_config(node=["wss://node.example:443", "x:1"]).node_url == "wss://node.example:443"

    def test_config_is_frozen(self, test_config):
        with pytest.raises(Exception):
            test_config.redis_channel = "other"

    def test_secret_not_exposed(self, test_config):
        assert TEST_PRIVATE_KEY_HEX not in repr(test_config)
        redacted = test_config.redacted()
        assert "treasury_private_key" not in redacted
        assert redacted["treasury_private_key_set"] is True
        assert TEST_PRIVATE_KEY_HEX not in json.dumps(redacted)


class TestStartupValidation:
    """Invalid configuration stops the CLI before any connection is made."""

    def test_non_numeric_wait_time_aborts_before_connecting(self, tmp_path):
        path = write_config(tmp_path, block_wait_time_seconds="abc")

        with patch("template_bridge.cli.TemplateBridge") as bridge_cls, \
                patch("template_bridge.cli.asyncio.run") as run:
            with pytest.raises(SystemExit) as exc_info:
                cli.main(["run", "--config", str(path), "--env-file", str(tmp_path / "none.env")])

        assert exc_info.value.code == 1
        bridge_cls.assert_not_called()
        run.assert_not_called()

    def test_missing_config_exits_nonzero(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["run", "--config", str(tmp_path / "missing.json")])

        assert exc_info.value.code == 1

    def test_no_command_prints_help(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])

        assert exc_info.value.code == 1
