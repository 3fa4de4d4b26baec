"""
Command-line interface for the template bridge.

Provides commands for running the bridge and checking its setup.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import structlog

from template_bridge import __version__
from template_bridge.bridge import TemplateBridge
from template_bridge.bus.publisher import TemplatePublisher
from template_bridge.config import DEFAULT_CONFIG_PATH, DEFAULT_ENV_FILE, BridgeConfig, load_config
from template_bridge.core.status import format_template_status
from template_bridge.errors import BridgeError, StartupError

logger = structlog.get_logger(__name__)


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_format
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
        stream=sys.stdout,
    )


def _add_config_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to JSON config file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--env-file",
        default=DEFAULT_ENV_FILE,
        help=f"Path to .env file holding TREASURY_PRIVATE_KEY (default: {DEFAULT_ENV_FILE})",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (overrides config)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Output logs in JSON format",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="template-bridge",
        description="Relay Kaspa block templates to a Redis channel",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    run_parser = subparsers.add_parser("run", help="Run the bridge service")
    _add_config_arguments(run_parser)

    address_parser = subparsers.add_parser("address", help="Print the derived payout address")
    _add_config_arguments(address_parser)

    fetch_parser = subparsers.add_parser("fetch", help="Fetch one block template and show it")
    _add_config_arguments(fetch_parser)
    fetch_parser.add_argument(
        "--publish",
        action="store_true",
        help="Also publish the fetched template once",
    )

    return parser


async def run_bridge(config: BridgeConfig) -> None:
    """Run the bridge service."""
    bridge = TemplateBridge(config)
    await bridge.initialize()

    loop = asyncio.get_running_loop()
    try:
        import signal
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, bridge.stop)
    except NotImplementedError:
        pass  # Signals not available on Windows

    await bridge.start()


async def fetch_once(config: BridgeConfig, publish: bool = False) -> None:
    """Fetch a single template and print its status."""
    bridge = TemplateBridge(config)
    await bridge.initialize()

    try:
        template = await bridge.node.get_block_template(bridge.miner_address)
        bridge.cache.set(template)
        print(format_template_status(template))

        if publish:
            receivers = await TemplatePublisher(bridge.bus).publish(
                config.redis_channel, template
            )
            print(f"Published to {config.redis_channel} ({receivers} receiver(s))")
    finally:
        await bridge.shutdown()


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        config = load_config(args.config, env_file=args.env_file)
    except BridgeError as e:
        setup_logging(args.log_level or "INFO", args.log_json)
        logger.error("startup_failed", error=str(e))
        sys.exit(1)

    setup_logging(args.log_level or config.log_level, args.log_json or config.log_json)

    try:
        if args.command == "run":
            asyncio.run(run_bridge(config))
        elif args.command == "address":
            print(TemplateBridge(config).derive_miner_address())
        elif args.command == "fetch":
            asyncio.run(fetch_once(config, publish=args.publish))
    except StartupError as e:
        logger.error("startup_failed", error=str(e))
        sys.exit(1)
    except BridgeError as e:
        logger.error("command_failed", command=args.command, error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
