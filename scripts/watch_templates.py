#!/usr/bin/env python3
"""
Subscribe to the template channel and print each template received.

Acts like a downstream mining worker, for checking a running bridge.
"""

import asyncio
import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import redis.asyncio as aioredis

from template_bridge.bus.publisher import deserialize_template
from template_bridge.core.status import format_template_status


async def watch_templates(redis_url: str, channel: str, count: int) -> None:
    """Print templates published on a channel."""
    client = aioredis.Redis.from_url(redis_url)
    pubsub = client.pubsub()
    await pubsub.subscribe(channel)

    print(f"\n📡 Listening on {channel} ({redis_url})")

    received = 0
    try:
        async for message in pubsub.listen():
            if message.get("type") != "message":
                continue

            try:
                template = deserialize_template(message["data"])
            except ValueError as e:
                print(f"\n❌ Undecodable payload: {e}")
                continue

            received += 1
            print(f"\n📦 Template #{received} ({len(message['data']):,} bytes)")
            print(format_template_status(template))

            if count and received >= count:
                break
    finally:
        await pubsub.unsubscribe(channel)
        await pubsub.aclose()
        await client.aclose()


def main():
    parser = argparse.ArgumentParser(description="Watch published block templates")
    parser.add_argument(
        "--redis-url", "-r",
        default="redis://localhost:6379",
        help="Redis URL (default: redis://localhost:6379)"
    )
    parser.add_argument(
        "--channel", "-c",
        required=True,
        help="Channel the bridge publishes on"
    )
    parser.add_argument(
        "--count", "-n",
        type=int,
        default=0,
        help="Stop after this many templates (default: run forever)"
    )

    args = parser.parse_args()
    asyncio.run(watch_templates(args.redis_url, args.channel, args.count))


if __name__ == "__main__":
    main()
