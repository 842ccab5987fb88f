"""Real-time fan-out between the process that dispatches notifications and
the process that holds the WebSockets.

With synchronous event processing both are the web process, so messages go
straight to the local Connection Registry. Under the production overlay the
dispatcher runs inside the Notifications Engine while the sockets live in
the uvicorn workers: set ``NOTIFICATIONS_FANOUT_URL`` in both processes and
the dispatcher publishes on a Redis pub/sub channel that every web worker
listens to, each relaying to its own registry.
"""

import asyncio
import json
import os

import redis
import redis.asyncio as aioredis
import structlog
from notifications.realtime.registry import get_registry
from shared.exceptions import DeliveryError

logger = structlog.get_logger(__name__)

FANOUT_CHANNEL = "notifications:fanout"


class LocalFanout:
    """Publishes to the Connection Registry of the current process."""

    def publish(self, user_id, message: dict) -> int:
        return get_registry().publish(user_id, message)


class RedisFanout:
    """Publishes to every web worker listening on a Redis channel."""

    def __init__(self, url=None, client=None, channel=FANOUT_CHANNEL):
        self.client = client if client is not None else redis.Redis.from_url(url)
        self.channel = channel

    def publish(self, user_id, message: dict) -> int:
        envelope = json.dumps({"user_id": str(user_id), "message": message})
        try:
            # Number of listening workers, not of connections
            return self.client.publish(self.channel, envelope)
        except redis.RedisError as exc:
            raise DeliveryError({"fanout": [str(exc)]}) from exc


def relay(raw) -> int:
    """Hand one fan-out envelope to the local registry."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    envelope = json.loads(raw)
    return get_registry().publish(envelope["user_id"], envelope["message"])


async def listen(url=None, channel=FANOUT_CHANNEL, client=None) -> None:
    """Relay fan-out envelopes from Redis until cancelled."""
    owned = client is None
    if owned:
        client = aioredis.from_url(url)

    pubsub = client.pubsub()
    await pubsub.subscribe(channel)
    logger.info("fanout_listener_started", channel=channel)
    try:
        async for item in pubsub.listen():
            if item.get("type") != "message":
                continue
            try:
                # Registry publishing may back off with blocking sleeps
                delivered = await asyncio.to_thread(relay, item["data"])
            except (ValueError, KeyError, TypeError) as exc:
                logger.warning("fanout_message_invalid", channel=channel, error=str(exc))
                continue
            logger.debug("fanout_message_relayed", connections=delivered)
    finally:
        await pubsub.unsubscribe(channel)
        await pubsub.aclose()
        if owned:
            await client.aclose()
        logger.info("fanout_listener_stopped", channel=channel)


def fanout_url() -> str | None:
    return os.environ.get("NOTIFICATIONS_FANOUT_URL") or None


_fanout = None


def get_fanout():
    global _fanout
    if _fanout is None:
        url = fanout_url()
        _fanout = RedisFanout(url) if url else LocalFanout()
    return _fanout


def set_fanout(fanout) -> None:
    global _fanout
    _fanout = fanout


def reset_fanout() -> None:
    global _fanout
    _fanout = None
