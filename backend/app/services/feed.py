from __future__ import annotations
import asyncio
import json
from dataclasses import dataclass, asdict
from functools import lru_cache
import redis.asyncio as aioredis
from redis import Redis
from redis.exceptions import RedisError
import structlog
from app.config import settings

log = structlog.get_logger()


@dataclass(frozen=True)
class Change:
    collection: str   # e.g. "score_submissions"
    doc_id: str
    op: str           # created|updated|deleted


class Subscription:
    """
    Cancellable handle returned by ChangeFeed.subscribe().

    Iterate it to receive changes; iteration ends once cancel() is called.
    Ordering is per publisher call only; a slow consumer loses the oldest
    pending notifications rather than blocking publishers.
    """

    def __init__(self, feed: "ChangeFeed", maxsize: int):
        self._feed = feed
        self._queue: asyncio.Queue[Change | None] = asyncio.Queue(maxsize=maxsize)
        self.cancelled = False

    def _offer(self, change: Change) -> None:
        if self.cancelled:
            return
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(change)

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        self._feed._unsubscribe(self)
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(None)  # wake a pending reader

    async def get(self) -> Change | None:
        if self.cancelled and self._queue.empty():
            return None
        return await self._queue.get()

    def __aiter__(self):
        return self

    async def __anext__(self) -> Change:
        change = await self.get()
        if change is None:
            raise StopAsyncIteration
        return change

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc) -> None:
        self.cancel()


class ChangeFeed:
    def __init__(self):
        self._subs: set[Subscription] = set()

    def subscribe(self, maxsize: int = 100) -> Subscription:
        sub = Subscription(self, maxsize)
        self._subs.add(sub)
        return sub

    def _unsubscribe(self, sub: Subscription) -> None:
        self._subs.discard(sub)

    def publish(self, change: Change) -> int:
        for sub in list(self._subs):
            sub._offer(change)
        return len(self._subs)

    @property
    def subscriber_count(self) -> int:
        return len(self._subs)


@lru_cache(maxsize=1)
def get_change_feed() -> ChangeFeed:
    return ChangeFeed()


def score_changed(doc_id, op: str) -> Change:
    return Change(collection="score_submissions", doc_id=str(doc_id), op=op)


def publish_to_redis(change: Change) -> None:
    """Used from worker processes, which cannot reach the web process's feed directly."""
    conn = Redis.from_url(settings.redis_url)
    try:
        conn.publish(settings.score_changes_channel, json.dumps(asdict(change)))
    finally:
        conn.close()


async def _relay_once(feed: ChangeFeed, url: str, channel: str) -> None:
    client = aioredis.from_url(url)
    pubsub = client.pubsub()
    try:
        await pubsub.subscribe(channel)
        log.info("change_relay_started", channel=channel)
        async for message in pubsub.listen():
            if message.get("type") != "message":
                continue
            try:
                change = Change(**json.loads(message["data"]))
            except (TypeError, ValueError) as e:
                log.warning("change_relay_bad_message", error=str(e))
                continue
            feed.publish(change)
    finally:
        await pubsub.aclose()
        await client.aclose()


async def relay_redis_changes(feed: ChangeFeed, url: str, channel: str, retry_delay: float = 2.0) -> None:
    """Forward worker-side changes from a Redis channel into the local feed until cancelled."""
    while True:
        try:
            await _relay_once(feed, url, channel)
        except (RedisError, OSError) as e:
            log.warning("change_relay_disconnected", error=str(e), retry_in=retry_delay)
            await asyncio.sleep(retry_delay)
