"""
Store d'idempotence des webhooks: un event Stripe n'est traité qu'une fois par id,
la livraison étant "at-least-once" côté fournisseur.
- RedisProcessedEventStore: SET NX EX (atomique, partagé entre workers)
- MemoryProcessedEventStore: fallback local au process (dev/tests)
"""
import logging
from collections import OrderedDict
from typing import Optional

logger = logging.getLogger(__name__)

IDEMPOTENCY_KEY_TPL = "payment_webhook:{provider}:{event_id}"

# module travel_api.payments.idempotency
class MemoryProcessedEventStore:
    """Mémorise les derniers ids vus (borné à max_entries, éviction FIFO)."""

    def __init__(self, max_entries: int = 10_000):
        self.max_entries = max_entries
        self._seen: "OrderedDict[str, None]" = OrderedDict()

    async def mark_processed(self, event_id: str, provider: str = "stripe") -> bool:
        key = IDEMPOTENCY_KEY_TPL.format(provider=provider, event_id=event_id)
        if key in self._seen:
            return False
        self._seen[key] = None
        while len(self._seen) > self.max_entries:
            self._seen.popitem(last=False)
        return True

    async def forget(self, event_id: str, provider: str = "stripe") -> None:
        self._seen.pop(IDEMPOTENCY_KEY_TPL.format(provider=provider, event_id=event_id), None)


class RedisProcessedEventStore:
    """Store partagé: client redis.asyncio (ou fakeredis.aioredis en tests)."""

    def __init__(self, redis_client, ttl: int = 60 * 60 * 24):
        self.redis = redis_client
        self.ttl = ttl

    async def mark_processed(self, event_id: str, provider: str = "stripe") -> bool:
        key = IDEMPOTENCY_KEY_TPL.format(provider=provider, event_id=event_id)
        added = await self.redis.set(key, "1", ex=self.ttl, nx=True)
        return bool(added)

    async def forget(self, event_id: str, provider: str = "stripe") -> None:
        await self.redis.delete(IDEMPOTENCY_KEY_TPL.format(provider=provider, event_id=event_id))


def build_event_store(redis_url: Optional[str], ttl: int):
    """
    Construit le store selon la configuration.
    - redis_url vide => store mémoire
    """
    if not redis_url:
        logger.info("payments.idempotency using in-process store")
        return MemoryProcessedEventStore()
    import redis.asyncio as aioredis

    client = aioredis.from_url(redis_url, encoding="utf-8", decode_responses=True)
    logger.info("payments.idempotency using redis store")
    return RedisProcessedEventStore(client, ttl=ttl)
