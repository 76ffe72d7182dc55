"""Inbound de-duplication — drops repeated provider deliveries."""

from typing import Optional

import redis.asyncio as redis
import structlog

from src.config import settings

logger = structlog.get_logger()


class InboundDeduplicator:
    """Marks provider message ids as seen with ``SET NX EX``.

    Best effort: when Redis is unavailable the message is processed.
    """

    def __init__(self, redis_client: redis.Redis, ttl_seconds: Optional[int] = None):
        self.redis = redis_client
        self.ttl = ttl_seconds or settings.inbound_dedup_ttl_seconds

    def _key(self, provider_message_id: str) -> str:
        return f"inbound_seen:{provider_message_id}"

    async def is_duplicate(self, provider_message_id: Optional[str]) -> bool:
        """Return True if this id was already seen; records it otherwise."""
        if not provider_message_id:
            return False
        try:
            created = await self.redis.set(
                self._key(provider_message_id), "1", nx=True, ex=self.ttl
            )
        except Exception as e:
            logger.warning(
                "inbound_dedup_unavailable",
                provider_message_id=provider_message_id,
                error=str(e),
            )
            return False

        if not created:
            logger.info("inbound_duplicate_dropped", provider_message_id=provider_message_id)
            return True
        return False
