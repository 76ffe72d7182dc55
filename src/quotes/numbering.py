"""Quote numbering — company- and year-scoped sequence backed by Redis INCR."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

import redis.asyncio as redis
import structlog

logger = structlog.get_logger()


def format_quote_number(year: int, sequence: int) -> str:
    return f"Q-{year}-{sequence:06d}"


class QuoteNumberAllocator:
    """Allocates human-readable quote numbers from an atomic counter.

    INCR is atomic, so two concurrent drafts never get the same number.
    Numbers are monotonic per company and year but may have gaps when a
    draft is abandoned after allocation.
    """

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client

    def _key(self, company_id: uuid.UUID, year: int) -> str:
        return f"quote_seq:{company_id}:{year}"

    async def next_number(
        self, company_id: uuid.UUID, now: Optional[datetime] = None
    ) -> str:
        year = (now or datetime.now(timezone.utc)).year
        sequence = int(await self.redis.incr(self._key(company_id, year)))
        number = format_quote_number(year, sequence)
        logger.debug("quote_number_allocated", company_id=str(company_id), number=number)
        return number
