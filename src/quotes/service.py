"""Quote service — prices a complete qualification and commits the draft quote."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

import structlog

from src.config import settings
from src.errors import InvalidPricingInput
from src.pricing.engine import TieredPricingEngine, round_currency
from src.quotes.assembler import QuoteAssembler
from src.quotes.numbering import QuoteNumberAllocator
from src.repositories.base import CrmRepository
from src.schemas.conversation import ConversationRecord, LeadRecord
from src.schemas.qualification import QualificationData
from src.schemas.quote import QuoteRenderPayload, StoredQuote

logger = structlog.get_logger()


@dataclass
class DraftOutcome:
    """Result of a drafting attempt. ``duplicate`` means another turn won."""

    quote: Optional[StoredQuote] = None
    payload: Optional[QuoteRenderPayload] = None
    duplicate: bool = False


def transport_for_city(city: Optional[str]) -> int:
    """Round-trip transport for the job city, falling back to the default."""
    key = (city or "").strip().lower()
    amount = settings.transport_by_city.get(key, settings.default_transport_round_trip)
    return round_currency(amount)


class QuoteService:
    """Turns a READY_FOR_MATCH conversation into a persisted DRAFT quote."""

    def __init__(
        self,
        repository: CrmRepository,
        numbering: QuoteNumberAllocator,
        pricing: Optional[TieredPricingEngine] = None,
        assembler: Optional[QuoteAssembler] = None,
    ):
        self.repository = repository
        self.numbering = numbering
        self.pricing = pricing or TieredPricingEngine()
        self.assembler = assembler or QuoteAssembler()

    async def draft_quote(
        self,
        company_name: str,
        lead: LeadRecord,
        conversation: ConversationRecord,
        qualification: QualificationData,
        meta: Optional[dict[str, Any]] = None,
    ) -> DraftOutcome:
        """Price, number and persist a draft quote with its lines.

        Raises:
            InvalidPricingInput: the qualification cannot be priced; nothing
                is written and the conversation keeps its state.
        """
        if qualification.duration_days is None:
            raise InvalidPricingInput("duration_days is required to draft a quote")

        equipment_model = settings.default_equipment_model
        pricing = self.pricing.compute_options(
            duration_days=qualification.duration_days,
            equipment_model=equipment_model,
            transport_round_trip=transport_for_city(qualification.city),
            vat_rate=settings.vat_rate,
        )

        now = datetime.now(timezone.utc)
        quote_number = await self.numbering.next_number(lead.company_id, now=now)

        draft = self.assembler.build(
            pricing=pricing,
            company_id=lead.company_id,
            lead_id=lead.id,
            quote_number=quote_number,
            equipment_model=equipment_model,
            qualification=qualification,
            meta=meta,
        )

        stored = await self.repository.commit_draft_quote(conversation.id, draft)
        if stored is None:
            logger.info(
                "quote_draft_duplicate_suppressed",
                lead_id=str(lead.id),
                conversation_id=str(conversation.id),
                quote_number=quote_number,
            )
            return DraftOutcome(duplicate=True)

        payload = self.assembler.render_payload(
            draft=draft,
            pricing=pricing,
            company_name=company_name,
            lead=lead,
            qualification=qualification,
            terms=settings.quote_terms,
            created_at=stored.created_at or now,
        )

        logger.info(
            "quote_drafted",
            quote_id=str(stored.id),
            quote_number=stored.quote_number,
            lead_id=str(lead.id),
            requested_days=draft.requested_days,
            total=draft.total,
            lines=len(draft.lines),
        )
        return DraftOutcome(quote=stored, payload=payload)
