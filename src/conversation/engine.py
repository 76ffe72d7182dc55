"""Conversation Engine — the per-message orchestrator.

Looks up the lead and its conversation, stores the transcript, merges the
extractor's guess into the qualification, decides what to ask next and,
once everything is known, drafts the comparative quote exactly once.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import structlog

from src.config import settings
from src.conversation import replies
from src.conversation.state_machine import advance, extract_name_from_text, is_terminal
from src.errors import InvalidPricingInput
from src.llm.extractor import extract_lead_fields
from src.qualification.accumulator import QualificationAccumulator
from src.qualification.normalizer import NormalizedFields, normalize_extraction, parse_height
from src.qualification.resolver import MissingFieldResolver
from src.quotes.service import QuoteService
from src.repositories.base import CrmRepository
from src.schemas.conversation import (
    ConversationRecord,
    ConversationState,
    LeadRecord,
    MessageDirection,
)
from src.schemas.extraction import ExtractionResult
from src.schemas.qualification import QualificationField, QualificationRecord
from src.schemas.quote import QuoteRenderPayload, StoredQuote

logger = structlog.get_logger()

Extractor = Callable[[str, dict[str, Any]], Awaitable[Optional[ExtractionResult]]]


@dataclass
class TurnResult:
    """Outcome of one inbound message."""

    response_text: str
    state: ConversationState
    lead_id: Optional[uuid.UUID] = None
    conversation_id: Optional[uuid.UUID] = None
    quote: Optional[StoredQuote] = None
    payload: Optional[QuoteRenderPayload] = None


class ConversationEngine:
    """Main orchestrator for the qualification dialog."""

    def __init__(
        self,
        repository: CrmRepository,
        quote_service: QuoteService,
        extractor: Optional[Extractor] = None,
        resolver: Optional[MissingFieldResolver] = None,
        company_name: Optional[str] = None,
    ):
        self.repository = repository
        self.quote_service = quote_service
        self.extractor = extractor or extract_lead_fields
        self.resolver = resolver or MissingFieldResolver(
            require_contact_email=settings.require_contact_email
        )
        self.company_name = company_name or settings.company_name
        self.accumulator = QualificationAccumulator(repository)

    # ─── Public entry point ──────────────────────────────────────────

    async def handle_message(
        self,
        phone: str,
        message_text: str,
        provider_message_id: Optional[str] = None,
    ) -> TurnResult:
        """Process one inbound message and return the reply to send."""
        text = (message_text or "").strip()

        company = await self.repository.get_or_create_company(self.company_name)
        lead = await self.repository.get_or_create_lead(company.id, phone)
        conversation = await self.repository.get_or_create_conversation(company.id, lead.id)

        await self.repository.save_message(
            company.id,
            conversation.id,
            MessageDirection.INBOUND,
            text,
            provider_message_id=provider_message_id,
        )

        if is_terminal(conversation.state):
            logger.info(
                "quote_already_drafted",
                lead_id=str(lead.id),
                conversation_id=str(conversation.id),
            )
            return await self._reply(
                lead,
                conversation,
                TurnResult(
                    response_text=replies.quote_already_ready(lead.name),
                    state=conversation.state,
                ),
            )

        qualification = await self.accumulator.get_or_create(company.id, lead.id)
        asked = self.resolver.ordered_missing(qualification, bool(lead.name), lead.email)
        extraction = await self.extractor(text, self._known(lead, qualification))
        normalized = normalize_extraction(extraction)

        lead, name_saved = await self._update_lead(lead, normalized, text)

        fields = dict(normalized.qualification)
        self._height_fallback(fields, qualification, lead, text)
        patch = await self.accumulator.patch(company.id, lead.id, fields)
        qualification = patch.record

        resolution = self.resolver.resolve(
            qualification,
            bool(lead.name),
            extractor_missing=extraction.missing_fields if extraction else (),
            rejected=normalized.rejected,
            inbound_text=text,
            lead_email=lead.email,
        )
        state = advance(conversation.state, bool(lead.name), resolution.ordered_missing)
        if state != conversation.state:
            await self.repository.set_conversation_state(conversation.id, state)

        logger.info(
            "turn_resolved",
            lead_id=str(lead.id),
            previous_state=conversation.state.value,
            state=state.value,
            next_field=resolution.next_field.value if resolution.next_field else None,
            retry=resolution.retry,
            patched=sorted(patch.changes),
        )

        if state == ConversationState.READY_FOR_MATCH:
            result = await self._draft_quote(
                company.name,
                lead,
                conversation.model_copy(update={"state": state}),
                qualification,
                extraction,
            )
        else:
            # Clarify only when the field asked last turn is still the one missing
            retry = resolution.retry and bool(asked) and asked[0] == resolution.next_field
            first_contact = conversation.state == ConversationState.INIT
            result = TurnResult(
                response_text=self._question(
                    resolution.next_field, retry, lead, name_saved, first_contact
                ),
                state=state,
            )

        return await self._reply(lead, conversation, result)

    # ─── Lead contact fields ─────────────────────────────────────────

    async def _update_lead(
        self, lead: LeadRecord, normalized: NormalizedFields, text: str
    ) -> tuple[LeadRecord, bool]:
        """Save name, email and display city. Returns the lead and whether a name was saved."""
        changes: dict[str, Any] = {}
        if not lead.name:
            name = normalized.name or extract_name_from_text(text)
            if name:
                changes["name"] = name
        if normalized.email and normalized.email != lead.email:
            changes["email"] = normalized.email
        city = normalized.qualification.get("city")
        if city and city != lead.city:
            changes["city"] = city

        if not changes:
            return lead, False

        lead = await self.repository.update_lead(lead.id, changes)
        logger.info("lead_updated", lead_id=str(lead.id), fields=sorted(changes))
        return lead, "name" in changes

    def _height_fallback(
        self,
        fields: dict[str, Any],
        qualification: QualificationRecord,
        lead: LeadRecord,
        text: str,
    ) -> None:
        """Parse the height from raw text when it is the next question and the extractor missed it."""
        if "height_meters" in fields or "height_feet" in fields:
            return
        missing = self.resolver.ordered_missing(qualification, bool(lead.name), lead.email)
        if not missing or missing[0] != QualificationField.HEIGHT:
            return

        meters, feet = parse_height(text)
        if meters is not None:
            fields["height_meters"] = meters
        if feet is not None:
            fields["height_feet"] = feet
        if meters is not None or feet is not None:
            logger.debug("height_parsed_from_text", meters=meters, feet=feet)

    # ─── Replies ─────────────────────────────────────────────────────

    def _question(
        self,
        next_field: Optional[QualificationField],
        retry: bool,
        lead: LeadRecord,
        name_saved: bool,
        first_contact: bool,
    ) -> str:
        if next_field is None:
            return replies.ready_for_quote()
        if next_field == QualificationField.NAME and (first_contact or not retry):
            return replies.greeting(self.company_name)
        return replies.ask_field(
            next_field,
            retry=retry,
            lead_name=lead.name,
            name_just_saved=name_saved,
        )

    async def _draft_quote(
        self,
        company_name: str,
        lead: LeadRecord,
        conversation: ConversationRecord,
        qualification: QualificationRecord,
        extraction: Optional[ExtractionResult],
    ) -> TurnResult:
        meta = {"extraction": extraction.model_dump(mode="json")} if extraction else None
        try:
            outcome = await self.quote_service.draft_quote(
                company_name, lead, conversation, qualification, meta=meta
            )
        except InvalidPricingInput as e:
            # Stays READY_FOR_MATCH; the next message retries
            logger.warning(
                "quote_draft_rejected",
                lead_id=str(lead.id),
                duration_days=qualification.duration_days,
                error=str(e),
            )
            return TurnResult(
                response_text=replies.manual_confirmation(),
                state=ConversationState.READY_FOR_MATCH,
            )

        if outcome.duplicate:
            return TurnResult(
                response_text=replies.quote_already_ready(lead.name),
                state=ConversationState.QUOTE_DRAFTED,
            )

        return TurnResult(
            response_text=self.quote_service.assembler.summary_text(outcome.payload),
            state=ConversationState.QUOTE_DRAFTED,
            quote=outcome.quote,
            payload=outcome.payload,
        )

    async def _reply(
        self,
        lead: LeadRecord,
        conversation: ConversationRecord,
        result: TurnResult,
    ) -> TurnResult:
        await self.repository.save_message(
            lead.company_id,
            conversation.id,
            MessageDirection.OUTBOUND,
            result.response_text,
        )
        result.lead_id = lead.id
        result.conversation_id = conversation.id
        return result

    @staticmethod
    def _known(lead: LeadRecord, qualification: QualificationRecord) -> dict[str, Any]:
        known: dict[str, Any] = {"name": lead.name, "email": lead.email}
        known.update(
            qualification.model_dump(mode="json", exclude={"id", "company_id", "lead_id"})
        )
        return {k: v for k, v in known.items() if v is not None}
