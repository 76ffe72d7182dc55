"""Test fixtures and configuration."""

import asyncio
import itertools
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

import pytest
from unittest.mock import AsyncMock

from src.conversation.engine import ConversationEngine
from src.conversation.state_machine import is_terminal, mark_quote_drafted
from src.quotes.numbering import QuoteNumberAllocator
from src.quotes.service import QuoteService
from src.repositories.base import CrmRepository
from src.schemas.conversation import (
    CompanyRecord,
    ConversationRecord,
    ConversationState,
    LeadRecord,
    MessageDirection,
)
from src.schemas.extraction import ExtractionResult
from src.schemas.qualification import QualificationRecord
from src.schemas.quote import QuoteDraft, StoredQuote


@dataclass
class StoredMessage:
    conversation_id: uuid.UUID
    direction: MessageDirection
    body: str
    provider_message_id: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class InMemoryCrmRepository(CrmRepository):
    """Same contract as the SQL store, kept in dicts.

    An ``asyncio.Lock`` guards the quote commit so concurrent drafts for one
    conversation behave like the row lock in Postgres.
    """

    def __init__(self) -> None:
        self.companies: dict[str, CompanyRecord] = {}
        self.leads: dict[uuid.UUID, LeadRecord] = {}
        self.conversations: dict[uuid.UUID, ConversationRecord] = {}
        self.qualifications: dict[uuid.UUID, QualificationRecord] = {}
        self.messages: list[StoredMessage] = []
        self.quotes: list[tuple[StoredQuote, QuoteDraft]] = []
        self.qualification_writes = 0
        self._quote_lock = asyncio.Lock()

    # ─── Company & lead ──────────────────────────────────────────────

    async def get_or_create_company(self, name: str) -> CompanyRecord:
        if name not in self.companies:
            self.companies[name] = CompanyRecord(id=uuid.uuid4(), name=name)
        return self.companies[name]

    async def get_or_create_lead(self, company_id: uuid.UUID, phone: str) -> LeadRecord:
        for lead in self.leads.values():
            if lead.company_id == company_id and lead.phone == phone:
                return lead
        lead = LeadRecord(id=uuid.uuid4(), company_id=company_id, phone=phone)
        self.leads[lead.id] = lead
        return lead

    async def update_lead(self, lead_id: uuid.UUID, changes: dict[str, Any]) -> LeadRecord:
        lead = self.leads[lead_id].model_copy(update=changes)
        self.leads[lead_id] = lead
        return lead

    # ─── Conversation ────────────────────────────────────────────────

    async def get_or_create_conversation(
        self, company_id: uuid.UUID, lead_id: uuid.UUID
    ) -> ConversationRecord:
        for conversation in reversed(list(self.conversations.values())):
            if conversation.company_id == company_id and conversation.lead_id == lead_id:
                return conversation
        conversation = ConversationRecord(id=uuid.uuid4(), company_id=company_id, lead_id=lead_id)
        self.conversations[conversation.id] = conversation
        return conversation

    async def set_conversation_state(
        self, conversation_id: uuid.UUID, state: ConversationState
    ) -> None:
        self.conversations[conversation_id] = self.conversations[conversation_id].model_copy(
            update={"state": state}
        )

    async def save_message(
        self,
        company_id: uuid.UUID,
        conversation_id: uuid.UUID,
        direction: MessageDirection,
        body: str,
        provider_message_id: Optional[str] = None,
    ) -> None:
        message = StoredMessage(
            conversation_id=conversation_id,
            direction=direction,
            body=body,
            provider_message_id=provider_message_id,
        )
        self.messages.append(message)
        self.conversations[conversation_id] = self.conversations[conversation_id].model_copy(
            update={"last_message_at": message.created_at}
        )

    # ─── Qualification ───────────────────────────────────────────────

    async def get_qualification(self, lead_id: uuid.UUID) -> Optional[QualificationRecord]:
        return self.qualifications.get(lead_id)

    async def create_qualification(
        self, company_id: uuid.UUID, lead_id: uuid.UUID
    ) -> QualificationRecord:
        if lead_id not in self.qualifications:
            self.qualifications[lead_id] = QualificationRecord(
                id=uuid.uuid4(), company_id=company_id, lead_id=lead_id
            )
        return self.qualifications[lead_id]

    async def update_qualification(
        self, lead_id: uuid.UUID, changes: dict[str, Any]
    ) -> QualificationRecord:
        self.qualification_writes += 1
        record = self.qualifications[lead_id].model_copy(update=changes)
        self.qualifications[lead_id] = record
        return record

    # ─── Quotes ──────────────────────────────────────────────────────

    async def commit_draft_quote(
        self, conversation_id: uuid.UUID, draft: QuoteDraft
    ) -> Optional[StoredQuote]:
        async with self._quote_lock:
            current = self.conversations[conversation_id].state
            if is_terminal(current):
                return None
            target = mark_quote_drafted(current)
            for stored, _ in self.quotes:
                if stored.quote_number == draft.quote_number:
                    raise ValueError(f"duplicate quote number {draft.quote_number}")

            stored = StoredQuote(
                id=uuid.uuid4(),
                quote_number=draft.quote_number,
                status="DRAFT",
                subtotal=draft.subtotal,
                vat=draft.vat,
                total=draft.total,
                created_at=datetime.now(timezone.utc),
            )
            self.quotes.append((stored, draft))
            await self.set_conversation_state(conversation_id, target)
            return stored

    async def count_quotes(self, lead_id: uuid.UUID) -> int:
        return sum(1 for _, draft in self.quotes if draft.lead_id == lead_id)

    def messages_for(self, conversation_id: uuid.UUID) -> list[StoredMessage]:
        return [m for m in self.messages if m.conversation_id == conversation_id]


class ScriptedExtractor:
    """Stands in for the LLM extractor: returns queued results in order."""

    def __init__(self):
        self.results: list[Optional[ExtractionResult]] = []
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def push(self, **fields) -> None:
        self.results.append(ExtractionResult(**fields))

    def push_failure(self) -> None:
        self.results.append(None)

    async def __call__(self, text: str, known: dict[str, Any]) -> Optional[ExtractionResult]:
        self.calls.append((text, known))
        if not self.results:
            return None
        return self.results.pop(0)


@pytest.fixture
def mock_redis():
    """Mock Redis client with a working INCR counter."""
    counter = itertools.count(1)
    redis = AsyncMock()
    redis.incr = AsyncMock(side_effect=lambda key: next(counter))
    redis.set = AsyncMock(return_value=True)
    redis.get = AsyncMock(return_value=None)
    redis.delete = AsyncMock()
    return redis


@pytest.fixture
def repository():
    return InMemoryCrmRepository()


@pytest.fixture
def numbering(mock_redis):
    return QuoteNumberAllocator(mock_redis)


@pytest.fixture
def quote_service(repository, numbering):
    return QuoteService(repository, numbering)


@pytest.fixture
def extractor():
    return ScriptedExtractor()


@pytest.fixture
def engine(repository, quote_service, extractor):
    """ConversationEngine over the in-memory repository."""
    return ConversationEngine(
        repository,
        quote_service,
        extractor=extractor,
        company_name="TSC Industrial",
    )


@pytest.fixture
def complete_extraction():
    """Extractor output carrying every field in one message."""
    return dict(
        name="Sergio",
        height_m=14,
        type="BRAZO",
        activity="PINTURA",
        terrain="PISO_FIRME",
        city="Monterrey",
        duration_days=5,
        confidence=0.95,
        missing=[],
    )
