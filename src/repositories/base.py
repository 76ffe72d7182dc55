"""Repository interface — the record store the qualification core depends on.

The accumulator, the conversation engine and the quote service only talk to
this interface, so they run against Postgres in production and against the
in-memory store in the test-suite.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import Any, Optional

from src.schemas.conversation import (
    CompanyRecord,
    ConversationRecord,
    ConversationState,
    LeadRecord,
    MessageDirection,
)
from src.schemas.qualification import QualificationRecord
from src.schemas.quote import QuoteDraft, StoredQuote


class CrmRepository(ABC):
    """Read / patch / create operations over leads, conversations and quotes."""

    # ─── Company & lead ──────────────────────────────────────────────

    @abstractmethod
    async def get_or_create_company(self, name: str) -> CompanyRecord: ...

    @abstractmethod
    async def get_or_create_lead(self, company_id: uuid.UUID, phone: str) -> LeadRecord: ...

    @abstractmethod
    async def update_lead(self, lead_id: uuid.UUID, changes: dict[str, Any]) -> LeadRecord:
        """Apply a sparse update to lead contact fields."""

    # ─── Conversation ────────────────────────────────────────────────

    @abstractmethod
    async def get_or_create_conversation(
        self, company_id: uuid.UUID, lead_id: uuid.UUID
    ) -> ConversationRecord:
        """Return the most recently updated conversation, or a new INIT one."""

    @abstractmethod
    async def set_conversation_state(
        self, conversation_id: uuid.UUID, state: ConversationState
    ) -> None: ...

    @abstractmethod
    async def save_message(
        self,
        company_id: uuid.UUID,
        conversation_id: uuid.UUID,
        direction: MessageDirection,
        body: str,
        provider_message_id: Optional[str] = None,
    ) -> None:
        """Store a transcript message and bump the conversation's last activity."""

    # ─── Qualification ───────────────────────────────────────────────

    @abstractmethod
    async def get_qualification(self, lead_id: uuid.UUID) -> Optional[QualificationRecord]: ...

    @abstractmethod
    async def create_qualification(
        self, company_id: uuid.UUID, lead_id: uuid.UUID
    ) -> QualificationRecord:
        """Create an all-null qualification for the lead."""

    @abstractmethod
    async def update_qualification(
        self, lead_id: uuid.UUID, changes: dict[str, Any]
    ) -> QualificationRecord: ...

    # ─── Quotes ──────────────────────────────────────────────────────

    @abstractmethod
    async def commit_draft_quote(
        self, conversation_id: uuid.UUID, draft: QuoteDraft
    ) -> Optional[StoredQuote]:
        """Persist the quote, its lines and QUOTE_DRAFTED as one step.

        Re-reads the conversation state right before committing. Returns
        None without writing anything if the conversation is already
        QUOTE_DRAFTED.
        """
