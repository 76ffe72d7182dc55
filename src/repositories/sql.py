"""SQLAlchemy repository — Postgres-backed record store."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.conversation.state_machine import is_terminal, mark_quote_drafted
from src.errors import InvalidTransition
from src.models.conversation import Conversation, Message
from src.models.lead import Company, Lead, Qualification
from src.models.quote import Quote, QuoteLine
from src.repositories.base import CrmRepository
from src.schemas.conversation import (
    CompanyRecord,
    ConversationRecord,
    ConversationState,
    LeadRecord,
    MessageDirection,
)
from src.schemas.qualification import QualificationRecord
from src.schemas.quote import QuoteDraft, StoredQuote

logger = structlog.get_logger()


def _column_values(changes: dict[str, Any]) -> dict[str, Any]:
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in changes.items()}


class SqlCrmRepository(CrmRepository):
    """Every write commits on its own, except the quote draft which is one transaction."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Company & lead ──────────────────────────────────────────────

    async def get_or_create_company(self, name: str) -> CompanyRecord:
        result = await self.db.execute(select(Company).where(Company.name == name))
        company = result.scalar_one_or_none()
        if company is None:
            company = Company(name=name)
            self.db.add(company)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                result = await self.db.execute(select(Company).where(Company.name == name))
                company = result.scalar_one()
            else:
                logger.info("company_created", company_id=str(company.id), name=name)
        return CompanyRecord.model_validate(company)

    async def get_or_create_lead(self, company_id: uuid.UUID, phone: str) -> LeadRecord:
        stmt = select(Lead).where(Lead.company_id == company_id, Lead.phone == phone)
        lead = (await self.db.execute(stmt)).scalar_one_or_none()
        if lead is None:
            lead = Lead(company_id=company_id, phone=phone)
            self.db.add(lead)
            try:
                await self.db.commit()
            except IntegrityError:
                # Concurrent first contact for the same phone
                await self.db.rollback()
                lead = (await self.db.execute(stmt)).scalar_one()
            else:
                logger.info("lead_created", lead_id=str(lead.id), company_id=str(company_id))
        return LeadRecord.model_validate(lead)

    async def update_lead(self, lead_id: uuid.UUID, changes: dict[str, Any]) -> LeadRecord:
        if changes:
            await self.db.execute(
                update(Lead).where(Lead.id == lead_id).values(**_column_values(changes))
            )
            await self.db.commit()
        lead = (await self.db.execute(select(Lead).where(Lead.id == lead_id))).scalar_one()
        await self.db.refresh(lead)
        return LeadRecord.model_validate(lead)

    # ─── Conversation ────────────────────────────────────────────────

    async def get_or_create_conversation(
        self, company_id: uuid.UUID, lead_id: uuid.UUID
    ) -> ConversationRecord:
        result = await self.db.execute(
            select(Conversation)
            .where(Conversation.company_id == company_id, Conversation.lead_id == lead_id)
            .order_by(Conversation.updated_at.desc())
            .limit(1)
        )
        conversation = result.scalar_one_or_none()
        if conversation is None:
            conversation = Conversation(
                company_id=company_id,
                lead_id=lead_id,
                state=ConversationState.INIT.value,
            )
            self.db.add(conversation)
            await self.db.commit()
            logger.info(
                "conversation_created",
                conversation_id=str(conversation.id),
                lead_id=str(lead_id),
            )
        return ConversationRecord.model_validate(conversation)

    async def set_conversation_state(
        self, conversation_id: uuid.UUID, state: ConversationState
    ) -> None:
        await self.db.execute(
            update(Conversation)
            .where(Conversation.id == conversation_id)
            .values(state=state.value, updated_at=datetime.now(timezone.utc))
        )
        await self.db.commit()

    async def save_message(
        self,
        company_id: uuid.UUID,
        conversation_id: uuid.UUID,
        direction: MessageDirection,
        body: str,
        provider_message_id: Optional[str] = None,
    ) -> None:
        now = datetime.now(timezone.utc)
        self.db.add(
            Message(
                company_id=company_id,
                conversation_id=conversation_id,
                direction=direction.value,
                body=body,
                provider_message_id=provider_message_id,
                created_at=now,
            )
        )
        await self.db.execute(
            update(Conversation)
            .where(Conversation.id == conversation_id)
            .values(last_message_at=now, updated_at=now)
        )
        await self.db.commit()

    # ─── Qualification ───────────────────────────────────────────────

    async def get_qualification(self, lead_id: uuid.UUID) -> Optional[QualificationRecord]:
        result = await self.db.execute(
            select(Qualification).where(Qualification.lead_id == lead_id)
        )
        row = result.scalar_one_or_none()
        return QualificationRecord.model_validate(row) if row is not None else None

    async def create_qualification(
        self, company_id: uuid.UUID, lead_id: uuid.UUID
    ) -> QualificationRecord:
        row = Qualification(company_id=company_id, lead_id=lead_id)
        self.db.add(row)
        try:
            await self.db.commit()
        except IntegrityError:
            # Another delivery created it first; lead_id is unique
            await self.db.rollback()
            existing = await self.get_qualification(lead_id)
            if existing is None:
                raise
            return existing
        return QualificationRecord.model_validate(row)

    async def update_qualification(
        self, lead_id: uuid.UUID, changes: dict[str, Any]
    ) -> QualificationRecord:
        await self.db.execute(
            update(Qualification)
            .where(Qualification.lead_id == lead_id)
            .values(**_column_values(changes), updated_at=datetime.now(timezone.utc))
        )
        await self.db.commit()
        row = (
            await self.db.execute(select(Qualification).where(Qualification.lead_id == lead_id))
        ).scalar_one()
        await self.db.refresh(row)
        return QualificationRecord.model_validate(row)

    # ─── Quotes ──────────────────────────────────────────────────────

    async def commit_draft_quote(
        self, conversation_id: uuid.UUID, draft: QuoteDraft
    ) -> Optional[StoredQuote]:
        # Close any read transaction so the lock below is taken fresh
        await self.db.commit()

        locked = await self.db.execute(
            select(Conversation.state)
            .where(Conversation.id == conversation_id)
            .with_for_update()
        )
        current = ConversationState(locked.scalar_one())
        if is_terminal(current):
            await self.db.rollback()
            return None
        try:
            target = mark_quote_drafted(current)
        except InvalidTransition:
            await self.db.rollback()
            raise

        quote = Quote(
            company_id=draft.company_id,
            lead_id=draft.lead_id,
            quote_number=draft.quote_number,
            status="DRAFT",
            equipment_model=draft.equipment_model,
            requested_days=draft.requested_days,
            transport_round_trip=draft.transport_round_trip,
            subtotal=draft.subtotal,
            vat=draft.vat,
            total=draft.total,
            qualification_snapshot=draft.qualification_snapshot,
            meta=draft.meta,
            lines=[
                QuoteLine(
                    line_no=line.line_no,
                    description=line.description,
                    duration_days=line.duration_days,
                    unit_price=line.unit_price,
                    amount=line.amount,
                    transport=line.transport,
                    subtotal=line.subtotal,
                    vat=line.vat,
                    is_best_per_day=line.is_best_per_day,
                )
                for line in draft.lines
            ],
        )
        self.db.add(quote)
        await self.db.execute(
            update(Conversation)
            .where(Conversation.id == conversation_id)
            .values(
                state=target.value,
                updated_at=datetime.now(timezone.utc),
            )
        )
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        return StoredQuote.model_validate(quote)
