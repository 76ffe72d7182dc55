"""Conversation and Message models."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin, UUIDMixin, utcnow


class Conversation(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "conversations"

    company_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("companies.id"), nullable=False
    )
    lead_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("leads.id"), nullable=False, index=True
    )

    # Dialog state (see ConversationState)
    state: Mapped[str] = mapped_column(String(30), default="INIT", nullable=False)

    last_message_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    messages = relationship("Message", back_populates="conversation", lazy="selectin")


class Message(Base, UUIDMixin):
    __tablename__ = "messages"

    company_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("companies.id"), nullable=False
    )
    conversation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False
    )

    direction: Mapped[str] = mapped_column(String(10), nullable=False)  # INBOUND | OUTBOUND
    body: Mapped[str] = mapped_column(Text, nullable=False)
    provider_message_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Relationships
    conversation = relationship("Conversation", back_populates="messages")
