"""Quote and QuoteLine models — comparative rental quotes (DRAFT only)."""

import uuid
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin, UUIDMixin


class Quote(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "quotes"
    __table_args__ = (
        UniqueConstraint("company_id", "quote_number", name="uq_quotes_company_number"),
    )

    company_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("companies.id"), nullable=False
    )
    lead_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("leads.id"), nullable=False, index=True
    )

    quote_number: Mapped[str] = mapped_column(String(30), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="DRAFT", nullable=False)

    equipment_model: Mapped[str] = mapped_column(String(30), nullable=False)
    requested_days: Mapped[int] = mapped_column(Integer, nullable=False)
    transport_round_trip: Mapped[int] = mapped_column(Integer, default=0)

    # Canonical totals = exact requested duration (line 1)
    subtotal: Mapped[int] = mapped_column(Integer, nullable=False)
    vat: Mapped[int] = mapped_column(Integer, nullable=False)
    total: Mapped[int] = mapped_column(Integer, nullable=False)

    qualification_snapshot: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    meta: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)

    # Relationships
    lines = relationship(
        "QuoteLine",
        back_populates="quote",
        order_by="QuoteLine.line_no",
        lazy="selectin",
        cascade="all, delete-orphan",
    )


class QuoteLine(Base, UUIDMixin):
    __tablename__ = "quote_lines"

    quote_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False
    )

    line_no: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(String(200), nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)

    # Breakdown for the comparative table
    transport: Mapped[int] = mapped_column(Integer, nullable=False)
    subtotal: Mapped[int] = mapped_column(Integer, nullable=False)
    vat: Mapped[int] = mapped_column(Integer, nullable=False)
    is_best_per_day: Mapped[bool] = mapped_column(Boolean, default=False)

    # Relationships
    quote = relationship("Quote", back_populates="lines")
