"""Company, Lead and Qualification models."""

import uuid
from typing import Optional

from sqlalchemy import Float, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin, UUIDMixin


class Company(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "companies"

    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)


class Lead(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "leads"
    __table_args__ = (UniqueConstraint("company_id", "phone", name="uq_leads_company_phone"),)

    company_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("companies.id"), nullable=False
    )
    phone: Mapped[str] = mapped_column(String(50), nullable=False)

    # Contact info (filled additively across turns)
    name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    # Relationships
    qualification = relationship("Qualification", back_populates="lead", uselist=False)


class Qualification(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "qualifications"

    company_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("companies.id"), nullable=False
    )
    lead_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("leads.id"), unique=True, nullable=False
    )

    # Requirement (NULL = not resolved yet, never "")
    height_meters: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    height_feet: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    lift_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)  # ARM|SCISSOR
    activity: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)  # PAINTING|GENERAL
    terrain: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)  # FIRM_GROUND|UNPAVED
    city: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    duration_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Relationships
    lead = relationship("Lead", back_populates="qualification")
