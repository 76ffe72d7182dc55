"""Pricing and quote schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class PricingOption(BaseModel):
    """One priced duration. All amounts are whole MXN."""

    duration_days: int
    rental_base: int
    transport: int
    subtotal: int
    vat: int
    total: int


class PricingResult(BaseModel):
    """Result from the tiered pricing engine.

    ``options`` is always ``[primary, *references]`` in engine order.
    """

    primary: PricingOption
    references: list[PricingOption] = []
    options: list[PricingOption] = []


class QuoteLineDraft(BaseModel):
    line_no: int
    description: str
    label: str
    duration_days: int
    unit_price: int  # rental base for the duration
    amount: int  # option total with transport and VAT
    rental_base: int
    transport: int
    subtotal: int
    vat: int
    total: int
    effective_per_day: int
    is_requested: bool = False
    is_best_per_day: bool = False


class QuoteDraft(BaseModel):
    """Quote ready to be persisted. Header totals come from the primary option."""

    company_id: uuid.UUID
    lead_id: uuid.UUID
    quote_number: str
    equipment_model: str
    requested_days: int
    transport_round_trip: int
    subtotal: int
    vat: int
    total: int
    qualification_snapshot: dict[str, Any]
    meta: Optional[dict[str, Any]] = None
    lines: list[QuoteLineDraft]


class StoredQuote(BaseModel):
    id: uuid.UUID
    quote_number: str
    status: str
    subtotal: int
    vat: int
    total: int
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RenderColumn(BaseModel):
    label: str
    option: PricingOption
    is_requested: bool = False
    is_best_per_day: bool = False


class QuoteSummary(BaseModel):
    subtotal: int
    vat: int
    total: int


class QuoteRenderPayload(BaseModel):
    """Everything the document renderer needs, in the order the engine produced it."""

    quote_number: str
    created_at: datetime
    company: dict[str, Any]
    lead: dict[str, Any]
    equipment: dict[str, Any]
    requested_days: int
    options: list[PricingOption]
    columns: list[RenderColumn]
    best_per_day_index: int
    summary: QuoteSummary
    terms: list[str]
