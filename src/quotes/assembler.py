"""Quote assembler — turns pricing options into labeled lines and a render payload."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional, Sequence

from src.pricing.engine import effective_per_day
from src.schemas.conversation import LeadRecord
from src.schemas.qualification import QualificationData
from src.schemas.quote import (
    PricingOption,
    PricingResult,
    QuoteDraft,
    QuoteLineDraft,
    QuoteRenderPayload,
    QuoteSummary,
    RenderColumn,
)

LIFT_TYPE_LABELS = {"ARM": "Brazo articulado", "SCISSOR": "Tijera"}
ACTIVITY_LABELS = {"PAINTING": "Pintura", "GENERAL": "Uso general"}
TERRAIN_LABELS = {"FIRM_GROUND": "Piso firme", "UNPAVED": "Terracería"}


def _days(n: int) -> str:
    return f"{n} día" if n == 1 else f"{n} días"


def column_label(index: int, duration_days: int, requested_days: int) -> str:
    """Short column label: the request, "Semana", "Mes", or the day count."""
    if index == 0:
        return f"Tu solicitud ({_days(requested_days)})"
    if duration_days == 7:
        return "Semana (7 días)"
    if duration_days == 30:
        return "Mes (30 días)"
    return _days(duration_days)


def line_description(index: int, duration_days: int) -> str:
    if index == 0:
        return f"Renta solicitada ({_days(duration_days)})"
    if duration_days == 7:
        return "Referencia: Semana (7 días)"
    if duration_days == 30:
        return "Referencia: Mes (30 días)"
    return f"Referencia: {_days(duration_days)}"


def best_per_day_index(options: Sequence[PricingOption]) -> int:
    """Index of the cheapest option per day. Ties go to the earlier option."""
    best = 0
    best_cost: Optional[int] = None
    for index, option in enumerate(options):
        cost = effective_per_day(option)
        if best_cost is None or cost < best_cost:
            best, best_cost = index, cost
    return best


def mxn(amount: int) -> str:
    return f"${amount:,.0f} MXN"


class QuoteAssembler:
    """Builds quote lines, header totals and the renderer payload."""

    def build_lines(self, pricing: PricingResult) -> list[QuoteLineDraft]:
        options = pricing.options
        best = best_per_day_index(options)
        lines = []
        for index, option in enumerate(options):
            lines.append(
                QuoteLineDraft(
                    line_no=index + 1,
                    description=line_description(index, option.duration_days),
                    label=column_label(index, option.duration_days, pricing.primary.duration_days),
                    duration_days=option.duration_days,
                    unit_price=option.rental_base,
                    amount=option.total,
                    rental_base=option.rental_base,
                    transport=option.transport,
                    subtotal=option.subtotal,
                    vat=option.vat,
                    total=option.total,
                    effective_per_day=effective_per_day(option),
                    is_requested=index == 0,
                    is_best_per_day=index == best,
                )
            )
        return lines

    def build(
        self,
        *,
        pricing: PricingResult,
        company_id: uuid.UUID,
        lead_id: uuid.UUID,
        quote_number: str,
        equipment_model: str,
        qualification: QualificationData,
        meta: Optional[dict[str, Any]] = None,
    ) -> QuoteDraft:
        """Assemble a quote draft. Header totals come from the primary option only."""
        primary = pricing.primary
        return QuoteDraft(
            company_id=company_id,
            lead_id=lead_id,
            quote_number=quote_number,
            equipment_model=equipment_model,
            requested_days=primary.duration_days,
            transport_round_trip=primary.transport,
            subtotal=primary.subtotal,
            vat=primary.vat,
            total=primary.total,
            qualification_snapshot=qualification.model_dump(mode="json"),
            meta=meta,
            lines=self.build_lines(pricing),
        )

    def render_payload(
        self,
        *,
        draft: QuoteDraft,
        pricing: PricingResult,
        company_name: str,
        lead: LeadRecord,
        qualification: QualificationData,
        terms: Sequence[str],
        created_at: datetime,
    ) -> QuoteRenderPayload:
        best = best_per_day_index(pricing.options)
        columns = [
            RenderColumn(
                label=column_label(index, option.duration_days, draft.requested_days),
                option=option,
                is_requested=index == 0,
                is_best_per_day=index == best,
            )
            for index, option in enumerate(pricing.options)
        ]
        return QuoteRenderPayload(
            quote_number=draft.quote_number,
            created_at=created_at,
            company={"name": company_name},
            lead={
                "name": lead.name,
                "phone": lead.phone,
                "email": lead.email,
                "city": qualification.city or lead.city,
            },
            equipment={
                "model": draft.equipment_model,
                "type": qualification.lift_type.value if qualification.lift_type else None,
                "height_m": qualification.height_meters,
                "height_ft": qualification.height_feet,
                "terrain": qualification.terrain.value if qualification.terrain else None,
                "activity": qualification.activity.value if qualification.activity else None,
            },
            requested_days=draft.requested_days,
            options=list(pricing.options),
            columns=columns,
            best_per_day_index=best,
            summary=QuoteSummary(
                subtotal=draft.subtotal,
                vat=draft.vat,
                total=draft.total,
            ),
            terms=list(terms),
        )

    def summary_text(self, payload: QuoteRenderPayload) -> str:
        """WhatsApp text version of the comparative quote."""
        equipment = payload.equipment
        details = [
            LIFT_TYPE_LABELS.get(equipment.get("type") or "", ""),
            equipment.get("model") or "",
            ACTIVITY_LABELS.get(equipment.get("activity") or "", ""),
            TERRAIN_LABELS.get(equipment.get("terrain") or "", ""),
        ]
        lines = [
            f"📄 Cotización {payload.quote_number}",
            "Equipo: " + " · ".join(d for d in details if d),
            "",
        ]
        for column in payload.columns:
            marker = " ⭐ mejor precio por día" if column.is_best_per_day else ""
            option = column.option
            lines.append(
                f"• {column.label}: {mxn(option.total)} "
                f"(renta {mxn(option.rental_base)} + transporte {mxn(option.transport)} "
                f"+ IVA {mxn(option.vat)}){marker}"
            )
        lines.append("")
        lines.append(f"Total de tu solicitud: {mxn(payload.summary.total)} (IVA incluido)")
        return "\n".join(lines)
