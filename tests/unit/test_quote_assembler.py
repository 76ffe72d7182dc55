"""Tests for quote labels, best per-day marking and the render payload."""

import uuid
from datetime import datetime, timezone

from src.pricing.engine import TieredPricingEngine
from src.quotes.assembler import (
    QuoteAssembler,
    best_per_day_index,
    column_label,
    line_description,
    mxn,
)
from src.schemas.conversation import LeadRecord
from src.schemas.qualification import Activity, LiftType, QualificationData, Terrain
from src.schemas.quote import PricingOption


def _option(days: int, base: int) -> PricingOption:
    return PricingOption(
        duration_days=days, rental_base=base, transport=0, subtotal=base, vat=0, total=base
    )


QUALIFICATION = QualificationData(
    height_meters=14.0,
    lift_type=LiftType.ARM,
    activity=Activity.PAINTING,
    terrain=Terrain.FIRM_GROUND,
    city="Monterrey",
    duration_days=5,
)


class TestLabels:

    def test_column_labels(self):
        assert column_label(0, 5, 5) == "Tu solicitud (5 días)"
        assert column_label(0, 1, 1) == "Tu solicitud (1 día)"
        assert column_label(1, 7, 5) == "Semana (7 días)"
        assert column_label(2, 30, 5) == "Mes (30 días)"
        assert column_label(2, 1, 7) == "1 día"
        assert column_label(2, 14, 7) == "14 días"

    def test_line_descriptions(self):
        assert line_description(0, 5) == "Renta solicitada (5 días)"
        assert line_description(0, 1) == "Renta solicitada (1 día)"
        assert line_description(1, 7) == "Referencia: Semana (7 días)"
        assert line_description(1, 30) == "Referencia: Mes (30 días)"
        assert line_description(2, 1) == "Referencia: 1 día"

    def test_requested_seven_is_labeled_as_request(self):
        assert column_label(0, 7, 7) == "Tu solicitud (7 días)"
        assert line_description(0, 30) == "Renta solicitada (30 días)"

    def test_mxn(self):
        assert mxn(13456) == "$13,456 MXN"


class TestBestPerDay:

    def test_lowest_effective_cost(self):
        options = [_option(5, 11000), _option(7, 15400), _option(30, 31500)]
        assert best_per_day_index(options) == 2

    def test_tie_goes_to_first(self):
        options = [_option(5, 11000), _option(7, 15400)]
        assert best_per_day_index(options) == 0


class TestAssembler:

    def test_header_totals_from_primary(self):
        pricing = TieredPricingEngine().compute_options(5, "45FT", 600)
        draft = QuoteAssembler().build(
            pricing=pricing,
            company_id=uuid.uuid4(),
            lead_id=uuid.uuid4(),
            quote_number="Q-2026-000001",
            equipment_model="45FT",
            qualification=QUALIFICATION,
        )

        assert draft.requested_days == 5
        assert draft.transport_round_trip == 600
        assert (draft.subtotal, draft.vat, draft.total) == (11600, 1856, 13456)
        assert [line.line_no for line in draft.lines] == [1, 2, 3]
        assert [line.duration_days for line in draft.lines] == [5, 7, 30]
        assert draft.lines[0].is_requested
        assert draft.lines[0].unit_price == 11000
        assert draft.lines[0].amount == 13456
        assert [line.is_best_per_day for line in draft.lines] == [False, False, True]
        assert draft.qualification_snapshot["lift_type"] == "ARM"

    def test_render_payload(self):
        assembler = QuoteAssembler()
        pricing = TieredPricingEngine().compute_options(5, "45FT", 600)
        lead = LeadRecord(
            id=uuid.uuid4(), company_id=uuid.uuid4(), phone="+5218112345678", name="Sergio"
        )
        draft = assembler.build(
            pricing=pricing,
            company_id=lead.company_id,
            lead_id=lead.id,
            quote_number="Q-2026-000001",
            equipment_model="45FT",
            qualification=QUALIFICATION,
        )
        created = datetime(2026, 3, 1, tzinfo=timezone.utc)

        payload = assembler.render_payload(
            draft=draft,
            pricing=pricing,
            company_name="TSC Industrial",
            lead=lead,
            qualification=QUALIFICATION,
            terms=["Vigencia: 48 horas."],
            created_at=created,
        )

        assert payload.quote_number == "Q-2026-000001"
        assert payload.requested_days == 5
        assert [o.duration_days for o in payload.options] == [5, 7, 30]
        assert [c.label for c in payload.columns] == [
            "Tu solicitud (5 días)",
            "Semana (7 días)",
            "Mes (30 días)",
        ]
        assert payload.best_per_day_index == 2
        assert payload.summary.total == 13456
        assert payload.lead["city"] == "Monterrey"
        assert payload.equipment["type"] == "ARM"
        assert payload.terms == ["Vigencia: 48 horas."]

        text = assembler.summary_text(payload)
        assert "Q-2026-000001" in text
        assert "$13,456 MXN" in text
        assert "Brazo articulado" in text
        assert text.count("⭐") == 1
