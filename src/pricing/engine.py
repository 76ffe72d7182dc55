"""Pricing Engine — tiered rental pricing with comparative reference options."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

import structlog

from src.errors import InvalidPricingInput
from src.pricing.tables import EQUIPMENT_ALIASES, PRICING_TABLES, PricingTable
from src.schemas.quote import PricingOption, PricingResult

logger = structlog.get_logger()

Number = Union[int, float, Decimal]

REFERENCE_ANCHORS = (7, 30)
FALLBACK_ANCHOR = 1
MAX_OPTIONS = 3


def round_currency(value: Number) -> int:
    """Round to whole currency units, half up."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def effective_per_day(option: PricingOption) -> int:
    """Rental cost per day for comparing options."""
    return round_currency(Decimal(option.rental_base) / Decimal(option.duration_days))


def resolve_equipment_model(equipment_model: Optional[str]) -> str:
    key = str(equipment_model or "").strip().upper()
    sku = EQUIPMENT_ALIASES.get(key)
    if sku is None or sku not in PRICING_TABLES:
        raise InvalidPricingInput(f"Unsupported equipment model: {equipment_model!r}")
    return sku


def validate_duration(duration_days: object) -> int:
    if isinstance(duration_days, bool) or not isinstance(duration_days, int):
        raise InvalidPricingInput(
            f"duration_days must be a positive integer, got {duration_days!r}"
        )
    if duration_days <= 0:
        raise InvalidPricingInput(
            f"duration_days must be a positive integer, got {duration_days!r}"
        )
    return duration_days


def rental_base(days: int, table: PricingTable) -> int:
    """Base rental for ``days``: exact fixed bundle, else days × tier rate."""
    bundle = table.fixed_bundles.get(days)
    if bundle is not None:
        return bundle
    tier = table.tier_for(days)
    return round_currency(days * tier.rate_per_day)


class TieredPricingEngine:
    """Maps a requested duration to a primary option plus reference options.

    Pure: no I/O, same input always gives the same options.
    """

    def __init__(self, tables: Optional[dict[str, PricingTable]] = None):
        self.tables = tables if tables is not None else PRICING_TABLES

    def compute_options(
        self,
        duration_days: int,
        equipment_model: str,
        transport_round_trip: Number = 0,
        vat_rate: float = 0.16,
        table: Optional[PricingTable] = None,
    ) -> PricingResult:
        """Price the exact request and up to two reference durations.

        Args:
            duration_days: Exact number of days requested
            equipment_model: SKU or alias (e.g. "45FT", "JLG45")
            transport_round_trip: Round-trip transport, MXN before VAT
            vat_rate: VAT rate applied to rental + transport
            table: Price table to use instead of the SKU's registered one

        Returns:
            PricingResult with options ordered [primary, *references]

        Raises:
            InvalidPricingInput: bad duration or unsupported equipment model
        """
        days = validate_duration(duration_days)
        sku = resolve_equipment_model(equipment_model)
        if table is None:
            table = self.tables.get(sku)
        if table is None:
            raise InvalidPricingInput(f"No pricing table for equipment model {sku}")

        transport = round_currency(transport_round_trip or 0)

        def make_option(option_days: int) -> PricingOption:
            base = rental_base(option_days, table)
            subtotal = round_currency(base + transport)
            vat = round_currency(Decimal(subtotal) * Decimal(str(vat_rate)))
            total = round_currency(subtotal + vat)
            return PricingOption(
                duration_days=option_days,
                rental_base=base,
                transport=transport,
                subtotal=subtotal,
                vat=vat,
                total=total,
            )

        primary = make_option(days)

        reference_days = [anchor for anchor in REFERENCE_ANCHORS if anchor != days]
        if len(reference_days) < 2 and FALLBACK_ANCHOR != days and FALLBACK_ANCHOR not in reference_days:
            reference_days.append(FALLBACK_ANCHOR)
        references = [make_option(d) for d in reference_days[: MAX_OPTIONS - 1]]

        options = [primary, *references][:MAX_OPTIONS]

        logger.info(
            "pricing_computed",
            sku=sku,
            duration_days=days,
            transport=transport,
            options=[o.duration_days for o in options],
            primary_total=primary.total,
        )

        return PricingResult(primary=primary, references=references, options=options)
