"""Rental price tables per equipment SKU (MXN, before VAT)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from src.errors import PricingTableError


@dataclass(frozen=True)
class Tier:
    """Inclusive day range with one per-day rate. ``max_days=None`` is open-ended."""

    min_days: int
    max_days: Optional[int]
    rate_per_day: int

    def contains(self, days: int) -> bool:
        return days >= self.min_days and (self.max_days is None or days <= self.max_days)


@dataclass(frozen=True)
class PricingTable:
    """Tiered per-day rates plus exact-day fixed bundles for one SKU."""

    sku: str
    tiers: Tuple[Tier, ...]
    fixed_bundles: Mapping[int, int]

    def __post_init__(self) -> None:
        validate_table(self)

    def tier_for(self, days: int) -> Tier:
        for tier in self.tiers:
            if tier.contains(days):
                return tier
        raise PricingTableError(f"No tier covers {days} days in table {self.sku}")


def validate_table(table: PricingTable) -> None:
    """Tiers must start at day 1, be contiguous, end open-ended and get cheaper."""
    if not table.tiers:
        raise PricingTableError(f"Table {table.sku} has no tiers")

    expected_start = 1
    previous_rate: Optional[int] = None
    for index, tier in enumerate(table.tiers):
        if tier.min_days != expected_start:
            raise PricingTableError(
                f"Table {table.sku}: tier {index} starts at {tier.min_days}, expected {expected_start}"
            )
        if tier.rate_per_day <= 0:
            raise PricingTableError(f"Table {table.sku}: tier {index} has a non-positive rate")
        if previous_rate is not None and tier.rate_per_day >= previous_rate:
            raise PricingTableError(
                f"Table {table.sku}: rates must strictly decrease (tier {index})"
            )
        is_last = index == len(table.tiers) - 1
        if tier.max_days is None:
            if not is_last:
                raise PricingTableError(f"Table {table.sku}: only the last tier may be open-ended")
        else:
            if is_last:
                raise PricingTableError(f"Table {table.sku}: last tier must be open-ended")
            if tier.max_days < tier.min_days:
                raise PricingTableError(f"Table {table.sku}: tier {index} is empty")
            expected_start = tier.max_days + 1
        previous_rate = tier.rate_per_day

    for days, amount in table.fixed_bundles.items():
        if days <= 0 or amount <= 0:
            raise PricingTableError(f"Table {table.sku}: invalid fixed bundle {days}d={amount}")


# JLG 45 ft articulated boom. 7 and 30 days are sold as fixed bundles.
LIFT_45FT_TABLE = PricingTable(
    sku="45FT",
    tiers=(
        Tier(1, 3, 2300),
        Tier(4, 7, 2200),
        Tier(8, 14, 1900),
        Tier(15, 21, 1300),
        Tier(22, None, 1050),
    ),
    fixed_bundles={7: 15400, 30: 31500},
)

PRICING_TABLES: dict[str, PricingTable] = {
    LIFT_45FT_TABLE.sku: LIFT_45FT_TABLE,
}

EQUIPMENT_ALIASES: dict[str, str] = {
    "45FT": "45FT",
    "45": "45FT",
    "45_PIES": "45FT",
    "JLG45": "45FT",
}
