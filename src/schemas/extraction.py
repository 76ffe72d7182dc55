"""Extractor payload — the validated boundary record for LLM field extraction.

The extractor is a best-effort guess. Each field is validated on its own:
a value of the wrong shape becomes None instead of failing the whole
payload, so one bad field never discards the rest of the turn.
"""

from __future__ import annotations

import math
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class ExtractionResult(BaseModel):
    """Structured guess returned by the field extractor."""

    name: Optional[str] = None
    height_m: Optional[float] = None
    height_ft: Optional[float] = None
    type: Optional[str] = None
    activity: Optional[str] = None
    terrain: Optional[str] = None
    city: Optional[str] = None
    duration_days: Optional[float] = None
    email: Optional[str] = None
    confidence: float = 0.0
    missing_fields: list[str] = Field(default_factory=list, alias="missing")

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @field_validator("name", "type", "activity", "terrain", "city", "email", mode="before")
    @classmethod
    def _text_or_none(cls, value: Any) -> Optional[str]:
        if isinstance(value, str):
            return value
        return None

    @field_validator("height_m", "height_ft", "duration_days", mode="before")
    @classmethod
    def _number_or_none(cls, value: Any) -> Optional[float]:
        if isinstance(value, bool) or value is None:
            return None
        if isinstance(value, (int, float)):
            try:
                return float(value) if math.isfinite(value) else None
            except OverflowError:
                return None
        if isinstance(value, str):
            try:
                number = float(value.strip().replace(",", "."))
            except ValueError:
                return None
            return number if math.isfinite(number) else None
        return None

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0.0
        if not math.isfinite(value):
            return 0.0
        return min(max(float(value), 0.0), 1.0)

    @field_validator("missing_fields", mode="before")
    @classmethod
    def _string_list(cls, value: Any) -> list[str]:
        if not isinstance(value, (list, tuple, set)):
            return []
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]
