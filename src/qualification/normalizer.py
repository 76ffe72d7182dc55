"""Field normalizer — canonical cleanup of extractor output.

Pure functions: each takes a raw value and returns a normalized value or
None. None means "not provided or not valid"; an empty string is never
returned.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from src.schemas.extraction import ExtractionResult
from src.schemas.qualification import Activity, LiftType, QualificationField, Terrain

FEET_PER_METER = 1 / 0.3048

LIFT_TYPE_ALIASES: dict[str, LiftType] = {
    "ARM": LiftType.ARM,
    "BOOM": LiftType.ARM,
    "BRAZO": LiftType.ARM,
    "BRAZO_ARTICULADO": LiftType.ARM,
    "SCISSOR": LiftType.SCISSOR,
    "TIJERA": LiftType.SCISSOR,
}

ACTIVITY_ALIASES: dict[str, Activity] = {
    "PAINTING": Activity.PAINTING,
    "PINTURA": Activity.PAINTING,
    "GENERAL": Activity.GENERAL,
    "USO_GENERAL": Activity.GENERAL,
}

TERRAIN_ALIASES: dict[str, Terrain] = {
    "FIRM_GROUND": Terrain.FIRM_GROUND,
    "PISO_FIRME": Terrain.FIRM_GROUND,
    "CONCRETO": Terrain.FIRM_GROUND,
    "UNPAVED": Terrain.UNPAVED,
    "TERRACERIA": Terrain.UNPAVED,
    "TERRACERÍA": Terrain.UNPAVED,
}

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

_METERS_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(m|mts|metro|metros)\b")
_FEET_RE = re.compile(r"(\d+)\s*(ft|pies|pie|feet)\b")
_BARE_NUMBER_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*$")


def clean_str(value: Any) -> Optional[str]:
    """Trim a string; empty or non-string → None."""
    if not isinstance(value, str):
        return None
    text = value.strip()
    return text or None


def _enum_key(value: Any) -> Optional[str]:
    text = clean_str(value)
    if text is None:
        return None
    return re.sub(r"[\s\-]+", "_", text).upper()


def normalize_lift_type(value: Any) -> Optional[LiftType]:
    key = _enum_key(value)
    return LIFT_TYPE_ALIASES.get(key) if key else None


def normalize_activity(value: Any) -> Optional[Activity]:
    key = _enum_key(value)
    return ACTIVITY_ALIASES.get(key) if key else None


def normalize_terrain(value: Any) -> Optional[Terrain]:
    key = _enum_key(value)
    return TERRAIN_ALIASES.get(key) if key else None


def _positive_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        if not math.isfinite(value) or value <= 0:
            return None
        return float(value)
    except OverflowError:
        return None


def normalize_positive_int(value: Any) -> Optional[int]:
    """Finite integer > 0. Integral floats and digit strings are accepted."""
    if isinstance(value, str):
        text = value.strip()
        if not (text.isascii() and text.isdigit()):
            return None
        value = int(text)
    number = _positive_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def normalize_height(
    meters: Any, feet: Any
) -> tuple[Optional[float], Optional[int]]:
    """Validate a height pair as provided. Units are not re-derived here."""
    return _positive_number(meters), normalize_positive_int(feet)


def normalize_email(value: Any) -> Optional[str]:
    text = clean_str(value)
    if text is None:
        return None
    text = text.lower()
    return text if _EMAIL_RE.match(text) else None


def _round1(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def parse_height(text: Optional[str]) -> tuple[Optional[float], Optional[int]]:
    """Parse a free-text height answer into (meters, feet).

    "14m" / "14 metros" are meters, "45ft" / "45 pies" are feet. A bare
    number up to 25 is read as meters, anything larger as feet.
    """
    if not text:
        return None, None

    t = text.lower().replace(",", ".").strip()

    m = _METERS_RE.search(t)
    if m:
        meters = float(m.group(1))
        if 0 < meters < 60:
            return _round1(meters), int(math.floor(meters * FEET_PER_METER + 0.5))

    f = _FEET_RE.search(t)
    if f:
        feet = int(f.group(1))
        if 0 < feet < 200:
            return _round1(feet * 0.3048), feet

    n = _BARE_NUMBER_RE.match(t)
    if n:
        value = float(n.group(1))
        if 0 < value < 200:
            if value <= 25:
                return _round1(value), int(math.floor(value * FEET_PER_METER + 0.5))
            feet = int(math.floor(value + 0.5))
            return _round1(feet * 0.3048), feet

    return None, None


@dataclass
class NormalizedFields:
    """Normalized extraction for one turn.

    ``rejected`` holds the fields the extractor provided a value for that
    failed normalization. Those stay missing and trigger a clarifying prompt.
    """

    name: Optional[str] = None
    email: Optional[str] = None
    qualification: dict[str, Any] = field(default_factory=dict)
    rejected: set[QualificationField] = field(default_factory=set)


def normalize_extraction(result: Optional[ExtractionResult]) -> NormalizedFields:
    """Apply every field normalizer to a validated extraction."""
    out = NormalizedFields()
    if result is None:
        return out

    out.name = clean_str(result.name)

    out.email = normalize_email(result.email)
    if clean_str(result.email) and out.email is None:
        out.rejected.add(QualificationField.CONTACT_EMAIL)

    meters, feet = normalize_height(result.height_m, result.height_ft)
    if meters is not None:
        out.qualification["height_meters"] = meters
    if feet is not None:
        out.qualification["height_feet"] = feet
    if meters is None and feet is None and (
        result.height_m is not None or result.height_ft is not None
    ):
        out.rejected.add(QualificationField.HEIGHT)

    enum_fields = (
        ("lift_type", result.type, normalize_lift_type, QualificationField.LIFT_TYPE),
        ("activity", result.activity, normalize_activity, QualificationField.ACTIVITY),
        ("terrain", result.terrain, normalize_terrain, QualificationField.TERRAIN),
    )
    for column, raw, normalizer, qfield in enum_fields:
        value = normalizer(raw)
        if value is not None:
            out.qualification[column] = value
        elif clean_str(raw):
            out.rejected.add(qfield)

    city = clean_str(result.city)
    if city is not None:
        out.qualification["city"] = city

    duration = normalize_positive_int(result.duration_days)
    if duration is not None:
        out.qualification["duration_days"] = duration
    elif result.duration_days is not None:
        out.rejected.add(QualificationField.DURATION_DAYS)

    return out
