"""Qualification schemas — accumulated rental requirement for a lead."""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class LiftType(str, Enum):
    ARM = "ARM"
    SCISSOR = "SCISSOR"


class Activity(str, Enum):
    PAINTING = "PAINTING"
    GENERAL = "GENERAL"


class Terrain(str, Enum):
    FIRM_GROUND = "FIRM_GROUND"
    UNPAVED = "UNPAVED"


class QualificationField(str, Enum):
    """Fields the dialogue must resolve, in the order they are asked.

    NAME and CONTACT_EMAIL live on the lead, the rest on the qualification.
    """

    NAME = "name"
    HEIGHT = "height"
    LIFT_TYPE = "lift_type"
    ACTIVITY = "activity"
    TERRAIN = "terrain"
    CITY = "city"
    DURATION_DAYS = "duration_days"
    CONTACT_EMAIL = "contact_email"


# Column names written by the accumulator
QUALIFICATION_COLUMNS = (
    "height_meters",
    "height_feet",
    "lift_type",
    "activity",
    "terrain",
    "city",
    "duration_days",
)


class QualificationData(BaseModel):
    """Accumulated requirement. Every field is a valid value or None."""

    height_meters: Optional[float] = None
    height_feet: Optional[int] = None
    lift_type: Optional[LiftType] = None
    activity: Optional[Activity] = None
    terrain: Optional[Terrain] = None
    city: Optional[str] = None
    duration_days: Optional[int] = None

    model_config = {"from_attributes": True}

    @property
    def has_height(self) -> bool:
        return self.height_meters is not None or self.height_feet is not None


class QualificationRecord(QualificationData):
    """Persisted qualification, one per lead."""

    id: uuid.UUID
    company_id: uuid.UUID
    lead_id: uuid.UUID
