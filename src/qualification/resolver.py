"""Missing-field resolver — decides what the dialogue asks next."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from src.schemas.qualification import QualificationData, QualificationField

# Extractor field names → dialogue fields
EXTRACTOR_FIELD_ALIASES: dict[str, QualificationField] = {
    "name": QualificationField.NAME,
    "height": QualificationField.HEIGHT,
    "height_m": QualificationField.HEIGHT,
    "height_ft": QualificationField.HEIGHT,
    "height_meters": QualificationField.HEIGHT,
    "height_feet": QualificationField.HEIGHT,
    "type": QualificationField.LIFT_TYPE,
    "lift_type": QualificationField.LIFT_TYPE,
    "activity": QualificationField.ACTIVITY,
    "terrain": QualificationField.TERRAIN,
    "city": QualificationField.CITY,
    "duration": QualificationField.DURATION_DAYS,
    "duration_days": QualificationField.DURATION_DAYS,
    "email": QualificationField.CONTACT_EMAIL,
    "contact_email": QualificationField.CONTACT_EMAIL,
}


@dataclass
class Resolution:
    next_field: Optional[QualificationField]
    ordered_missing: list[QualificationField] = field(default_factory=list)
    retry: bool = False

    @property
    def complete(self) -> bool:
        return self.next_field is None


def map_extractor_fields(names: Iterable[str]) -> set[QualificationField]:
    """Translate the extractor's self-reported missing set into dialogue fields."""
    mapped = set()
    for name in names:
        qfield = EXTRACTOR_FIELD_ALIASES.get(name.strip().lower())
        if qfield is not None:
            mapped.add(qfield)
    return mapped


class MissingFieldResolver:
    """Computes unmet fields in fixed priority order and the retry flag."""

    def __init__(self, require_contact_email: bool = False):
        self.require_contact_email = require_contact_email

    def ordered_missing(
        self,
        qualification: QualificationData,
        lead_has_name: bool,
        lead_email: Optional[str] = None,
    ) -> list[QualificationField]:
        checks = [
            (QualificationField.NAME, lead_has_name),
            (QualificationField.HEIGHT, qualification.has_height),
            (QualificationField.LIFT_TYPE, qualification.lift_type is not None),
            (QualificationField.ACTIVITY, qualification.activity is not None),
            (QualificationField.TERRAIN, qualification.terrain is not None),
            (QualificationField.CITY, qualification.city is not None),
            (QualificationField.DURATION_DAYS, qualification.duration_days is not None),
        ]
        if self.require_contact_email:
            checks.append((QualificationField.CONTACT_EMAIL, lead_email is not None))
        return [qfield for qfield, resolved in checks if not resolved]

    def resolve(
        self,
        qualification: QualificationData,
        lead_has_name: bool,
        *,
        extractor_missing: Iterable[str] = (),
        rejected: Iterable[QualificationField] = (),
        inbound_text: str = "",
        lead_email: Optional[str] = None,
    ) -> Resolution:
        """Return the next field to ask, all unmet fields, and the retry flag.

        The turn counts as a failed attempt at the next field when the user
        did write something and either the extractor reported that field as
        not found or the value it found was rejected by normalization.
        """
        missing = self.ordered_missing(qualification, lead_has_name, lead_email)
        next_field = missing[0] if missing else None

        retry = False
        if next_field is not None and inbound_text.strip():
            failed = map_extractor_fields(extractor_missing) | set(rejected)
            retry = next_field in failed

        return Resolution(next_field=next_field, ordered_missing=missing, retry=retry)
