"""Qualification accumulator — merges per-turn extraction into one record."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

import structlog

from src.repositories.base import CrmRepository
from src.schemas.qualification import QUALIFICATION_COLUMNS, QualificationRecord

logger = structlog.get_logger()


@dataclass
class PatchResult:
    """Outcome of a patch. ``changed`` is False for a no-op."""

    record: QualificationRecord
    changes: dict[str, Any] = field(default_factory=dict)

    @property
    def changed(self) -> bool:
        return bool(self.changes)


class QualificationAccumulator:
    """Owns the canonical accumulated requirement for a lead.

    Patches are monotonic and non-destructive: a null or empty value never
    overwrites a stored one, while a new non-null value may replace an old
    value (the lead corrected itself).
    """

    def __init__(self, repository: CrmRepository):
        self.repository = repository

    async def get_or_create(
        self, company_id: uuid.UUID, lead_id: uuid.UUID
    ) -> QualificationRecord:
        existing = await self.repository.get_qualification(lead_id)
        if existing is not None:
            return existing

        record = await self.repository.create_qualification(company_id, lead_id)
        logger.info("qualification_created", lead_id=str(lead_id))
        return record

    async def patch(
        self,
        company_id: uuid.UUID,
        lead_id: uuid.UUID,
        fields: dict[str, Any],
    ) -> PatchResult:
        """Write only the non-null fields that differ from what is stored.

        Args:
            company_id: Scoping company
            lead_id: Lead whose qualification is patched
            fields: Normalized values keyed by qualification column

        Returns:
            PatchResult with the current record and the applied changes
        """
        current = await self.get_or_create(company_id, lead_id)
        changes = self.sparse_update(current, fields)

        if not changes:
            logger.debug("qualification_patch_noop", lead_id=str(lead_id))
            return PatchResult(record=current)

        record = await self.repository.update_qualification(lead_id, changes)
        logger.info(
            "qualification_patched",
            lead_id=str(lead_id),
            fields=sorted(changes),
        )
        return PatchResult(record=record, changes=changes)

    @staticmethod
    def sparse_update(
        current: QualificationRecord, fields: dict[str, Any]
    ) -> dict[str, Any]:
        """Compute the sparse update for a patch without writing it."""
        changes: dict[str, Any] = {}
        for column in QUALIFICATION_COLUMNS:
            value = fields.get(column)
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            if getattr(current, column) == value:
                continue
            changes[column] = value
        return changes
