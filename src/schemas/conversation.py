"""Lead and conversation records exchanged with the repositories."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class ConversationState(str, Enum):
    """Dialog states for lead qualification.

    Order: init → ask name → technical qualification → ready for match →
    quote drafted. QUOTE_DRAFTED is terminal and is the de-duplication key
    for quote generation.
    """

    INIT = "INIT"
    ASK_NAME = "ASK_NAME"
    TECH_QUALIFICATION = "TECH_QUALIFICATION"
    READY_FOR_MATCH = "READY_FOR_MATCH"
    QUOTE_DRAFTED = "QUOTE_DRAFTED"


class MessageDirection(str, Enum):
    INBOUND = "INBOUND"
    OUTBOUND = "OUTBOUND"


class CompanyRecord(BaseModel):
    id: uuid.UUID
    name: str

    model_config = {"from_attributes": True}


class LeadRecord(BaseModel):
    id: uuid.UUID
    company_id: uuid.UUID
    phone: str
    name: Optional[str] = None
    email: Optional[str] = None
    city: Optional[str] = None

    model_config = {"from_attributes": True}


class ConversationRecord(BaseModel):
    id: uuid.UUID
    company_id: uuid.UUID
    lead_id: uuid.UUID
    state: ConversationState = ConversationState.INIT
    last_message_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
