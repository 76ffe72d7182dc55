"""SQLAlchemy ORM models."""

from src.models.base import Base
from src.models.conversation import Conversation, Message
from src.models.lead import Company, Lead, Qualification
from src.models.quote import Quote, QuoteLine

__all__ = [
    "Base",
    "Company",
    "Lead",
    "Qualification",
    "Conversation",
    "Message",
    "Quote",
    "QuoteLine",
]
