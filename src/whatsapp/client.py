"""Twilio WhatsApp client — sends text replies via Twilio API."""

from __future__ import annotations

import asyncio
from typing import Optional

import structlog

from src.config import settings

logger = structlog.get_logger()

# Twilio rejects WhatsApp bodies longer than this
MAX_BODY_LENGTH = 1600

# Lazy singleton
_client: Optional["WhatsAppClient"] = None


def split_message(text: str, limit: int = MAX_BODY_LENGTH) -> list[str]:
    """Split a long reply on line boundaries so each part fits one message."""
    if len(text) <= limit:
        return [text]

    parts: list[str] = []
    current = ""
    for line in text.split("\n"):
        while len(line) > limit:
            if current:
                parts.append(current)
                current = ""
            parts.append(line[:limit])
            line = line[limit:]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            parts.append(current)
            current = line
        else:
            current = candidate
    if current:
        parts.append(current)
    return parts


class WhatsAppClient:
    """Async wrapper around Twilio's synchronous SDK for WhatsApp messaging."""

    def __init__(self, account_sid: str, auth_token: str, from_number: str):
        from twilio.rest import Client as TwilioClient

        self.twilio = TwilioClient(account_sid, auth_token)
        self.from_number = from_number  # e.g. "+14155238886" (sandbox)

    async def send_message(self, to_phone: str, text: str) -> list[str]:
        """Send a WhatsApp text, split into several messages when too long.

        Args:
            to_phone: Recipient phone number (e.g. "+5218112345678")
            text: Message body

        Returns:
            Twilio message SIDs, one per part
        """
        sids = []
        for part in split_message(text):
            # Twilio SDK is synchronous; run in thread pool
            msg = await asyncio.to_thread(
                self.twilio.messages.create,
                body=part,
                from_=f"whatsapp:{self.from_number}",
                to=f"whatsapp:{to_phone}",
            )
            sids.append(msg.sid)

        logger.info(
            "whatsapp_message_sent",
            to=to_phone,
            sids=sids,
            text_len=len(text),
        )
        return sids


def get_whatsapp_client() -> Optional[WhatsAppClient]:
    """Get or create the singleton WhatsApp client.

    Returns None if Twilio credentials are not configured.
    """
    global _client

    if _client is not None:
        return _client

    if not settings.twilio_account_sid or not settings.twilio_auth_token:
        logger.debug("whatsapp_client_not_configured")
        return None

    _client = WhatsAppClient(
        account_sid=settings.twilio_account_sid,
        auth_token=settings.twilio_auth_token,
        from_number=settings.twilio_whatsapp_number,
    )

    logger.info(
        "whatsapp_client_initialized",
        from_number=settings.twilio_whatsapp_number,
    )
    return _client
