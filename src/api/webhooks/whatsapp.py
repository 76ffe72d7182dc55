"""WhatsApp (Twilio) webhook endpoint — receives incoming WhatsApp messages."""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from src.conversation.dedup import InboundDeduplicator
from src.conversation.engine import ConversationEngine
from src.database import get_db
from src.quotes.numbering import QuoteNumberAllocator
from src.quotes.service import QuoteService
from src.redis_client import get_redis_client
from src.repositories.sql import SqlCrmRepository
from src.whatsapp.client import WhatsAppClient, get_whatsapp_client

logger = structlog.get_logger()

router = APIRouter()


async def get_conversation_engine(
    db: AsyncSession = Depends(get_db),
) -> ConversationEngine:
    """Build the engine for one request, bound to its DB session."""
    repository = SqlCrmRepository(db)
    numbering = QuoteNumberAllocator(get_redis_client())
    return ConversationEngine(repository, QuoteService(repository, numbering))


def get_deduplicator() -> InboundDeduplicator:
    return InboundDeduplicator(get_redis_client())


def get_sender() -> Optional[WhatsAppClient]:
    return get_whatsapp_client()


@router.post("/webhook/whatsapp")
async def whatsapp_webhook(
    request: Request,
    engine: ConversationEngine = Depends(get_conversation_engine),
    dedup: InboundDeduplicator = Depends(get_deduplicator),
    wa_client: Optional[WhatsAppClient] = Depends(get_sender),
) -> Response:
    """Receive incoming WhatsApp message from Twilio.

    Twilio sends application/x-www-form-urlencoded with fields:
      - From: "whatsapp:+5218112345678"
      - To: "whatsapp:+14155238886"
      - Body: message text
      - MessageSid, NumMedia, etc.

    Always returns an empty 200 OK. A message that fails to process is
    logged and dropped without a reply.
    """
    form = await request.form()

    from_raw = str(form.get("From", ""))
    body = str(form.get("Body", ""))
    message_sid = str(form.get("MessageSid", "")) or None

    # Strip "whatsapp:" prefix
    user_phone = from_raw.replace("whatsapp:", "").strip()

    if not user_phone or not body.strip():
        logger.warning("whatsapp_empty_message", from_raw=from_raw)
        return Response(status_code=200)

    logger.info(
        "whatsapp_message_received",
        user_phone=user_phone,
        text_preview=body[:50],
        message_sid=message_sid,
    )

    if await dedup.is_duplicate(message_sid):
        return Response(status_code=200)

    try:
        result = await engine.handle_message(
            phone=user_phone,
            message_text=body,
            provider_message_id=message_sid,
        )
    except Exception:
        logger.exception(
            "handle_message_error",
            user_phone=user_phone,
            message_sid=message_sid,
        )
        return Response(status_code=200)

    if result.response_text:
        if wa_client:
            try:
                await wa_client.send_message(user_phone, result.response_text)
            except Exception as e:
                logger.error(
                    "whatsapp_send_error",
                    error=str(e),
                    user_phone=user_phone,
                    lead_id=str(result.lead_id),
                )
        else:
            logger.warning("whatsapp_client_not_configured", user_phone=user_phone)

    return Response(status_code=200)
