"""LLM field extractor — best-effort structured guess from free text."""

from __future__ import annotations

import json
from typing import Any, Optional

import anthropic
import structlog
from anthropic import AsyncAnthropic
from pydantic import ValidationError

from src.config import settings
from src.errors import EnrichmentFailure
from src.llm.client import get_llm_client
from src.llm.prompts.extractor_prompt import EXTRACTOR_PROMPT
from src.schemas.extraction import ExtractionResult

logger = structlog.get_logger()


def strip_markdown_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        text = text.rsplit("```", 1)[0].strip()
    return text


def parse_extraction(text: str) -> ExtractionResult:
    """Parse raw model output into an ExtractionResult.

    Raises EnrichmentFailure when the text is not a JSON object.
    """
    try:
        payload = json.loads(strip_markdown_fence(text))
    except json.JSONDecodeError as e:
        raise EnrichmentFailure(f"invalid JSON from extractor: {e}") from e
    if not isinstance(payload, dict):
        raise EnrichmentFailure("extractor output is not a JSON object")
    try:
        return ExtractionResult.model_validate(payload)
    except ValidationError as e:
        raise EnrichmentFailure(f"extractor output failed validation: {e}") from e


async def _call_extractor(
    client: AsyncAnthropic, text: str, known: dict[str, Any]
) -> ExtractionResult:
    prompt = EXTRACTOR_PROMPT.format(
        company_name=settings.company_name,
        known=json.dumps(known, ensure_ascii=False, default=str),
        user_message=text,
    )
    try:
        response = await client.messages.create(
            model=settings.llm_model,
            max_tokens=settings.llm_max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
    except anthropic.APIError as e:
        raise EnrichmentFailure(f"extractor request failed: {e}") from e

    if not response.content or not hasattr(response.content[0], "text"):
        raise EnrichmentFailure("extractor returned no text block")

    result = parse_extraction(response.content[0].text)
    logger.info(
        "lead_fields_extracted",
        confidence=result.confidence,
        missing=result.missing_fields,
        tokens_in=response.usage.input_tokens,
        tokens_out=response.usage.output_tokens,
    )
    return result


async def extract_lead_fields(
    text: str,
    known: Optional[dict[str, Any]] = None,
    client: Optional[AsyncAnthropic] = None,
) -> Optional[ExtractionResult]:
    """Extract qualification fields from one inbound message.

    Returns None on any failure; the turn then continues with no new fields.
    """
    if not text or not text.strip():
        return None
    if client is None:
        if not settings.anthropic_api_key:
            logger.debug("extractor_disabled")
            return None
        client = get_llm_client()

    try:
        return await _call_extractor(client, text, known or {})
    except EnrichmentFailure as e:
        logger.warning("extractor_failed", error=str(e))
        return None
    except Exception as e:
        logger.error("extractor_error", error=str(e), error_type=type(e).__name__)
        return None
