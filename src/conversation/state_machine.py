"""Conversation state machine — gates qualification, quoting and duplicates."""

from __future__ import annotations

import re
from typing import Optional, Sequence

from src.errors import InvalidTransition
from src.schemas.conversation import ConversationState
from src.schemas.qualification import QualificationField

S = ConversationState

TRANSITIONS: dict[ConversationState, frozenset[ConversationState]] = {
    S.INIT: frozenset({S.ASK_NAME}),
    S.ASK_NAME: frozenset({S.ASK_NAME, S.TECH_QUALIFICATION}),
    S.TECH_QUALIFICATION: frozenset({S.TECH_QUALIFICATION, S.READY_FOR_MATCH}),
    S.READY_FOR_MATCH: frozenset({S.READY_FOR_MATCH, S.QUOTE_DRAFTED}),
    S.QUOTE_DRAFTED: frozenset({S.QUOTE_DRAFTED}),
}

TERMINAL_STATES = frozenset({S.QUOTE_DRAFTED})

NAME_STOPLIST = frozenset(
    {
        "hola", "buenas", "buenos", "buen", "ok", "okay", "si", "sí", "no",
        "gracias", "jalo", "jalara", "test", "prueba", "hello", "hi", "hey",
        "yes", "thanks", "info", "informes", "cotizacion", "cotización",
        "precio", "renta",
    }
)

_EXPLICIT_NAME_RE = re.compile(
    r"^(?:soy|me llamo|mi nombre es|i am|i'm|my name is)\s+(.{2,40})$",
    re.IGNORECASE,
)
_NON_NAME_CHARS_RE = re.compile(r"[0-9@#%$^&*()_=+{}\[\]|\\:;\"'<>,.?/!¿¡]")
_SANITIZE_RE = re.compile(r"[^\w\s'.\-]|[\d_]", re.UNICODE)


def _sanitize_name(name: str) -> Optional[str]:
    cleaned = _SANITIZE_RE.sub("", name or "").strip()
    cleaned = re.sub(r"\s+", " ", cleaned)
    if len(cleaned) < 2 or len(cleaned) > 30:
        return None
    return cleaned


def extract_name_from_text(text: Optional[str]) -> Optional[str]:
    """Extract a name from "soy X" / "my name is X", or a bare 1–2 word reply."""
    if not text:
        return None
    t = text.strip()

    m = _EXPLICIT_NAME_RE.match(t)
    if m:
        return _sanitize_name(m.group(1))

    words = t.split()
    if 1 <= len(words) <= 2:
        if _NON_NAME_CHARS_RE.search(t):
            return None
        if words[0].lower() in NAME_STOPLIST:
            return None
        return _sanitize_name(" ".join(words))

    return None


def _next_hop(
    current: ConversationState,
    has_name: bool,
    missing: Sequence[QualificationField],
) -> ConversationState:
    if current == S.INIT:
        return S.ASK_NAME
    if current == S.ASK_NAME:
        return S.TECH_QUALIFICATION if has_name else S.ASK_NAME
    if current == S.TECH_QUALIFICATION:
        return S.TECH_QUALIFICATION if missing else S.READY_FOR_MATCH
    return current


def check_transition(current: ConversationState, target: ConversationState) -> None:
    if target not in TRANSITIONS[current]:
        raise InvalidTransition(current.value, target.value)


def advance(
    current: ConversationState,
    has_name: bool,
    missing: Sequence[QualificationField],
) -> ConversationState:
    """Walk guarded single hops until the state stops changing.

    ``missing`` is the resolver's ordered list of unmet fields. A message that
    already carries a name and every field moves from INIT to READY_FOR_MATCH
    in one turn, hop by hop. QUOTE_DRAFTED only comes from
    :func:`mark_quote_drafted`.
    """
    state = current
    while True:
        target = _next_hop(state, has_name, missing)
        check_transition(state, target)
        if target == state:
            return state
        state = target


def mark_quote_drafted(current: ConversationState) -> ConversationState:
    if current != S.READY_FOR_MATCH:
        raise InvalidTransition(current.value, S.QUOTE_DRAFTED.value)
    return S.QUOTE_DRAFTED


def is_terminal(state: ConversationState) -> bool:
    return state in TERMINAL_STATES
