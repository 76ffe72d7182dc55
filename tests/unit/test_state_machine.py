"""Tests for conversation state machine and name extraction."""

import pytest

from src.conversation.state_machine import (
    TRANSITIONS,
    advance,
    check_transition,
    extract_name_from_text,
    is_terminal,
    mark_quote_drafted,
)
from src.errors import InvalidTransition
from src.schemas.conversation import ConversationState as S
from src.schemas.qualification import QualificationField as F


class TestTransitions:

    def test_table_covers_every_state(self):
        assert set(TRANSITIONS) == set(S)

    def test_first_message_without_name(self):
        assert advance(S.INIT, has_name=False, missing=[F.NAME, F.HEIGHT]) == S.ASK_NAME

    def test_stays_in_ask_name(self):
        assert advance(S.ASK_NAME, has_name=False, missing=[F.NAME]) == S.ASK_NAME

    def test_name_moves_to_tech_qualification(self):
        assert advance(S.ASK_NAME, has_name=True, missing=[F.HEIGHT]) == S.TECH_QUALIFICATION

    def test_complete_first_message_walks_all_hops(self):
        assert advance(S.INIT, has_name=True, missing=[]) == S.READY_FOR_MATCH

    def test_tech_qualification_until_complete(self):
        assert advance(S.TECH_QUALIFICATION, True, [F.CITY]) == S.TECH_QUALIFICATION
        assert advance(S.TECH_QUALIFICATION, True, []) == S.READY_FOR_MATCH

    def test_ready_for_match_stays(self):
        assert advance(S.READY_FOR_MATCH, True, []) == S.READY_FOR_MATCH

    def test_quote_drafted_is_terminal(self):
        assert is_terminal(S.QUOTE_DRAFTED)
        assert advance(S.QUOTE_DRAFTED, True, []) == S.QUOTE_DRAFTED
        assert not is_terminal(S.READY_FOR_MATCH)

    def test_mark_quote_drafted_only_from_ready(self):
        assert mark_quote_drafted(S.READY_FOR_MATCH) == S.QUOTE_DRAFTED
        with pytest.raises(InvalidTransition):
            mark_quote_drafted(S.TECH_QUALIFICATION)
        with pytest.raises(InvalidTransition):
            mark_quote_drafted(S.QUOTE_DRAFTED)

    def test_invalid_transition(self):
        with pytest.raises(InvalidTransition) as exc:
            check_transition(S.INIT, S.READY_FOR_MATCH)
        assert exc.value.current == "INIT"
        assert exc.value.target == "READY_FOR_MATCH"


class TestNameExtraction:

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("soy Sergio", "Sergio"),
            ("Me llamo Ana López", "Ana López"),
            ("mi nombre es Juan Pablo", "Juan Pablo"),
            ("I'm Mike", "Mike"),
            ("my name is John Smith", "John Smith"),
            ("Sergio", "Sergio"),
            ("maría josé", "maría josé"),
        ],
    )
    def test_names(self, text, expected):
        assert extract_name_from_text(text) == expected

    @pytest.mark.parametrize(
        "text",
        [
            "hola",
            "Hola buenas",
            "ok",
            "gracias",
            "14 metros",
            "Sergio!",
            "necesito una plataforma de brazo",
            "a",
            "",
            None,
        ],
    )
    def test_not_names(self, text):
        assert extract_name_from_text(text) is None

    def test_long_name_rejected(self):
        assert extract_name_from_text("soy " + "a" * 35) is None
