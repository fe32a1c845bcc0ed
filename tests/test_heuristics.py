"""Tests for content-shape heuristics."""

import pytest

from quillstack.classification.heuristics import (
    HeuristicClassifier,
    business_card_score,
    is_business_card,
    is_meeting_note,
    is_todo_note,
)
from quillstack.models import NoteType

BUSINESS_CARD = """John Smith
Senior Engineer
Acme Corp
(555) 123-4567
john@acme.com
www.acme.com"""


@pytest.fixture
def classifier():
    return HeuristicClassifier()


class TestBusinessCardScore:
    def test_full_card_scores_high(self):
        assert business_card_score(BUSINESS_CARD) == 90
        assert is_business_card(BUSINESS_CARD)

    def test_other_marker_disqualifies(self):
        assert business_card_score("#todo#\n" + BUSINESS_CARD) == -100
        assert not is_business_card("#todo#\n" + BUSINESS_CARD)

    def test_long_prose_penalized(self):
        prose = " ".join(["word"] * 80)
        assert business_card_score(prose) < 0

    def test_plain_sentence_is_not_card(self):
        assert not is_business_card("The weather was lovely today")

    def test_bare_domain_ignored_when_only_email(self):
        text = "Jane Doe\njane@example.com"
        # email +20, 2 lines +10, short lines +5, capitalized name +5; no url bonus
        assert business_card_score(text) == 40


class TestPredicates:
    def test_meeting_keywords(self):
        assert is_meeting_note("Agenda for tomorrow: budget review")
        assert is_meeting_note("Action items from the sync")
        assert not is_meeting_note("Buy bread")

    def test_checklist_markers(self):
        assert is_todo_note("[ ] buy milk\n[x] call mom")
        assert is_todo_note("☐ water plants")
        assert not is_todo_note("buy milk")


class TestHeuristicClassifier:
    def test_business_card(self, classifier):
        note_type, confidence, reasoning = classifier.classify(BUSINESS_CARD)
        assert note_type == NoteType.CONTACT
        assert confidence == pytest.approx(0.90)
        assert "score 90" in reasoning

    def test_card_confidence_clamped(self, classifier):
        _, confidence, _ = classifier.classify("Jane Doe\njane@example.com")
        assert confidence == pytest.approx(0.70)

    def test_meeting(self, classifier):
        note_type, confidence, _ = classifier.classify("Agenda for tomorrow: budget review")
        assert note_type == NoteType.MEETING
        assert confidence == pytest.approx(0.65)

    def test_todo(self, classifier):
        note_type, confidence, _ = classifier.classify("[ ] buy milk\n[x] call mom")
        assert note_type == NoteType.TODO
        assert confidence == pytest.approx(0.65)

    def test_no_match(self, classifier):
        assert classifier.classify("The weather was lovely today") is None

    def test_empty(self, classifier):
        assert classifier.classify("") is None
