"""Tests for explicit marker detection and trigger tag utilities."""

import pytest

from quillstack.classification.triggers import (
    LOOSE_TABLE,
    TRIGGER_PATTERNS,
    TriggerDetector,
    extract_trigger_tag,
    normalize_marker_text,
    ocr_variants,
    strip_trigger_tags,
)
from quillstack.models import NoteType


@pytest.fixture
def detector():
    return TriggerDetector()


class TestExactMarkers:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("#todo# Buy milk", NoteType.TODO),
            ("#TODO# Buy milk", NoteType.TODO),
            ("#to-do# Buy milk", NoteType.TODO),
            ("#email# Hi John", NoteType.EMAIL),
            ("#notes# Standup", NoteType.MEETING),
            ("  #meeting#\nStandup", NoteType.MEETING),
            ("#contact# Jane Doe", NoteType.CONTACT),
            ("#reminder# call back", NoteType.REMINDER),
            ("#expense# lunch", NoteType.EXPENSE),
            ("#shopping# milk", NoteType.SHOPPING),
            ("#recipe# cake", NoteType.RECIPE),
            ("#event# party", NoteType.EVENT),
            ("#idea# app", NoteType.IDEA),
            ("#claude# add tests", NoteType.CLAUDE_PROMPT),
            ("#journal# today", NoteType.JOURNAL),
            ("#diary# today", NoteType.JOURNAL),
        ],
    )
    def test_detects_type(self, detector, text, expected):
        assert detector.detect(text) == expected

    def test_assistant_marker_wins_over_task_marker(self, detector):
        assert detector.detect("#claude# #todo# refactor the parser") == NoteType.CLAUDE_PROMPT

    def test_marker_after_first_100_chars_ignored(self, detector):
        assert detector.detect("x" * 120 + " #todo# later") is None

    def test_plain_text_has_no_marker(self, detector):
        assert detector.detect("Buy milk and eggs") is None

    def test_empty_text(self, detector):
        assert detector.detect("") is None
        assert detector.detect("   \n ") is None


class TestFuzzyMarkers:
    def test_zero_for_o(self, detector):
        assert detector.detect("#tod0# buy milk") == NoteType.TODO

    def test_rn_for_m(self, detector):
        assert detector.detect("#rneetinq# weekly sync") == NoteType.MEETING

    def test_spaces_inside_marker(self, detector):
        assert detector.detect("# email # Hi John") == NoteType.EMAIL

    def test_period_read_as_delimiter(self, detector):
        assert detector.detect("#email. Hi John") == NoteType.EMAIL

    def test_missing_closing_delimiter(self, detector):
        assert detector.detect("#reminder call the bank") == NoteType.REMINDER


class TestLooseMarkers:
    def test_keyword_within_window(self, detector):
        assert detector.detect("#my recipes") == NoteType.RECIPE

    def test_ocr_variant_of_keyword(self, detector):
        assert detector.detect("#my rnail stuff") == NoteType.EMAIL

    def test_keyword_too_far_from_delimiter(self, detector):
        assert detector.detect_loose("#abcdefghijkrecipe") is None

    def test_no_delimiter(self, detector):
        assert detector.detect_loose("recipe") is None


class TestNormalization:
    def test_normalize_strips_noise(self):
        assert normalize_marker_text("  # Email , Hi. ") == "#emailhi#"

    def test_normalize_truncates(self):
        assert len(normalize_marker_text("a" * 500)) == 100

    def test_normalize_is_idempotent(self):
        text = "  #Rneetinq. Weekly, sync with Ana  "
        once = normalize_marker_text(text)
        assert normalize_marker_text(once) == once

    @pytest.mark.parametrize(
        "text",
        [
            "#todo# Buy milk",
            "# email. Hi",
            "#tod0# x",
            "#my rnail stuff",
            "Plain text with no marker",
            "#rneetinq# sync",
            "#my recipes",
        ],
    )
    def test_detect_same_on_normalized_input(self, detector, text):
        assert detector.detect(normalize_marker_text(text)) == detector.detect(text)


class TestPatternTables:
    def test_every_type_but_general_has_pattern(self):
        covered = {p.canonical_type for p in TRIGGER_PATTERNS}
        assert covered == set(NoteType) - {NoteType.GENERAL}

    def test_loose_table_precomputed_with_variants(self):
        needles = dict(LOOSE_TABLE)[NoteType.EMAIL]
        assert "email" in needles
        assert "rnail" in needles

    def test_loose_order_checks_email_before_todo(self):
        order = [note_type for note_type, _ in LOOSE_TABLE]
        assert order.index(NoteType.EMAIL) < order.index(NoteType.TODO)

    def test_ocr_variants(self):
        variants = ocr_variants("mail")
        assert "rnail" in variants
        assert "nnail" in variants
        assert "mai1" in variants
        assert "mail" not in variants

    def test_ocr_variants_replace_every_occurrence(self):
        assert "c00k" in ocr_variants("cook")


class TestExtractTriggerTag:
    def test_basic(self):
        assert extract_trigger_tag("#todo# Buy groceries") == ("#todo#", "Buy groceries")

    def test_preserves_case(self):
        assert extract_trigger_tag("#TODO# Buy groceries") == ("#TODO#", "Buy groceries")

    def test_with_newlines(self):
        result = extract_trigger_tag("#email#\nDear John,\nHow are you?")
        assert result == ("#email#", "Dear John,\nHow are you?")

    def test_no_match(self):
        assert extract_trigger_tag("Just regular text") is None

    def test_unknown_marker(self):
        assert extract_trigger_tag("#unknown# Some content") is None


class TestStripTriggerTags:
    def test_removes_all_forms_for_type(self):
        cleaned = strip_trigger_tags("#todo# Task 1\n#task# Task 2\n#tasks# Task 3", NoteType.TODO)
        assert "#todo#" not in cleaned
        assert "#task#" not in cleaned
        assert "#tasks#" not in cleaned
        for item in ("Task 1", "Task 2", "Task 3"):
            assert item in cleaned

    def test_case_insensitive(self):
        cleaned = strip_trigger_tags("#TODO# Task 1\n#Todo# Task 2", NoteType.TODO)
        assert "#todo#" not in cleaned.lower()

    def test_leaves_other_types_alone(self):
        cleaned = strip_trigger_tags("#todo# Task\n#email# Hi", NoteType.TODO)
        assert "#email#" in cleaned

    def test_collapses_blank_lines(self):
        assert strip_trigger_tags("A\n#todo#\n\n\nB", NoteType.TODO) == "A\n\nB"

    def test_general_unchanged(self):
        assert strip_trigger_tags("#todo# x", NoteType.GENERAL) == "#todo# x"
