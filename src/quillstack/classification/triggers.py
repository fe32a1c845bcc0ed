"""Explicit ``#type#`` marker detection, tolerant of common OCR misreads.

Markers only ever appear near the start of a note, so detection looks at the
first 100 characters. Three passes run in order:

1. exact: the canonical marker forms
2. fuzzy: pre-enumerated OCR-confusion variants of each marker
3. loose: a keyword (or a single-substitution variant of it) within the ten
   characters after the first ``#``

All three scan the same normalized prefix, so normalizing twice changes nothing.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from quillstack.models import NoteType

logger = logging.getLogger(__name__)

PREFIX_LENGTH = 100
LOOSE_WINDOW = 10

# (original, misread) pairs applied to every occurrence in a keyword
OCR_SUBSTITUTIONS: tuple[tuple[str, str], ...] = (
    ("m", "rn"),
    ("m", "nn"),
    ("l", "1"),
    ("l", "i"),
    ("o", "0"),
    ("g", "q"),
    ("a", "o"),
    ("i", "l"),
    ("i", "1"),
)


@dataclass(frozen=True)
class TriggerPattern:
    """Every accepted spelling of one type's marker."""

    canonical_type: NoteType
    exact_forms: tuple[str, ...]
    fuzzy_forms: tuple[str, ...]
    keywords: tuple[str, ...]


# Listed in exact/fuzzy priority order. Assistant-prompt markers come first
# because several of their fuzzy forms overlap with generic task markers.
TRIGGER_PATTERNS: tuple[TriggerPattern, ...] = (
    TriggerPattern(
        NoteType.CLAUDE_PROMPT,
        exact_forms=("#claude#", "#feature#", "#prompt#", "#request#", "#issue#"),
        fuzzy_forms=(
            "#claude#", "#c1aude#", "#ciaude#", "#claudee#", "#claube#",
            "#feature#", "#featur#", "#featuer#", "#featuree#", "#f3ature#",
            "#prompt#", "#prompl#", "#prornpt#", "#promptt#",
            "#request#", "#requesl#", "#requesi#", "#requestt#",
            "#issue#", "#issu3#", "#issuse#", "#issuee#",
            "#claude", "claude#", "#feature", "feature#", "#prompt", "prompt#",
        ),
        keywords=("claude", "feature", "prompt", "request", "issue"),
    ),
    TriggerPattern(
        NoteType.REMINDER,
        exact_forms=("#reminder#", "#remind#", "#remindme#"),
        fuzzy_forms=(
            "#reminder#", "#reminde#", "#rerinder#", "#rerninder#",
            "#remind#", "#rernind#", "#rernlnd#", "#remindme#", "#remindm3#",
            "#reminder", "reminder#", "#remind", "remind#",
        ),
        keywords=("reminder", "remind", "remindme"),
    ),
    TriggerPattern(
        NoteType.CONTACT,
        exact_forms=("#contact#", "#person#", "#phone#"),
        fuzzy_forms=(
            "#contact#", "#contacl#", "#contaci#", "#coniact#",
            "#person#", "#pers0n#", "#persun#", "#phone#", "#phon3#", "#fone#",
            "#contact", "contact#", "#person", "person#",
        ),
        keywords=("contact", "person", "phone"),
    ),
    TriggerPattern(
        NoteType.EXPENSE,
        exact_forms=("#expense#", "#receipt#", "#spent#", "#paid#"),
        fuzzy_forms=(
            "#expense#", "#expens3#", "#expanse#", "#expensee#",
            "#receipt#", "#recipt#", "#reciept#", "#recelpt#",
            "#spent#", "#spentt#", "#sp3nt#", "#paid#", "#pald#", "#pa1d#",
            "#expense", "expense#", "#receipt", "receipt#",
        ),
        keywords=("expense", "receipt", "spent", "paid"),
    ),
    TriggerPattern(
        NoteType.SHOPPING,
        exact_forms=("#shopping#", "#shop#", "#grocery#", "#groceries#", "#list#"),
        fuzzy_forms=(
            "#shopping#", "#shoppinq#", "#shopplng#", "#shoppingg#", "#shop#", "#shopp#",
            "#grocery#", "#groceries#", "#grocer1es#", "#qrocery#", "#list#", "#listt#",
            "#shopping", "shopping#", "#grocery", "grocery#",
        ),
        keywords=("shopping", "shop", "grocery", "groceries"),
    ),
    TriggerPattern(
        NoteType.RECIPE,
        exact_forms=("#recipe#", "#cook#", "#bake#"),
        fuzzy_forms=(
            "#recipe#", "#recipee#", "#recip3#", "#reclpe#",
            "#cook#", "#cookk#", "#c00k#", "#bake#", "#bakee#", "#bak3#",
            "#recipe", "recipe#", "#cook", "cook#",
        ),
        keywords=("recipe", "cook", "bake"),
    ),
    TriggerPattern(
        NoteType.EVENT,
        exact_forms=("#event#", "#appointment#", "#schedule#", "#appt#"),
        fuzzy_forms=(
            "#event#", "#eventt#", "#evnt#", "#3vent#",
            "#appointment#", "#appointrnent#", "#apointment#", "#appointmentt#",
            "#schedule#", "#schedu1e#", "#schedulle#", "#appt#", "#apptt#",
            "#event", "event#", "#appointment", "appointment#",
        ),
        keywords=("event", "appointment", "schedule", "appt"),
    ),
    TriggerPattern(
        NoteType.IDEA,
        exact_forms=("#idea#", "#thought#", "#note-to-self#", "#notetoself#"),
        fuzzy_forms=(
            "#idea#", "#ideaa#", "#1dea#", "#ldea#",
            "#thought#", "#thoughtt#", "#thouqht#", "#thoughl#",
            "#note-to-self#", "#notetoself#", "#note2self#",
            "#idea", "idea#", "#thought", "thought#",
        ),
        keywords=("idea", "thought", "notetoself"),
    ),
    TriggerPattern(
        NoteType.TODO,
        exact_forms=("#todo#", "#to-do#", "#tasks#", "#task#"),
        fuzzy_forms=(
            "#todo#", "#tod0#", "#todoo#", "#task#", "#tasks#", "#taskk#",
            "#tash#", "#tashs#", "#to-do#", "#todo", "todo#", "#todolt", "#todott",
        ),
        keywords=("todo", "task", "tasks"),
    ),
    TriggerPattern(
        NoteType.EMAIL,
        exact_forms=("#email#", "#mail#"),
        fuzzy_forms=(
            "#email#", "#emaill#", "#emailtt", "#emailt#", "#ernail#", "#emai1#",
            "#mail#", "#maill#", "#mai1#", "#email", "email#",
        ),
        keywords=("email", "mail", "emai", "ernail"),
    ),
    TriggerPattern(
        NoteType.MEETING,
        exact_forms=("#meeting#", "#notes#", "#minutes#"),
        fuzzy_forms=(
            "#meeting#", "#meetinq#", "#meetimg#", "#rneetinq#",
            "#notes#", "#notess#", "#note5#", "#minutes#", "#rninutes#", "#minutess#",
            "#meeting", "meeting#",
        ),
        keywords=("meeting", "notes", "minutes"),
    ),
    TriggerPattern(
        NoteType.JOURNAL,
        exact_forms=("#journal#", "#diary#"),
        fuzzy_forms=(
            "#journal#", "#journa1#", "#jornal#", "#journall#", "#jouranl#",
            "#diary#", "#dlary#", "#diarv#", "#d1ary#",
            "#journal", "journal#", "#diary", "diary#",
        ),
        keywords=("journal", "diary"),
    ),
)

_PATTERNS_BY_TYPE: dict[NoteType, TriggerPattern] = {p.canonical_type: p for p in TRIGGER_PATTERNS}

# Email is checked before todo in the loose pass
LOOSE_ORDER: tuple[NoteType, ...] = (
    NoteType.CLAUDE_PROMPT,
    NoteType.REMINDER,
    NoteType.CONTACT,
    NoteType.EXPENSE,
    NoteType.SHOPPING,
    NoteType.RECIPE,
    NoteType.EVENT,
    NoteType.IDEA,
    NoteType.EMAIL,
    NoteType.TODO,
    NoteType.MEETING,
    NoteType.JOURNAL,
)


def ocr_variants(word: str) -> list[str]:
    """Single-rule misreads of ``word``; each rule replaces every occurrence."""
    return [
        word.replace(original, misread)
        for original, misread in OCR_SUBSTITUTIONS
        if original in word
    ]


def _build_loose_table() -> tuple[tuple[NoteType, tuple[str, ...]], ...]:
    table = []
    for note_type in LOOSE_ORDER:
        needles: list[str] = []
        for keyword in _PATTERNS_BY_TYPE[note_type].keywords:
            needles.append(keyword)
            needles.extend(ocr_variants(keyword))
        table.append((note_type, tuple(dict.fromkeys(needles))))
    return tuple(table)


LOOSE_TABLE = _build_loose_table()

ALL_EXACT_FORMS: tuple[str, ...] = tuple(
    form for pattern in TRIGGER_PATTERNS for form in pattern.exact_forms
)


def normalize_marker_text(text: str) -> str:
    """Case-fold, keep the first 100 characters, and undo separator misreads."""
    prefix = text.lower()[:PREFIX_LENGTH].strip()
    return prefix.replace(" ", "").replace(".", "#").replace(",", "")


class TriggerDetector:
    """Detects an explicit type marker. Stateless; never raises."""

    def detect(self, text: str) -> NoteType | None:
        prefix = normalize_marker_text(text)
        if not prefix:
            return None
        note_type = (
            self.detect_exact(prefix) or self.detect_fuzzy(prefix) or self.detect_loose(prefix)
        )
        if note_type:
            logger.debug("Trigger marker detected: %s", note_type.value)
        return note_type

    def detect_exact(self, prefix: str) -> NoteType | None:
        for pattern in TRIGGER_PATTERNS:
            if any(form in prefix for form in pattern.exact_forms):
                return pattern.canonical_type
        return None

    def detect_fuzzy(self, prefix: str) -> NoteType | None:
        for pattern in TRIGGER_PATTERNS:
            if any(form in prefix for form in pattern.fuzzy_forms):
                return pattern.canonical_type
        return None

    def detect_loose(self, prefix: str) -> NoteType | None:
        """Keyword within the ten characters that follow the first ``#``."""
        hash_index = prefix.find("#")
        if hash_index < 0:
            return None
        window = prefix[hash_index + 1 : hash_index + 1 + LOOSE_WINDOW]
        for note_type, needles in LOOSE_TABLE:
            if any(needle in window for needle in needles):
                return note_type
        return None


def extract_trigger_tag(text: str) -> tuple[str, str] | None:
    """Find the first exact marker in ``text``.

    Returns the marker as written (original casing) and the text with that one
    occurrence removed and trimmed, or None if no exact marker occurs.
    """
    for form in ALL_EXACT_FORMS:
        match = re.search(re.escape(form), text, flags=re.IGNORECASE)
        if match:
            cleaned = (text[: match.start()] + text[match.end() :]).strip()
            return match.group(0), cleaned
    return None


def strip_trigger_tags(text: str, note_type: NoteType) -> str:
    """Remove every exact marker of ``note_type`` and tidy the leftover blank lines."""
    pattern = _PATTERNS_BY_TYPE.get(note_type)
    if pattern is None:
        return text
    cleaned = text
    for form in pattern.exact_forms:
        cleaned = re.sub(re.escape(form), "", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r"\n{3,}", "\n\n", cleaned)
    return cleaned.strip()
