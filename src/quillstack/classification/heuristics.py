"""Content-shape heuristics: business cards, meeting notes, checklists."""

from __future__ import annotations

import logging
import re

from quillstack.classification.triggers import TRIGGER_PATTERNS
from quillstack.models import NoteType

logger = logging.getLogger(__name__)

BUSINESS_CARD_THRESHOLD = 40
MEETING_CONFIDENCE = 0.65
TODO_CONFIDENCE = 0.65

_PHONE_RE = re.compile(r"\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")
_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
_URL_RES = (
    re.compile(r"https?://\S+", re.IGNORECASE),
    re.compile(r"www\.[A-Za-z0-9.-]+\.[A-Za-z]{2,}", re.IGNORECASE),
    re.compile(r"[A-Za-z0-9-]+\.(com|org|net|io|co)\b", re.IGNORECASE),
)
_ADDRESS_RE = re.compile(r"[A-Za-z\s]+,\s*[A-Z]{2}\s*\d{5}")

# Markers of every non-contact type; any of them rules out a business card
_OTHER_TRIGGERS = tuple(
    form
    for pattern in TRIGGER_PATTERNS
    if pattern.canonical_type != NoteType.CONTACT
    for form in pattern.exact_forms
)

COMPANY_INDICATORS = (
    "inc", "llc", "ltd", "corp", "corporation", "company", "co.", "group", "holdings",
    "solutions", "services", "consulting", "partners", "technologies", "tech",
    "systems", "enterprises",
)

TITLE_INDICATORS = (
    "ceo", "cto", "cfo", "president", "director", "manager", "engineer", "designer",
    "developer", "consultant", "analyst", "specialist", "coordinator", "founder",
    "partner", "owner", "vp", "vice president",
)

MEETING_INDICATORS = (
    "meeting",
    "call with",
    "agenda",
    "attendees:",
    "discussion:",
    "action items",
    "minutes",
    "conference",
)

TODO_INDICATORS = ("[ ]", "[x]", "☐", "☑", "☒", "checklist")


def business_card_score(text: str) -> int:
    """Raw additive score; 40 or more reads as a business card."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    lowered = text.lower()

    if any(trigger in lowered for trigger in _OTHER_TRIGGERS):
        return -100

    score = 0
    if len(lines) > 15:
        score -= 20

    words = text.split(" ")
    if len(words) > 50 and len(words) / max(len(lines), 1) > 10:
        score -= 50

    if _PHONE_RE.search(text):
        score += 20
    if _EMAIL_RE.search(text):
        score += 20
    for url_re in _URL_RES:
        if url_re.search(text):
            # Bare domains only count when they are not part of an email address
            if "@" not in text or "www." in text or "http" in text:
                score += 15
                break
    if _ADDRESS_RE.search(text):
        score += 15
    if 2 <= len(lines) <= 10:
        score += 10
    if any(indicator in lowered for indicator in COMPANY_INDICATORS):
        score += 10

    total_chars = sum(len(line) for line in lines)
    if total_chars // max(len(lines), 1) < 40:
        score += 5

    if any(indicator in lowered for indicator in TITLE_INDICATORS):
        score += 5

    if lines:
        first_words = lines[0].split()
        if 2 <= len(first_words) <= 4 and all(w[0].isupper() for w in first_words):
            score += 5

    return score


def is_business_card(text: str) -> bool:
    return business_card_score(text) >= BUSINESS_CARD_THRESHOLD


def is_meeting_note(text: str) -> bool:
    lowered = text.lower()
    return any(indicator in lowered for indicator in MEETING_INDICATORS)


def is_todo_note(text: str) -> bool:
    lowered = text.lower()
    return any(indicator in lowered for indicator in TODO_INDICATORS)


class HeuristicClassifier:
    """Business card, then meeting keywords, then checklist markers. First hit wins."""

    def classify(self, text: str) -> tuple[NoteType, float, str] | None:
        """Return (type, confidence, reasoning), or None if no predicate fires."""
        if not text.strip():
            return None

        score = business_card_score(text)
        if score >= BUSINESS_CARD_THRESHOLD:
            confidence = min(max(score / 100, 0.70), 0.95)
            logger.debug("Business card heuristic fired (score %d)", score)
            return NoteType.CONTACT, confidence, f"Business card pattern detected (score {score})"

        if is_meeting_note(text):
            return NoteType.MEETING, MEETING_CONFIDENCE, "Meeting keywords detected"

        if is_todo_note(text):
            return NoteType.TODO, TODO_CONFIDENCE, "Checklist markers detected"

        return None
