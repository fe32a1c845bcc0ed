"""Natural-language command phrases ("remind me to ...") mapped to note types."""

import logging
import re

from quillstack.models import NoteType

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")

# Checked in order; the first type with a matching phrase wins.
COMMAND_PHRASES: tuple[tuple[NoteType, tuple[str, ...]], ...] = (
    (
        NoteType.REMINDER,
        (
            "remind me to",
            "remind me about",
            "set a reminder",
            "create a reminder",
            "add a reminder",
            "don't let me forget",
            "dont let me forget",
        ),
    ),
    (
        NoteType.EVENT,
        (
            "add to my calendar",
            "add this to my calendar",
            "put on my calendar",
            "schedule an appointment",
            "book an appointment",
            "create an event",
            "add an event",
        ),
    ),
    (
        NoteType.MEETING,
        (
            "schedule a meeting",
            "set up a meeting",
            "meeting with",
            "meeting notes",
            "call with",
        ),
    ),
    (
        NoteType.TODO,
        (
            "to-do list",
            "todo list",
            "to do list",
            "add a task",
            "add to my tasks",
            "add this to my tasks",
        ),
    ),
    (
        NoteType.SHOPPING,
        (
            "shopping list",
            "grocery list",
            "add to my shopping",
            "need to buy",
            "pick up some",
        ),
    ),
    (
        NoteType.EMAIL,
        (
            "send an email",
            "write an email",
            "draft an email",
            "send a message to",
            "email to",
        ),
    ),
    (
        NoteType.CONTACT,
        (
            "add a contact",
            "add contact",
            "new contact",
            "save this contact",
            "phone number for",
        ),
    ),
    (
        NoteType.EXPENSE,
        (
            "log an expense",
            "record an expense",
            "expense report",
            "i spent",
            "i paid",
        ),
    ),
    (
        NoteType.IDEA,
        (
            "i have an idea",
            "i had an idea",
            "idea for",
            "note to self",
            "what if we",
        ),
    ),
    (
        NoteType.RECIPE,
        (
            "recipe for",
            "how to make",
            "how to cook",
            "ingredients:",
        ),
    ),
    (
        NoteType.JOURNAL,
        (
            "dear diary",
            "journal entry",
            "today i felt",
            "today i feel",
        ),
    ),
)


def normalize_command_text(text: str) -> str:
    """Lowercase, straighten apostrophes, and collapse whitespace runs to one space."""
    lowered = text.lower().replace("’", "'")
    return _WHITESPACE_RE.sub(" ", lowered).strip()


class CommandPhraseDetector:
    """Plain substring matching against curated phrase lists. Stateless."""

    def __init__(
        self, phrases: tuple[tuple[NoteType, tuple[str, ...]], ...] = COMMAND_PHRASES
    ) -> None:
        self.phrases = phrases

    def detect(self, text: str) -> NoteType | None:
        normalized = normalize_command_text(text)
        if not normalized:
            return None
        for note_type, phrases in self.phrases:
            for phrase in phrases:
                if phrase in normalized:
                    logger.debug("Command phrase '%s' -> %s", phrase, note_type.value)
                    return note_type
        return None
