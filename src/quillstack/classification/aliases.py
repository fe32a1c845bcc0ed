"""Free-form type names (marker tokens, model output) mapped to NoteType."""

from quillstack.models import NoteType

TYPE_ALIASES: dict[NoteType, tuple[str, ...]] = {
    NoteType.TODO: ("todo", "task", "tasks", "to-do", "checklist"),
    NoteType.MEETING: ("meeting", "minutes", "notes"),
    NoteType.EMAIL: ("email", "mail"),
    NoteType.CONTACT: ("contact", "person", "phone", "businesscard", "business card"),
    NoteType.REMINDER: ("reminder", "remind", "remindme"),
    NoteType.EXPENSE: ("expense", "receipt", "spent", "paid"),
    NoteType.SHOPPING: ("shopping", "shop", "grocery", "groceries", "list"),
    NoteType.RECIPE: ("recipe", "cook", "bake"),
    NoteType.EVENT: ("event", "appointment", "schedule", "appt"),
    NoteType.IDEA: ("idea", "thought", "note-to-self", "notetoself"),
    NoteType.CLAUDE_PROMPT: ("claude", "claudeprompt", "prompt", "feature", "request", "issue"),
    NoteType.JOURNAL: ("journal", "diary"),
    NoteType.GENERAL: ("general", "note", "code", "snippet", "project"),
}

_ALIAS_LOOKUP: dict[str, NoteType] = {
    alias: note_type for note_type, aliases in TYPE_ALIASES.items() for alias in aliases
}

ALL_ALIASES: frozenset[str] = frozenset(_ALIAS_LOOKUP)


def resolve_alias(name: str) -> NoteType | None:
    """Map a marker token or type name to a NoteType, case-insensitively."""
    key = name.strip().lower()
    return _ALIAS_LOOKUP.get(key) or NoteType.parse(key)
