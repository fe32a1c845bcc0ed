"""Remote model classification, gated by reachability, rate limits and budget."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

from quillstack.classification.cache import ClassificationCache
from quillstack.models import BudgetState, ClassificationResult, NoteType

if TYPE_CHECKING:
    from quillstack.network import NetworkProbe
    from quillstack.scripts.llm_client import LLMClient
    from quillstack.stores.cost import CostLedger
    from quillstack.stores.rate_limit import RateLimiter

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Bump whenever the prompt wording changes materially
PROMPT_VERSION = "v3"

MIN_TEXT_LENGTH = 10
CLASSIFY_MAX_TOKENS = 10
DIRECT_MATCH_CONFIDENCE = 0.85
RECOVERED_MATCH_CONFIDENCE = 0.80

CLASSIFICATION_PROMPT = """You classify handwritten notes that were captured with OCR. The text may contain recognition errors.

Reply with exactly one type name from this list and nothing else:
general, todo, meeting, email, contact, reminder, expense, shopping, recipe, event, idea, claudePrompt, journal

Rules:
- Intent decides the type, never format alone. A bulleted list can be a journal, a shopping list, or a todo list depending on what it says.
- todo: actionable tasks the writer intends to do.
- meeting: notes taken during or about a meeting, with attendees, discussion, or decisions.
- email: a message drafted to someone, usually with a greeting or sign-off.
- contact: details about a person, such as a name with phone, email, or company.
- reminder: something to be reminded of at a particular time.
- expense: money spent, a receipt, or amounts paid.
- shopping: items to buy.
- recipe: ingredients and cooking steps.
- event: an appointment or happening at a specific date and time.
- idea: a thought, concept, or possibility to explore later.
- claudePrompt: a feature request, issue, or prompt intended for an AI assistant or software project.
- journal: personal reflection on the writer's day, feelings, or experiences.
- general: anything else, including quotes, book notes, and reference material.

Examples:
Note: "- milk\\n- eggs\\n- bread\\n- coffee"
Type: shopping
Note: "- call the plumber\\n- renew passport\\n- email Jim the contract"
Type: todo
Note: "- felt tired after the run\\n- grateful for a quiet evening\\n- talked to mom"
Type: journal
Note: "Chapter 3 takeaways: habits compound, environment beats willpower"
Type: general
Note: "Standup action items: Ana to fix login bug, Raj to review PR"
Type: todo
Note: "Sync with design team. Attendees: Ana, Raj. Discussed onboarding flow, decided to cut step 3"
Type: meeting
Note: "Hi Sam, thanks for the intro yesterday. Can we meet next week? Best, Lee"
Type: email
Note: "Dentist Tuesday 3pm at Main St clinic"
Type: event
Note: "Lunch with Priya $18.40, parking $6"
Type: expense
Note: "What if the app grouped notes by location automatically?"
Type: idea
Note: "Add dark mode toggle to the settings screen and fix the crash when exporting PDFs"
Type: claudePrompt"""

# Longest names first so "claudeprompt" wins over any shorter overlap at the same offset
_TYPE_NAMES: tuple[tuple[str, NoteType], ...] = tuple(
    sorted(((t.value.lower(), t) for t in NoteType), key=lambda item: -len(item[0]))
)


def parse_type_token(response: str) -> tuple[NoteType, float, str] | None:
    """Map a raw model reply to (type, confidence, reasoning).

    A reply that is exactly a type name scores 0.85; a type name recovered from
    the earliest position in a longer reply scores 0.80.
    """
    token = response.strip().strip("\"'`.,:;!*").strip()
    direct = NoteType.parse(token) if token else None
    if direct is not None:
        return direct, DIRECT_MATCH_CONFIDENCE, f"Remote model returned '{direct.value}'"

    lowered = response.lower()
    best: tuple[int, NoteType] | None = None
    for name, note_type in _TYPE_NAMES:
        index = lowered.find(name)
        if index >= 0 and (best is None or index < best[0]):
            best = (index, note_type)
    if best is None:
        return None
    note_type = best[1]
    return (
        note_type,
        RECOVERED_MATCH_CONFIDENCE,
        f"Recovered '{note_type.value}' from remote model response",
    )


def _require_type_token(response: str) -> tuple[NoteType, float, str]:
    parsed = parse_type_token(response)
    if parsed is None:
        raise ValueError("no known type name in remote classification reply")
    return parsed


class RemoteGate:
    """Shared preconditions and bookkeeping for every remote model call.

    Checks in order: network reachable, rate limiter has room, budget not
    exceeded, credential configured. A call counts against the rate windows
    only once its response has parsed, so failed calls never consume rate budget.
    """

    def __init__(
        self,
        llm: LLMClient,
        rate_limiter: RateLimiter,
        cost_ledger: CostLedger,
        network: NetworkProbe | None = None,
    ) -> None:
        self.llm = llm
        self.rate_limiter = rate_limiter
        self.cost_ledger = cost_ledger
        self.network = network

    def is_open(self) -> bool:
        if self.network is not None and not self.network.is_reachable():
            logger.debug("Remote call skipped: network unreachable")
            return False
        if not self.rate_limiter.can_proceed():
            logger.debug("Remote call skipped: rate limited")
            return False
        status = self.cost_ledger.status()
        if status.state == BudgetState.EXCEEDED:
            logger.info("Remote call skipped: %s", status.alert_message)
            return False
        if not self.llm.has_credential():
            logger.debug("Remote call skipped: no credential configured")
            return False
        return True

    def call(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
        parse: Callable[[str], T],
    ) -> T | None:
        """One request with no retry, returning ``parse(response)`` or None on any failure.

        A rate slot is taken before the request and given back unless the
        response parses. ``parse`` rejects a reply by raising ValueError.
        """
        reservation = self.rate_limiter.try_acquire()
        if reservation is None:
            logger.debug("Remote call skipped: rate limited")
            return None
        try:
            response = self.llm.chat(system_prompt, user_prompt, max_tokens=max_tokens)
        except Exception:
            logger.warning("Remote model call failed", exc_info=True)
            self.rate_limiter.release(reservation)
            return None
        try:
            return parse(response)
        except Exception:
            logger.warning("Remote model response rejected: %r", response[:100], exc_info=True)
            self.rate_limiter.release(reservation)
            return None


class RemoteClassifier:
    """Classifies a note with one small remote call, caching results per session."""

    def __init__(self, gate: RemoteGate, cache: ClassificationCache | None = None) -> None:
        self.gate = gate
        self.cache = cache if cache is not None else ClassificationCache()

    def classify(self, text: str) -> ClassificationResult | None:
        """Never raises; any unavailable precondition or failure yields None."""
        trimmed = text.strip()
        if not self.gate.is_open():
            return None
        if len(trimmed) < MIN_TEXT_LENGTH:
            logger.debug("Remote classification skipped: text too short")
            return None

        cached = self.cache.get(trimmed)
        if cached is not None:
            logger.debug("Classification cache hit")
            return cached

        parsed = self.gate.call(
            CLASSIFICATION_PROMPT,
            f"Note: {trimmed}\nType:",
            max_tokens=CLASSIFY_MAX_TOKENS,
            parse=_require_type_token,
        )
        if parsed is None:
            return None

        note_type, confidence, reasoning = parsed
        result = ClassificationResult.llm(note_type, confidence, reasoning, PROMPT_VERSION)
        self.cache.put(trimmed, result)
        logger.info("Remote classification: %s (%.2f)", note_type.value, confidence)
        return result
