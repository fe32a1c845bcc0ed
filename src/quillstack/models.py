"""Pydantic models for the QuillStack classification engine and API."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class NoteType(StrEnum):
    """Closed set of note types. Every pattern table and the prompt cover all of them."""

    GENERAL = "general"
    TODO = "todo"
    MEETING = "meeting"
    EMAIL = "email"
    CONTACT = "contact"
    REMINDER = "reminder"
    EXPENSE = "expense"
    SHOPPING = "shopping"
    RECIPE = "recipe"
    EVENT = "event"
    IDEA = "idea"
    CLAUDE_PROMPT = "claudePrompt"
    JOURNAL = "journal"

    @classmethod
    def parse(cls, value: str) -> NoteType | None:
        """Case-insensitive lookup by value; None if unknown."""
        wanted = value.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        return None


class ClassificationMethod(StrEnum):
    """How a classification was produced."""

    EXPLICIT = "explicit"
    LLM = "llm"
    VOICE_COMMAND = "voiceCommand"
    HEURISTIC = "heuristic"
    MANUAL = "manual"
    DEFAULT = "default"


class ClassificationResult(BaseModel):
    """Outcome of classifying one note. Immutable once produced."""

    model_config = ConfigDict(frozen=True)

    type: NoteType
    confidence: float = Field(ge=0.0, le=1.0)
    method: ClassificationMethod
    reasoning: str = ""
    prompt_version: str | None = None

    @classmethod
    def explicit(cls, note_type: NoteType) -> ClassificationResult:
        return cls(
            type=note_type,
            confidence=1.0,
            method=ClassificationMethod.EXPLICIT,
            reasoning="Explicit type marker detected",
        )

    @classmethod
    def llm(
        cls, note_type: NoteType, confidence: float, reasoning: str, prompt_version: str
    ) -> ClassificationResult:
        return cls(
            type=note_type,
            confidence=confidence,
            method=ClassificationMethod.LLM,
            reasoning=reasoning,
            prompt_version=prompt_version,
        )

    @classmethod
    def voice_command(cls, note_type: NoteType) -> ClassificationResult:
        return cls(
            type=note_type,
            confidence=0.80,
            method=ClassificationMethod.VOICE_COMMAND,
            reasoning="Command phrase detected",
        )

    @classmethod
    def heuristic(
        cls, note_type: NoteType, confidence: float, reasoning: str
    ) -> ClassificationResult:
        return cls(
            type=note_type,
            confidence=confidence,
            method=ClassificationMethod.HEURISTIC,
            reasoning=reasoning,
        )

    @classmethod
    def manual(cls, note_type: NoteType) -> ClassificationResult:
        return cls(
            type=note_type,
            confidence=1.0,
            method=ClassificationMethod.MANUAL,
            reasoning="Manually corrected by user",
        )

    @classmethod
    def default(cls, confidence: float = 0.5) -> ClassificationResult:
        return cls(
            type=NoteType.GENERAL,
            confidence=confidence,
            method=ClassificationMethod.DEFAULT,
            reasoning="Default classification",
        )


class ClassificationSettings(BaseModel):
    """Caller preferences consulted by the orchestrator and section splitter."""

    remote_classification_enabled: bool = True
    credential_configured: bool = False
    always_ask_for_classification: bool = False
    confidence_threshold: float = Field(default=0.7, ge=0.0, le=1.0)


class DetectionMethod(StrEnum):
    """How a section split was decided."""

    EXPLICIT = "explicit"
    LLM = "llm"
    NONE = "none"


class Section(BaseModel):
    """One logically distinct note recovered from an OCR text blob."""

    content: str
    suggested_type: NoteType
    suggested_tags: list[str] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0)
    span: tuple[int, int]  # [start, end) offsets into the original text
    should_auto_split: bool = False


class SectionDetectionResult(BaseModel):
    """Ordered, non-overlapping sections plus the shared auto-split decision."""

    sections: list[Section]
    should_auto_split: bool
    method: DetectionMethod


# ---------------------------------------------------------------------------
# Budget / usage
# ---------------------------------------------------------------------------


class BudgetPeriod(StrEnum):
    DAILY = "daily"
    MONTHLY = "monthly"
    LIFETIME = "lifetime"


class BudgetState(StrEnum):
    WITHIN_BUDGET = "within_budget"
    APPROACHING = "approaching"
    EXCEEDED = "exceeded"


class BudgetStatus(BaseModel):
    """Budget check outcome. `period`, `current` and `limit` are set unless within budget."""

    model_config = ConfigDict(frozen=True)

    state: BudgetState
    period: BudgetPeriod | None = None
    current: float = 0.0
    limit: float = 0.0

    @classmethod
    def within_budget(cls) -> BudgetStatus:
        return cls(state=BudgetState.WITHIN_BUDGET)

    @classmethod
    def approaching(cls, period: BudgetPeriod, current: float, limit: float) -> BudgetStatus:
        return cls(state=BudgetState.APPROACHING, period=period, current=current, limit=limit)

    @classmethod
    def exceeded(cls, period: BudgetPeriod, current: float, limit: float) -> BudgetStatus:
        return cls(state=BudgetState.EXCEEDED, period=period, current=current, limit=limit)

    @property
    def should_alert(self) -> bool:
        return self.state != BudgetState.WITHIN_BUDGET

    @property
    def alert_message(self) -> str | None:
        if self.state == BudgetState.WITHIN_BUDGET or self.period is None:
            return None
        if self.state == BudgetState.APPROACHING:
            percentage = int((self.current / self.limit) * 100) if self.limit else 0
            return (
                f"Approaching {self.period.value} budget: "
                f"${self.current:.2f} of ${self.limit:.2f} ({percentage}%)"
            )
        return (
            f"{self.period.value.capitalize()} budget exceeded: "
            f"${self.current:.2f} of ${self.limit:.2f}"
        )


class HorizonUsage(BaseModel):
    """Token and call tallies for one accounting horizon."""

    input_tokens: int = 0
    output_tokens: int = 0
    calls: int = 0
    cost_usd: float = 0.0
    budget_usd: float | None = None


class CostUsage(BaseModel):
    """Current usage across lifetime, daily and monthly horizons."""

    lifetime: HorizonUsage
    daily: HorizonUsage
    monthly: HorizonUsage
    alert_threshold: float

    @property
    def total_tokens(self) -> int:
        return self.lifetime.input_tokens + self.lifetime.output_tokens

    @property
    def daily_budget_usage(self) -> float:
        if not self.daily.budget_usd:
            return 0.0
        return self.daily.cost_usd / self.daily.budget_usd

    @property
    def monthly_budget_usage(self) -> float:
        if not self.monthly.budget_usd:
            return 0.0
        return self.monthly.cost_usd / self.monthly.budget_usd

    @property
    def average_cost_per_call(self) -> float:
        if self.lifetime.calls == 0:
            return 0.0
        return self.lifetime.cost_usd / self.lifetime.calls


class RateWindowStats(BaseModel):
    """Snapshot of one fixed rate window."""

    window_seconds: int
    limit: int
    count: int
    window_start: float


# ---------------------------------------------------------------------------
# API request / response bodies
# ---------------------------------------------------------------------------


class ClassifyRequest(BaseModel):
    """Request body for classification and section detection."""

    text: str


class ClassificationResponse(BaseModel):
    """Response body for the /classify endpoint."""

    result: ClassificationResult
    needs_review: bool
    classification_id: int | None = None


class CorrectionRequest(BaseModel):
    """A user correction of an earlier classification."""

    classification_id: int
    corrected_type: NoteType


class CorrectionResponse(BaseModel):
    classification_id: int
    result: ClassificationResult


class BudgetResponse(BaseModel):
    """Response body for the admin usage endpoint."""

    usage: CostUsage
    status: BudgetStatus
    alert_message: str | None = None


class MisclassificationPattern(BaseModel):
    original: NoteType
    corrected: NoteType
    count: int


class ClassificationStatsResponse(BaseModel):
    total: int
    correction_rate: float
    by_method: dict[str, int]
    misclassifications: list[MisclassificationPattern]
    accuracy_by_prompt_version: dict[str, float]


class ClassificationSettingsUpdate(BaseModel):
    """Partial update of classification preferences."""

    remote_enabled: bool | None = None
    always_ask: bool | None = None
    confidence_threshold: float | None = Field(default=None, ge=0.0, le=1.0)
