"""Priority chain that assigns every note exactly one classification."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Protocol

from quillstack.classification.commands import CommandPhraseDetector
from quillstack.classification.heuristics import HeuristicClassifier
from quillstack.classification.remote import RemoteClassifier
from quillstack.classification.triggers import TriggerDetector
from quillstack.models import ClassificationMethod, ClassificationResult, ClassificationSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.5


class ClassificationStage(Protocol):
    name: str

    def try_classify(self, text: str) -> ClassificationResult | None: ...


class ExplicitTriggerStage:
    name = "explicit"

    def __init__(self, detector: TriggerDetector | None = None) -> None:
        self.detector = detector or TriggerDetector()

    def try_classify(self, text: str) -> ClassificationResult | None:
        note_type = self.detector.detect(text)
        return ClassificationResult.explicit(note_type) if note_type else None


class RemoteStage:
    """Runs only while the caller's settings allow remote classification."""

    name = "remote"

    def __init__(
        self,
        classifier: RemoteClassifier,
        settings_provider: Callable[[], ClassificationSettings],
    ) -> None:
        self.classifier = classifier
        self.settings_provider = settings_provider

    def try_classify(self, text: str) -> ClassificationResult | None:
        settings = self.settings_provider()
        if not (settings.remote_classification_enabled and settings.credential_configured):
            return None
        return self.classifier.classify(text)


class CommandPhraseStage:
    name = "voice_command"

    def __init__(self, detector: CommandPhraseDetector | None = None) -> None:
        self.detector = detector or CommandPhraseDetector()

    def try_classify(self, text: str) -> ClassificationResult | None:
        note_type = self.detector.detect(text)
        return ClassificationResult.voice_command(note_type) if note_type else None


class HeuristicStage:
    name = "heuristic"

    def __init__(self, classifier: HeuristicClassifier | None = None) -> None:
        self.classifier = classifier or HeuristicClassifier()

    def try_classify(self, text: str) -> ClassificationResult | None:
        hit = self.classifier.classify(text)
        if hit is None:
            return None
        note_type, confidence, reasoning = hit
        return ClassificationResult.heuristic(note_type, confidence, reasoning)


def should_prompt_manual_review(
    result: ClassificationResult, threshold: float, always_ask: bool
) -> bool:
    """Whether the user should confirm the type before the note is filed."""
    if always_ask:
        return True
    if result.method in (ClassificationMethod.EXPLICIT, ClassificationMethod.MANUAL):
        return False
    return result.confidence < threshold


class ClassificationOrchestrator:
    """Folds over an ordered list of stages, stopping at the first result.

    The default chain is explicit marker, remote model, command phrase,
    heuristics. If every stage passes, the note is ``general`` at 0.5.
    """

    def __init__(
        self,
        stages: Sequence[ClassificationStage] | None = None,
        remote: RemoteClassifier | None = None,
        settings_provider: Callable[[], ClassificationSettings] | None = None,
        default_confidence: float = DEFAULT_CONFIDENCE,
    ) -> None:
        self.settings_provider = settings_provider or ClassificationSettings
        if stages is None:
            chain: list[ClassificationStage] = [ExplicitTriggerStage()]
            if remote is not None:
                chain.append(RemoteStage(remote, self.settings_provider))
            chain.extend([CommandPhraseStage(), HeuristicStage()])
            stages = chain
        self.stages = list(stages)
        self.default_confidence = default_confidence

    def classify(self, text: str) -> ClassificationResult:
        """Total: always returns a result, whatever the stages do."""
        for stage in self.stages:
            try:
                result = stage.try_classify(text)
            except Exception:
                logger.warning("Classification stage '%s' failed", stage.name, exc_info=True)
                continue
            if result is not None:
                logger.debug(
                    "Stage '%s' classified note as %s (%.2f)",
                    stage.name,
                    result.type.value,
                    result.confidence,
                )
                return result
        return ClassificationResult.default(self.default_confidence)

    def needs_review(self, result: ClassificationResult) -> bool:
        """Manual-review gate using the current settings."""
        settings = self.settings_provider()
        return should_prompt_manual_review(
            result, settings.confidence_threshold, settings.always_ask_for_classification
        )
