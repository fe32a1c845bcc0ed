"""Classification and sectioning of OCR note text."""

from quillstack.classification.cache import ClassificationCache
from quillstack.classification.commands import CommandPhraseDetector
from quillstack.classification.heuristics import HeuristicClassifier
from quillstack.classification.orchestrator import (
    ClassificationOrchestrator,
    should_prompt_manual_review,
)
from quillstack.classification.remote import RemoteClassifier, RemoteGate
from quillstack.classification.sections import SectionSplitter
from quillstack.classification.triggers import TriggerDetector

__all__ = [
    "ClassificationCache",
    "ClassificationOrchestrator",
    "CommandPhraseDetector",
    "HeuristicClassifier",
    "RemoteClassifier",
    "RemoteGate",
    "SectionSplitter",
    "TriggerDetector",
    "should_prompt_manual_review",
]
