"""Classification evaluation harness for measuring pipeline accuracy."""

import json
import logging
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import yaml

from quillstack.classification.orchestrator import ClassificationOrchestrator
from quillstack.classification.remote import PROMPT_VERSION
from quillstack.models import NoteType

logger = logging.getLogger(__name__)


@dataclass
class ClassificationCase:
    """A single evaluation case with its expected type."""

    id: str
    text: str
    expected_type: NoteType
    category: str = "obvious"
    difficulty: str = "easy"
    notes: str = ""


@dataclass
class CaseResult:
    """Result of classifying a single case."""

    id: str
    expected: str
    predicted: str
    method: str
    confidence: float
    correct: bool
    category: str
    difficulty: str


@dataclass
class EvalReport:
    """Aggregate evaluation report."""

    prompt_version: str
    timestamp: str
    num_cases: int
    accuracy: float
    by_category: dict[str, float]
    by_type: dict[str, float]
    by_method: dict[str, int]
    results: list[CaseResult] = field(default_factory=list)


def load_cases(path: Path) -> list[ClassificationCase]:
    """Load evaluation cases from a YAML file."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    cases: list[ClassificationCase] = []
    for c in data["cases"]:
        expected = NoteType.parse(str(c["expected_type"]))
        if expected is None:
            raise ValueError(f"Case {c['id']}: unknown expected_type {c['expected_type']!r}")
        cases.append(
            ClassificationCase(
                id=c["id"],
                text=c["text"],
                expected_type=expected,
                category=c.get("category", "obvious"),
                difficulty=c.get("difficulty", "easy"),
                notes=c.get("notes", ""),
            )
        )
    return cases


def _accuracy(results: list[CaseResult]) -> float:
    return sum(r.correct for r in results) / len(results) if results else 0.0


class ClassificationEvaluator:
    """Runs the classification pipeline over ground-truth cases."""

    def __init__(self, orchestrator: ClassificationOrchestrator) -> None:
        self.orchestrator = orchestrator

    def run(self, cases: list[ClassificationCase]) -> EvalReport:
        """Classify every case and compute aggregate accuracy."""
        results: list[CaseResult] = []
        for case in cases:
            result = self.orchestrator.classify(case.text)
            results.append(
                CaseResult(
                    id=case.id,
                    expected=case.expected_type.value,
                    predicted=result.type.value,
                    method=result.method.value,
                    confidence=result.confidence,
                    correct=result.type == case.expected_type,
                    category=case.category,
                    difficulty=case.difficulty,
                )
            )

        by_category: dict[str, list[CaseResult]] = defaultdict(list)
        by_type: dict[str, list[CaseResult]] = defaultdict(list)
        by_method: dict[str, int] = defaultdict(int)
        for r in results:
            by_category[r.category].append(r)
            by_type[r.expected].append(r)
            by_method[r.method] += 1

        return EvalReport(
            prompt_version=PROMPT_VERSION,
            timestamp=datetime.now(UTC).isoformat(),
            num_cases=len(results),
            accuracy=_accuracy(results),
            by_category={k: _accuracy(v) for k, v in sorted(by_category.items())},
            by_type={k: _accuracy(v) for k, v in sorted(by_type.items())},
            by_method=dict(sorted(by_method.items())),
            results=results,
        )


def print_report(report: EvalReport) -> None:
    """Print a human-readable evaluation report to stdout."""
    print(f"\n{'=' * 70}")
    print(f"Classification Eval Report (prompt {report.prompt_version})")
    print(f"{'=' * 70}")
    print(f"Timestamp:  {report.timestamp}")
    print(f"Cases:      {report.num_cases}")
    print(f"Accuracy:   {report.accuracy:.1%}")
    print(f"{'-' * 70}")

    print("By category:")
    for name, acc in report.by_category.items():
        print(f"  {name:<12} {acc:.1%}")
    print("By expected type:")
    for name, acc in report.by_type.items():
        print(f"  {name:<12} {acc:.1%}")
    print("By method:")
    for name, count in report.by_method.items():
        print(f"  {name:<12} {count}")

    failures = [r for r in report.results if not r.correct]
    if failures:
        print(f"{'-' * 70}")
        for r in failures:
            print(
                f"[FAIL] {r.id}: expected {r.expected}, got {r.predicted} "
                f"({r.method}, {r.confidence:.2f})"
            )

    print(f"\n{'=' * 70}\n")


def save_report(report: EvalReport, output_dir: Path) -> Path:
    """Save the evaluation report as JSON."""
    output_dir.mkdir(parents=True, exist_ok=True)
    ts = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    path = output_dir / f"classification-{report.prompt_version}-{ts}.json"
    with open(path, "w", encoding="utf-8") as f:
        json.dump(asdict(report), f, indent=2)
    logger.info("Eval report saved to %s", path)
    return path
