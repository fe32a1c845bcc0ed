"""CLI entry point for classification evaluation: python -m quillstack.eval"""

import sys
from pathlib import Path

from quillstack.api.dependencies import get_data_path, get_orchestrator, get_settings
from quillstack.eval.harness import ClassificationEvaluator, load_cases, print_report, save_report


def main() -> None:
    settings = get_settings()

    cases_path = Path(__file__).parent / "classification_cases.yaml"
    if not cases_path.exists():
        print(f"Error: eval cases not found at {cases_path}", file=sys.stderr)
        sys.exit(1)

    cases = load_cases(cases_path)
    print(f"Loaded {len(cases)} eval cases")
    if not settings.credential_configured:
        print("No API key configured: remote classification stage will be skipped")

    evaluator = ClassificationEvaluator(get_orchestrator())
    report = evaluator.run(cases)

    print_report(report)

    saved_path = save_report(report, get_data_path() / "eval")
    print(f"Report saved to {saved_path}")


if __name__ == "__main__":
    main()
