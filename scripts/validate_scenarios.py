#!/usr/bin/env python3
"""Scenario catalog validation.

Loads a Breach Protocol catalog exactly as the applications do, reports every
structural error, and flags authoring smells that are legal but probably
unintended (no high-weight choice, no learning objective, a choice marked
both safe and risky).

Usage:
    # Validate the bundled catalog
    python scripts/validate_scenarios.py

    # Validate a custom catalog and write the report as JSON
    python scripts/validate_scenarios.py my_scenarios.json --output report.json
"""

import argparse
import json
import sys
from collections import Counter
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from breach_protocol.engine import DEFAULT_CATALOG_PATH, ScenarioCatalog
from breach_protocol.errors import ValidationError
from breach_protocol.models import Scenario


def scenario_warnings(scenario: Scenario) -> list[str]:
    """Authoring smells for one scenario."""
    warnings = []
    weights = {choice.educational_weight.value for choice in scenario.choices}
    if "high" not in weights:
        warnings.append("no high-weight choice")
    if not scenario.objectives:
        warnings.append("no learning objective")
    both = scenario.safety_choice_ids & scenario.risk_choice_ids
    if both:
        warnings.append(f"choices marked both safe and risky: {sorted(both)}")
    if scenario.recommendation is None:
        warnings.append("no AI recommendation")
    return warnings


def build_report(catalog: ScenarioCatalog) -> dict:
    scenarios = []
    for scenario in catalog:
        weights = Counter(choice.educational_weight.value for choice in scenario.choices)
        scenarios.append({
            "id": scenario.id,
            "title": scenario.title,
            "difficulty": scenario.difficulty,
            "choices": len(scenario.choices),
            "weights": dict(weights),
            "objectives": [objective.id for objective in scenario.objectives],
            "warnings": scenario_warnings(scenario),
        })
    return {"source": catalog.source, "name": catalog.name, "valid": True, "scenarios": scenarios}


def print_report(report: dict) -> None:
    print("\n" + "=" * 70)
    print("SCENARIO CATALOG REPORT")
    print("=" * 70)
    print(f"Catalog: {report['name'] or '(unnamed)'}")
    print(f"Source: {report['source']}")

    for scenario in report["scenarios"]:
        print("\n" + "-" * 70)
        print(f"{scenario['id']}: {scenario['title']} ({scenario['difficulty']})")
        weights = ", ".join(f"{k}={v}" for k, v in sorted(scenario["weights"].items()))
        print(f"  Choices: {scenario['choices']} ({weights})")
        print(f"  Objectives: {', '.join(scenario['objectives']) or 'none'}")
        for warning in scenario["warnings"]:
            print(f"  [WARNING] {warning}")

    total_warnings = sum(len(s["warnings"]) for s in report["scenarios"])
    print("\n" + "-" * 70)
    print("SUMMARY")
    print("-" * 70)
    print(f"  Scenarios: {len(report['scenarios'])}")
    print(f"  Warnings: {total_warnings}")
    print("\n" + "=" * 70)


def main():
    parser = argparse.ArgumentParser(
        description="Validate Breach Protocol scenario catalogs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "catalog_path",
        nargs="?",
        default=str(DEFAULT_CATALOG_PATH),
        help="Path to catalog JSON file (default: bundled catalog)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Output JSON file for the report",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only output JSON, no human-readable report",
    )

    args = parser.parse_args()

    catalog_path = Path(args.catalog_path)
    if not catalog_path.exists():
        print(f"Error: Catalog file not found: {catalog_path}", file=sys.stderr)
        sys.exit(1)

    try:
        report = build_report(ScenarioCatalog.from_file(catalog_path))
    except ValidationError as e:
        print("VALIDATION FAILED", file=sys.stderr)
        for error in e.errors or [str(e)]:
            print(f"  {error}", file=sys.stderr)
        if args.output:
            with open(args.output, "w") as f:
                json.dump({"source": str(catalog_path), "valid": False, "errors": e.errors}, f, indent=2)
        sys.exit(1)

    if not args.quiet:
        print_report(report)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with output_path.open("w") as f:
            json.dump(report, f, indent=2)
        if not args.quiet:
            print(f"\nReport written to: {output_path}")
    elif args.quiet:
        print(json.dumps(report, indent=2))


if __name__ == "__main__":
    main()
