"""Command-line entry point for recording analysis."""

import argparse
import json
import sys
from collections import Counter
from typing import Optional

import structlog

from .analysis.analyzer import analyze_recording
from .analysis.models import AnalysisResult
from .clarification.detector import detect_clarifications
from .config import get_settings
from .pipeline import translate_recording
from .recording.loader import load_recording
from .recording.models import RecordingFormatError
from .utils.logging import LogContext, configure_logging

logger = structlog.get_logger()


def print_analysis(analysis: AnalysisResult, clarification_count: int) -> None:
    """Print a human-readable analysis summary."""
    recording = analysis.recording

    print("\n" + "=" * 50)
    print("RECORDING ANALYSIS")
    print("=" * 50)
    print(f"Name: {recording.name}")
    print(f"Start URL: {recording.start_url}")
    print(f"Steps: {recording.step_count}")
    if analysis.detected_chain_id is not None:
        print(f"Chain ID: {analysis.detected_chain_id}")
    if analysis.detected_wallet:
        print(f"Wallet: {analysis.detected_wallet}")
    print(f"Test type: {analysis.test_type.value}")
    print(f"Connection pattern: {analysis.dapp_connection_pattern.value}")

    print("\nDetected Patterns:")
    if not analysis.patterns:
        print("  No specific patterns detected")
    for pattern in analysis.patterns:
        print(
            f"  {pattern.type.value} (steps {pattern.start_index}-{pattern.end_index}, "
            f"{pattern.confidence:.0%} confidence)"
        )
        for key, value in pattern.metadata.items():
            if value is not None:
                print(f"    {key}: {value}")

    print("\nStep Summary:")
    counts = Counter(step.type.value for step in recording.steps)
    for step_type, count in counts.items():
        print(f"  {step_type}: {count}")

    if analysis.warnings:
        print("\nWarnings:")
        for warning in analysis.warnings:
            print(f"  ⚠ {warning}")

    if clarification_count:
        print(f"\n{clarification_count} clarification(s) would be needed for generation.")
    print("=" * 50 + "\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dapp-intent",
        description="Turn recorded dApp sessions into semantic intent plans"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: from DAPP_INTENT_LOG_LEVEL or INFO)"
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Render logs as JSON"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Show detected patterns and classification")
    analyze.add_argument("recording", help="Path to the recording JSON file")
    analyze.add_argument("--json", action="store_true", help="Print the analysis as JSON")

    intents = subparsers.add_parser("intents", help="Print the intent plan as JSON")
    intents.add_argument("recording", help="Path to the recording JSON file")

    clarify = subparsers.add_parser("clarify", help="Print clarification questions as JSON")
    clarify.add_argument("recording", help="Path to the recording JSON file")

    return parser


def run(argv: Optional[list[str]] = None) -> int:
    """Run the CLI and return the process exit code."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(
        level=args.log_level,
        json_format=True if args.json_logs else None,
        settings=settings,
    )

    try:
        recording = load_recording(args.recording)
    except (OSError, RecordingFormatError) as e:
        logger.error("Could not load recording", path=args.recording, error=str(e))
        return 1

    with LogContext(recording=recording.name):
        if args.command == "analyze":
            analysis = analyze_recording(recording)
            questions = detect_clarifications(analysis, settings)
            if args.json:
                print(json.dumps(analysis.to_dict(), indent=2, ensure_ascii=False))
            else:
                print_analysis(analysis, len(questions))
        elif args.command == "intents":
            plan = translate_recording(recording, settings)
            print(json.dumps(
                [step.to_dict() for step in plan.intent_steps],
                indent=2,
                ensure_ascii=False,
            ))
        else:
            analysis = analyze_recording(recording)
            questions = detect_clarifications(analysis, settings)
            print(json.dumps([q.to_dict() for q in questions], indent=2, ensure_ascii=False))

    return 0


def cli():
    """Command-line interface."""
    sys.exit(run())


if __name__ == "__main__":
    cli()
