"""CLI to analyze an argumentative text and show its anchored components."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from arguelens.analyzer import AnalysisError, DemoAnalyzer, GeminiAnalyzer, analyze_text  # noqa: E402
from arguelens.anchoring import anchor_annotations  # noqa: E402
from arguelens.reporting import render_report_html  # noqa: E402
from arguelens.utils import configure_logging  # noqa: E402


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Break an argument into claims, evidence, and reasoning")
    parser.add_argument(
        "--input",
        default="-",
        help="Path to a text file (defaults to stdin)",
    )
    parser.add_argument("--demo", action="store_true", help="Use the canned demo analysis instead of Gemini")
    parser.add_argument("--no-cache", action="store_true", help="Bypass the analysis response cache")
    parser.add_argument("--html", default=None, help="Write a standalone HTML report to this path")
    parser.add_argument("--json", action="store_true", help="Print segments as JSON")
    return parser.parse_args(argv)


def _read_text(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    path = Path(source).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"{path} not found")
    return path.read_text(encoding="utf-8")


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    args = parse_args(argv)
    log = logging.getLogger(__name__)
    analyzer = DemoAnalyzer() if args.demo else GeminiAnalyzer(use_cache=not args.no_cache)

    try:
        text = _read_text(args.input)
        result = analyze_text(text, analyzer=analyzer)
    except (AnalysisError, FileNotFoundError, ValueError) as exc:
        log.error("Analysis failed: %s", exc)
        return 1

    report = anchor_annotations(text, result.annotations)
    log.info(
        "Anchored %d of %d annotations", len(report.anchored_ids), len(result.annotations)
    )

    if args.json:
        print(json.dumps([segment.model_dump(mode="json", by_alias=True) for segment in report.segments], indent=2))
    else:
        for segment in report.segments:
            if segment.annotation is None:
                print(f"        {segment.text!r}")
            else:
                tag = f"{segment.annotation.type.value}#{segment.annotation.id}"
                print(f"[{tag}] {segment.text!r}")
        if report.dropped_count:
            print(
                f"Unplaced annotations: not found={report.unresolved_ids} "
                f"overlapping={report.overlapping_ids}"
            )

    if args.html:
        target = Path(args.html).expanduser()
        target.write_text(render_report_html(text, result), encoding="utf-8")
        print(f"Saved report to {target}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
