"""HTML rendering tests."""

from __future__ import annotations

import html
import re
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from arguelens.analyzer import DemoAnalyzer  # noqa: E402
from arguelens.anchoring import resolve_segments  # noqa: E402
from arguelens.constants import SAMPLE_TEXT  # noqa: E402
from arguelens.reporting import (  # noqa: E402
    count_by_type,
    render_annotation_details_html,
    render_report_html,
    render_segments_html,
)
from arguelens.schemas import AnalysisResult, Annotation, AnnotationType  # noqa: E402

_TAG = re.compile(r"<[^>]+>")


def test_segments_html_escapes_and_preserves_text() -> None:
    text = "Profits <rose> & wages fell."
    annotation = Annotation(id="e1", quote="wages fell", type="Evidence", explanation='a "fact"')
    rendered = render_segments_html(resolve_segments(text, [annotation]))
    assert "<rose>" not in rendered
    assert "data-annotation-id='e1'" in rendered
    assert "anno-evidence" in rendered
    assert html.unescape(_TAG.sub("", rendered)) == text


def test_details_cover_optional_fields() -> None:
    annotation = Annotation.model_validate(
        {
            "id": "r9",
            "quote": "so",
            "type": "Reasoning",
            "explanation": "Links evidence to claim.",
            "supported_claim_ids": ["c1"],
            "is_logically_valid": False,
            "invalid_logic_explanation": "Assumes causation.",
            "logical_fallacies": [
                {"id": "f1", "fallacy_type": "false_cause", "text": "so", "severity": "high"}
            ],
        }
    )
    rendered = render_annotation_details_html(annotation)
    assert "Reasoning / Logic" in rendered
    assert "Invalid" in rendered
    assert "Assumes causation." in rendered
    assert "Supported Claims" in rendered
    assert "false cause" in rendered
    assert "Bias Indicators" not in rendered


def test_details_for_evidence_without_metadata() -> None:
    annotation = Annotation(id="e2", quote="x", type="Evidence")
    rendered = render_annotation_details_html(annotation)
    assert "N/A" in rendered
    assert "unknown" in rendered
    assert "Valid" not in rendered


def test_count_by_type_includes_every_type() -> None:
    result = DemoAnalyzer().analyze(SAMPLE_TEXT)
    counts = count_by_type(result.annotations)
    assert counts == {
        AnnotationType.CLAIM: 2,
        AnnotationType.EVIDENCE: 1,
        AnnotationType.REASONING: 2,
        AnnotationType.COUNTERARGUMENT: 1,
    }


def test_report_lists_anchored_and_dropped() -> None:
    result = DemoAnalyzer().analyze(SAMPLE_TEXT)
    extra = Annotation(id="ghost", quote="hydrogen trucks", type="Claim")
    report = render_report_html(
        SAMPLE_TEXT,
        AnalysisResult(annotations=[*result.annotations, extra]),
        title="EV <essay>",
    )
    assert "<title>EV &lt;essay&gt;</title>" in report
    for ann_id in ("c1", "ca1", "r1", "e1", "r2", "c2"):
        assert f"data-annotation-id='{ann_id}'" in report
    assert "ghost" not in report
    assert "1 annotation(s) could not be placed" in report
    assert "cherry picking" in report


def test_line_breaks_keep_markup_on_one_line() -> None:
    text = "First paragraph.\n\nSecond claim here."
    annotation = Annotation(id="c1", quote="Second claim here.", type="Claim", explanation="Line one.\nLine two.")
    rendered = render_segments_html(resolve_segments(text, [annotation]), line_breaks=True)
    assert "\n" not in rendered
    assert "First paragraph.<br><br>" in rendered
    assert "Line one.&#10;Line two." in rendered
    assert "\n\n" in render_segments_html(resolve_segments(text, [annotation]))
