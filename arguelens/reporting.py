"""HTML rendering of anchored segments and annotation details."""

from __future__ import annotations

import html
from typing import Dict, Iterable, List, Optional, Sequence

from .anchoring import anchor_annotations
from .constants import CREDIBILITY_COLORS, TYPE_STYLES
from .schemas import AnalysisResult, Annotation, AnnotationType, TextSegment

REPORT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
body {{ font-family: Georgia, serif; max-width: 52rem; margin: 2rem auto; color: #1e293b; }}
.reading-text {{ font-size: 1.15rem; line-height: 2; white-space: pre-wrap; }}
.anno {{ border-radius: 4px; padding: 0 2px; }}
table {{ border-collapse: collapse; font-size: 0.8rem; margin: 0.4rem 0; }}
th, td {{ border: 1px solid #e2e8f0; padding: 2px 6px; text-align: left; }}
th {{ background: #f1f5f9; }}
.stats span {{ margin-right: 1.5rem; font-weight: 700; }}
{type_css}
</style>
</head>
<body>
<h1>ArgueLens</h1>
<div class="stats">{stats}</div>
<div class="reading-text">{body}</div>
{legend}
<h2>Components</h2>
{details}
{dropped}
</body>
</html>
"""


def _type_class(annotation_type: AnnotationType) -> str:
    return f"anno-{annotation_type.value.lower()}"


def _type_css() -> str:
    rules = []
    for annotation_type, style in TYPE_STYLES.items():
        rules.append(
            f".{_type_class(annotation_type)} {{ background: {style['highlight']}; "
            f"border-bottom: 2px solid {style['border']}; }}"
        )
    return "\n".join(rules)


def _humanize(value: str) -> str:
    return value.replace("_", " ")


def render_segments_html(segments: Iterable[TextSegment], line_breaks: bool = False) -> str:
    """Render segments inline; highlighted ones become ``<mark>`` elements.

    With ``line_breaks`` newlines become ``<br>`` so the markup stays a single
    HTML block when embedded in Markdown.
    """
    parts = []
    for segment in segments:
        text = html.escape(segment.text)
        if line_breaks:
            text = text.replace("\n", "<br>")
        annotation = segment.annotation
        if annotation is None:
            parts.append(text)
            continue
        label = TYPE_STYLES[annotation.type]["label"]
        title = html.escape(f"{label} #{annotation.id}: {annotation.explanation}", quote=True).replace("\n", "&#10;")
        parts.append(
            f"<mark class='anno {_type_class(annotation.type)}' "
            f"data-annotation-id='{html.escape(annotation.id, quote=True)}' title='{title}'>"
            f"{text}</mark>"
        )
    return "".join(parts)


def _render_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    if not rows:
        return ""
    head = "".join(f"<th>{html.escape(header)}</th>" for header in headers)
    body = "\n".join(
        "<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>" for row in rows
    )
    return f"<table><thead><tr>{head}</tr></thead><tbody>\n{body}\n</tbody></table>"


def _severity_cell(severity: str) -> str:
    if severity == "high":
        return f"<strong style='color:#dc2626'>{html.escape(severity)}</strong>"
    return html.escape(severity)


def render_annotation_details_html(annotation: Annotation) -> str:
    """Render everything the analysis said about one annotation."""
    style = TYPE_STYLES[annotation.type]
    header = (
        f"<h3 style='color:{style['text']}'>{html.escape(style['label'])} "
        f"<small>#{html.escape(annotation.id)}</small>"
    )
    if annotation.is_logically_valid is not None:
        verdict = "Valid" if annotation.is_logically_valid else "Invalid"
        color = "#15803d" if annotation.is_logically_valid else "#b91c1c"
        header += f" <span style='color:{color}'>{verdict}</span>"
    header += "</h3>"

    parts: List[str] = [header, f"<p><em>{html.escape(annotation.explanation)}</em></p>"]

    if annotation.type == AnnotationType.EVIDENCE:
        credibility = annotation.source_credibility or "unknown"
        parts.append(
            "<p>"
            f"<strong>Type:</strong> {html.escape(_humanize(annotation.evidence_type or 'N/A'))} · "
            f"<strong>Credibility:</strong> <span style='color:{CREDIBILITY_COLORS[credibility]}'>"
            f"{html.escape(credibility)}</span>"
            "</p>"
        )
    if annotation.is_logically_valid is False and annotation.invalid_logic_explanation:
        parts.append(f"<p>{html.escape(annotation.invalid_logic_explanation)}</p>")
    if annotation.supported_claim_ids:
        parts.append("<h4>Supported Claims</h4>")
        parts.append(_render_table(["Claim ID"], [[html.escape(cid)] for cid in annotation.supported_claim_ids]))
    if annotation.supported_evidence_ids:
        parts.append("<h4>Supported Evidence</h4>")
        parts.append(
            _render_table(["Evidence ID"], [[html.escape(eid)] for eid in annotation.supported_evidence_ids])
        )
    if annotation.bias_indicators:
        parts.append("<h4>Bias Indicators</h4>")
        parts.append(
            _render_table(
                ["ID", "Type", "Indicator", "Sev"],
                [
                    [html.escape(b.id), html.escape(_humanize(b.type)), html.escape(b.text), _severity_cell(b.severity)]
                    for b in annotation.bias_indicators
                ],
            )
        )
    if annotation.logical_fallacies:
        parts.append("<h4>Logical Fallacies</h4>")
        parts.append(
            _render_table(
                ["ID", "Type", "Fallacy", "Sev"],
                [
                    [
                        html.escape(f.id),
                        html.escape(_humanize(f.fallacy_type)),
                        html.escape(f.text),
                        _severity_cell(f.severity),
                    ]
                    for f in annotation.logical_fallacies
                ],
            )
        )
    return "<section class='annotation'>" + "\n".join(part for part in parts if part) + "</section>"


def render_legend_html() -> str:
    chips = []
    for annotation_type, style in TYPE_STYLES.items():
        chips.append(
            "<span style=\"display:inline-block;padding:0.15rem 0.55rem;border-radius:6px;"
            "font-size:0.8rem;font-weight:600;margin-right:0.5rem;"
            f"background:{style['bg']};color:{style['text']};\">{html.escape(annotation_type.value)}</span>"
        )
    return "<div class='legend'><strong>Key:</strong> " + "".join(chips) + "</div>"


def count_by_type(annotations: Iterable[Annotation]) -> Dict[AnnotationType, int]:
    counts = {annotation_type: 0 for annotation_type in AnnotationType}
    for annotation in annotations:
        counts[annotation.type] += 1
    return counts


def render_report_html(text: str, result: AnalysisResult, title: Optional[str] = None) -> str:
    """Render a standalone HTML page for one analysis."""
    report = anchor_annotations(text, result.annotations)
    counts = count_by_type(result.annotations)
    stats = "".join(
        f"<span style='color:{TYPE_STYLES[t]['text']}'>{html.escape(TYPE_STYLES[t]['short'])}: {count}</span>"
        for t, count in counts.items()
    )
    anchored = [segment.annotation for segment in report.segments if segment.annotation is not None]
    details = "\n".join(render_annotation_details_html(annotation) for annotation in anchored)
    dropped = ""
    if report.dropped_count:
        dropped = (
            f"<p class='dropped'>{report.dropped_count} annotation(s) could not be placed in the text "
            f"({len(report.unresolved_ids)} not found, {len(report.overlapping_ids)} overlapping).</p>"
        )
    return REPORT_TEMPLATE.format(
        type_css=_type_css(),
        stats=stats,
        body=render_segments_html(report.segments),
        legend=render_legend_html(),
        details=details,
        dropped=dropped,
        title=html.escape(title or "ArgueLens report"),
    )
