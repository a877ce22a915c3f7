"""Streamlit UI for ArgueLens."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

import streamlit as st
from streamlit.delta_generator import DeltaGenerator

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from arguelens.analyzer import AnalysisError, Analyzer, DemoAnalyzer, GeminiAnalyzer, analyze_text  # noqa: E402
from arguelens.anchoring import anchor_annotations  # noqa: E402
from arguelens.cache import clear_cache, get_cache_stats  # noqa: E402
from arguelens.constants import SAMPLE_TEXT, TYPE_STYLES  # noqa: E402
from arguelens.reporting import (  # noqa: E402
    count_by_type,
    render_annotation_details_html,
    render_legend_html,
    render_report_html,
    render_segments_html,
)
from arguelens.schemas import AnalysisResult, AnchorReport  # noqa: E402
from arguelens.utils import configure_logging  # noqa: E402

configure_logging()
logger = logging.getLogger(__name__)

ANALYSIS_ERROR_MESSAGE = (
    "Failed to analyze text. Please check your API key, internet connection, or try again."
)


def _init_state() -> None:
    st.session_state.setdefault("draft_text", SAMPLE_TEXT)
    st.session_state.setdefault("view_mode", "input")
    st.session_state.setdefault("result", None)
    st.session_state.setdefault("analyzed_text", "")
    st.session_state.setdefault("error", None)
    st.session_state.setdefault("demo_mode", os.getenv("ARGUELENS_DEMO") == "1")


def _current_analyzer() -> Analyzer:
    if st.session_state["demo_mode"]:
        return DemoAnalyzer()
    return GeminiAnalyzer()


def _load_sample() -> None:
    st.session_state["input_text"] = SAMPLE_TEXT
    st.session_state["draft_text"] = SAMPLE_TEXT


def _run_analysis(text: str) -> None:
    st.session_state["error"] = None
    st.session_state["result"] = None
    st.session_state["draft_text"] = text
    try:
        result = analyze_text(text, analyzer=_current_analyzer())
    except AnalysisError as exc:
        logger.error("Analysis failed: %s", exc)
        st.session_state["error"] = ANALYSIS_ERROR_MESSAGE
        return
    st.session_state["result"] = result.model_dump(mode="json")
    st.session_state["analyzed_text"] = text
    st.session_state["view_mode"] = "analysis"


def _stored_result() -> Optional[AnalysisResult]:
    raw = st.session_state.get("result")
    if not raw:
        return None
    return AnalysisResult.model_validate(raw)


def _render_sidebar() -> None:
    with st.sidebar:
        st.header("Settings")
        st.session_state["demo_mode"] = st.toggle(
            "Demo mode (canned analysis)",
            value=st.session_state["demo_mode"],
            help="Use a built-in analysis of the sample text without calling Gemini.",
        )
        if st.session_state["demo_mode"]:
            st.info("Demo mode enabled: only the sample text is annotated.")
        stats = get_cache_stats()
        st.caption(f"Cached analyses: {stats['analyses']}")
        if st.button("Clear analysis cache"):
            clear_cache()
            st.success("Analysis cache cleared.")


def _render_input_view() -> None:
    header_cols = st.columns([4, 1])
    header_cols[0].markdown("**ARGUMENTATIVE TEXT**")
    header_cols[1].button("Load sample", key="load_sample", on_click=_load_sample)

    # The widget's own state is dropped while the result view is shown.
    if "input_text" not in st.session_state:
        st.session_state["input_text"] = st.session_state["draft_text"]

    st.text_area(
        "Argumentative text",
        key="input_text",
        height=320,
        placeholder="Paste an article, essay, or speech here...",
        label_visibility="collapsed",
    )
    if st.session_state["error"]:
        st.error(st.session_state["error"])

    text = st.session_state["input_text"]
    if st.button("Analyze text", key="analyze", type="primary", disabled=not text.strip()):
        with st.spinner("Analyzing..."):
            _run_analysis(text)
        st.rerun()


def _render_stats(container: DeltaGenerator, result: AnalysisResult) -> None:
    counts = count_by_type(result.annotations)
    columns = container.columns(len(counts))
    for column, (annotation_type, count) in zip(columns, counts.items()):
        column.metric(TYPE_STYLES[annotation_type]["short"], count)


def _render_annotations(report: AnchorReport) -> None:
    anchored = [segment.annotation for segment in report.segments if segment.annotation is not None]
    for annotation in anchored:
        label = f"{TYPE_STYLES[annotation.type]['label']} #{annotation.id} · {annotation.quote[:80]}"
        with st.expander(label):
            st.markdown(render_annotation_details_html(annotation), unsafe_allow_html=True)
    if report.dropped_count:
        st.caption(
            f"{report.dropped_count} annotation(s) could not be placed in the text "
            f"({len(report.unresolved_ids)} quote(s) not found, "
            f"{len(report.overlapping_ids)} overlapping another component)."
        )


def _render_analysis_view(result: AnalysisResult) -> None:
    text = st.session_state["analyzed_text"]
    _render_stats(st.container(), result)

    action_cols = st.columns(3)
    if action_cols[0].button("Edit text", key="edit_text"):
        st.session_state["view_mode"] = "input"
        st.rerun()
    if action_cols[1].button("New analysis", key="new_analysis"):
        st.session_state["view_mode"] = "input"
        st.session_state["result"] = None
        st.rerun()
    action_cols[2].download_button(
        "Download HTML report",
        data=render_report_html(text, result),
        file_name="arguelens_report.html",
        mime="text/html",
    )

    report = anchor_annotations(text, result.annotations)
    styles = "".join(
        f"<style>.anno-{t.value.lower()} {{ background:{s['highlight']}; "
        f"border-bottom:2px solid {s['border']}; border-radius:4px; padding:0 2px; }}</style>"
        for t, s in TYPE_STYLES.items()
    )
    st.markdown(
        styles
        + "<div style='font-size:1.15rem;line-height:2;'>"
        + render_segments_html(report.segments, line_breaks=True)
        + "</div>",
        unsafe_allow_html=True,
    )
    st.markdown(render_legend_html(), unsafe_allow_html=True)
    st.subheader("Components")
    _render_annotations(report)


def main() -> None:
    st.set_page_config(page_title="ArgueLens", layout="centered")
    _init_state()
    st.title("ArgueLens")
    st.caption(
        "Deconstruct arguments instantly. Paste your text to identify core claims, "
        "supporting evidence, and logical reasoning."
    )
    _render_sidebar()

    result = _stored_result()
    if st.session_state["view_mode"] == "analysis" and result is not None:
        _render_analysis_view(result)
    else:
        _render_input_view()


if __name__ == "__main__":
    main()
