"""Analyzer backend tests (no network)."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Iterator, List

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from arguelens import analyzer, cache, llm  # noqa: E402
from arguelens.anchoring import anchor_annotations  # noqa: E402
from arguelens.constants import SAMPLE_TEXT  # noqa: E402
from arguelens.schemas import AnalysisResult  # noqa: E402

TEXT = "School uniforms reduce bullying. A 2019 survey found fewer incidents."

PAYLOAD = {
    "annotations": [
        {"id": "c1", "quote": "School uniforms reduce bullying.", "type": "Claim", "explanation": "Thesis."},
        {
            "id": "e1",
            "quote": "A 2019 survey found fewer incidents.",
            "type": "Evidence",
            "explanation": "Survey data.",
            "evidence_type": "statistic",
            "source_credibility": "unknown",
            "supported_claim_ids": ["c1"],
        },
    ]
}


@pytest.fixture(autouse=True)
def isolated_dirs(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[Path]:
    monkeypatch.setenv("ANALYSIS_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.setenv("TRACE_PATH", str(tmp_path / "traces.jsonl"))
    cache.reset_cache_state()
    yield tmp_path
    cache.reset_cache_state()


def _read_traces(tmp_path: Path) -> List[dict]:
    path = tmp_path / "traces.jsonl"
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_gemini_analyzer_parses_llm_payload(monkeypatch: pytest.MonkeyPatch) -> None:
    prompts: List[str] = []

    def fake_call(system_prompt: str, user_prompt: str, model: Any = None, **kwargs: Any) -> dict:
        prompts.append(user_prompt)
        return PAYLOAD

    monkeypatch.setattr(analyzer, "call_llm_json", fake_call)
    result = analyzer.GeminiAnalyzer(model="models/test", use_cache=False).analyze(TEXT)
    assert [a.id for a in result.annotations] == ["c1", "e1"]
    assert TEXT in prompts[0]


def test_llm_failure_becomes_analysis_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_call(*args: Any, **kwargs: Any) -> dict:
        raise RuntimeError("GEMINI_API_KEY is missing.")

    monkeypatch.setattr(analyzer, "call_llm_json", failing_call)
    with pytest.raises(analyzer.AnalysisError):
        analyzer.GeminiAnalyzer(use_cache=False).analyze(TEXT)


def test_non_json_response_becomes_analysis_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def bad_json(*args: Any, **kwargs: Any) -> dict:
        raise ValueError("No JSON block found in LLM response.")

    monkeypatch.setattr(analyzer, "call_llm_json", bad_json)
    with pytest.raises(analyzer.AnalysisError):
        analyzer.GeminiAnalyzer(use_cache=False).analyze(TEXT)


def test_unusable_payload_is_logged_and_not_cached(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setattr(analyzer, "call_llm_json", lambda *args, **kwargs: 42)
    with caplog.at_level(logging.ERROR, logger="arguelens.analyzer"):
        with pytest.raises(analyzer.AnalysisError):
            analyzer.GeminiAnalyzer(model="models/test").analyze(TEXT)
    assert any("Unusable analysis response" in record.getMessage() for record in caplog.records)
    assert cache.get_cache_stats() == {"analyses": 0}


def test_request_carries_response_schema(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict = {}

    def fake_call(system_prompt: str, user_prompt: str, model: Any = None, **kwargs: Any) -> dict:
        seen.update(kwargs)
        return PAYLOAD

    monkeypatch.setattr(analyzer, "call_llm_json", fake_call)
    analyzer.GeminiAnalyzer(use_cache=False).analyze(TEXT)
    schema = seen["response_schema"]
    assert schema is analyzer.RESPONSE_SCHEMA
    item = schema["properties"]["annotations"]["items"]
    assert item["required"] == ["id", "quote", "type", "explanation"]
    assert item["properties"]["type"]["enum"] == ["Claim", "Evidence", "Reasoning", "Counterargument"]


def test_generation_config_enables_json_schema_mode() -> None:
    config = llm.build_generation_config(response_schema={"type": "OBJECT"})
    assert config.response_mime_type == "application/json"
    assert config.response_schema == {"type": "OBJECT"}
    plain = llm.build_generation_config()
    assert plain.response_mime_type is None
    assert plain.response_schema is None


def test_second_call_is_served_from_cache(monkeypatch: pytest.MonkeyPatch, isolated_dirs: Path) -> None:
    calls: List[str] = []

    def fake_call(system_prompt: str, user_prompt: str, model: Any = None, **kwargs: Any) -> dict:
        calls.append(user_prompt)
        return PAYLOAD

    monkeypatch.setattr(analyzer, "call_llm_json", fake_call)
    backend = analyzer.GeminiAnalyzer(model="models/test")
    first = backend.analyze(TEXT)
    second = backend.analyze(TEXT)
    assert len(calls) == 1
    assert first.model_dump() == second.model_dump()
    assert (isolated_dirs / "cache" / "analyses.json").exists()
    assert cache.get_cache_stats() == {"analyses": 1}


def test_demo_analyzer_anchors_every_sample_annotation() -> None:
    result = analyzer.DemoAnalyzer().analyze(SAMPLE_TEXT)
    report = anchor_annotations(SAMPLE_TEXT, result.annotations)
    assert len(result.annotations) == 6
    assert report.dropped_count == 0
    assert report.anchored_ids == ["c1", "ca1", "r1", "e1", "r2", "c2"]
    assert "".join(segment.text for segment in report.segments) == SAMPLE_TEXT


def test_analyze_text_traces_success(isolated_dirs: Path) -> None:
    result = analyzer.analyze_text(SAMPLE_TEXT, analyzer=analyzer.DemoAnalyzer())
    assert isinstance(result, AnalysisResult)
    stages = [event["stage"] for event in _read_traces(isolated_dirs)]
    assert stages == ["start", "complete"]


def test_analyze_text_traces_failure(isolated_dirs: Path) -> None:
    class BrokenAnalyzer:
        def analyze(self, text: str) -> AnalysisResult:
            raise analyzer.AnalysisError("service down")

    with pytest.raises(analyzer.AnalysisError):
        analyzer.analyze_text(TEXT, analyzer=BrokenAnalyzer())
    events = _read_traces(isolated_dirs)
    assert events[-1]["stage"] == "failed"
    assert events[-1]["details"]["error"] == "service down"


def test_analyze_text_rejects_blank_input() -> None:
    with pytest.raises(ValueError):
        analyzer.analyze_text("   ", analyzer=analyzer.DemoAnalyzer())
