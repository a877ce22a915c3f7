"""Argument analysis backends.

``Analyzer`` is the seam between the app and whatever produces
annotations. ``GeminiAnalyzer`` asks Gemini for a JSON breakdown;
``DemoAnalyzer`` returns canned annotations for the sample text so the UI
can be exercised offline.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

from .cache import analysis_cache_key, cache_get, cache_set
from .constants import SAMPLE_TEXT
from .llm import CHAT_MODEL, call_llm_json
from .payload import AnalysisError, parse_analysis_payload
from .schemas import AnalysisResult, AnnotationType
from .tracing import log_trace_event
from .utils import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

__all__ = [
    "AnalysisError",
    "Analyzer",
    "DemoAnalyzer",
    "GeminiAnalyzer",
    "analyze_text",
]

SYSTEM_PROMPT = """
You are an expert in argumentation and rhetoric. Analyze argumentative text and
identify the key components of the argument: Claims, Evidence, Reasoning, and
Counterarguments. Respond only with a JSON object of the form
{"annotations": [...]}.

IMPORTANT REQUIREMENTS:
1. Assign a unique "id" to every annotation (e.g., "c1", "e1", "r1", "ca1").
2. Extract the "quote" exactly as it appears in the text, character for character.
3. Categorize by "type": Claim, Evidence, Reasoning, or Counterargument.
4. Provide a 1-sentence "explanation" of what this part represents.

For EVIDENCE annotations, also include:
- "evidence_type": one of "fact", "statistic", "example", "expert_testimony", "anecdote", "other".
- "source_credibility": one of "high", "medium", "low", "unknown".

For REASONING, EVIDENCE, and COUNTERARGUMENT annotations, you MUST include:
- "supported_claim_ids": a list of Claim IDs that this segment supports.
- "supported_evidence_ids": a list of Evidence IDs that this segment relies on or supports.
- "is_logically_valid": true or false.
- "invalid_logic_explanation": if "is_logically_valid" is false, explain why the logic is flawed; otherwise leave empty.
- "bias_indicators": a list of objects (id, type, text, severity). ALWAYS return this list (empty if none found).
  Bias types: "emotionally_charged_language", "one_sidedness", "omission", "cherry_picking", "lack_of_sources", "other".
- "logical_fallacies": a list of objects (id, fallacy_type, text, severity). ALWAYS return this list (empty if none found).
  Fallacy types: "ad_hominem", "straw_man", "slippery_slope", "red_herring", "false_cause", "overgeneralization", "other".
Severity is one of "low", "medium", "high".
"""


_SEVERITY = {"type": "STRING", "enum": ["low", "medium", "high"]}

RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "annotations": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "id": {"type": "STRING"},
                    "quote": {"type": "STRING"},
                    "type": {"type": "STRING", "enum": [t.value for t in AnnotationType]},
                    "explanation": {"type": "STRING"},
                    "evidence_type": {
                        "type": "STRING",
                        "enum": ["fact", "statistic", "example", "expert_testimony", "anecdote", "other"],
                    },
                    "source_credibility": {"type": "STRING", "enum": ["high", "medium", "low", "unknown"]},
                    "supported_claim_ids": {"type": "ARRAY", "items": {"type": "STRING"}},
                    "supported_evidence_ids": {"type": "ARRAY", "items": {"type": "STRING"}},
                    "is_logically_valid": {"type": "BOOLEAN"},
                    "invalid_logic_explanation": {"type": "STRING"},
                    "bias_indicators": {
                        "type": "ARRAY",
                        "items": {
                            "type": "OBJECT",
                            "properties": {
                                "id": {"type": "STRING"},
                                "type": {
                                    "type": "STRING",
                                    "enum": [
                                        "emotionally_charged_language",
                                        "one_sidedness",
                                        "omission",
                                        "cherry_picking",
                                        "lack_of_sources",
                                        "other",
                                    ],
                                },
                                "text": {"type": "STRING"},
                                "severity": _SEVERITY,
                            },
                            "required": ["id", "type", "text", "severity"],
                        },
                    },
                    "logical_fallacies": {
                        "type": "ARRAY",
                        "items": {
                            "type": "OBJECT",
                            "properties": {
                                "id": {"type": "STRING"},
                                "fallacy_type": {
                                    "type": "STRING",
                                    "enum": [
                                        "ad_hominem",
                                        "straw_man",
                                        "slippery_slope",
                                        "red_herring",
                                        "false_cause",
                                        "overgeneralization",
                                        "other",
                                    ],
                                },
                                "text": {"type": "STRING"},
                                "severity": _SEVERITY,
                            },
                            "required": ["id", "fallacy_type", "text", "severity"],
                        },
                    },
                },
                "required": ["id", "quote", "type", "explanation"],
            },
        }
    },
}


def build_user_prompt(text: str) -> str:
    return f'Text to analyze:\n"{text}"'


class Analyzer(Protocol):
    def analyze(self, text: str) -> AnalysisResult:
        ...


class GeminiAnalyzer:
    """Analyze text with Gemini, caching raw responses per model and text."""

    def __init__(self, model: Optional[str] = None, use_cache: bool = True) -> None:
        self.model = model or CHAT_MODEL
        self.use_cache = use_cache

    def analyze(self, text: str) -> AnalysisResult:
        key = analysis_cache_key(self.model, text)
        if self.use_cache:
            cached = cache_get(key)
            if cached is not None:
                logger.info("Using cached analysis for %s", key[:16])
                return self._parse(cached)

        try:
            payload = call_llm_json(
                SYSTEM_PROMPT,
                build_user_prompt(text),
                model=self.model,
                response_schema=RESPONSE_SCHEMA,
            )
        except Exception as exc:  # noqa: BLE001
            logger.error("Error analyzing text with %s: %s", self.model, exc)
            raise AnalysisError(f"Analysis unavailable: {exc}") from exc

        result = self._parse(payload)
        if self.use_cache:
            cache_set(key, payload)
        return result

    def _parse(self, payload: Any) -> AnalysisResult:
        try:
            return parse_analysis_payload(payload)
        except AnalysisError as exc:
            logger.error("Unusable analysis response from %s: %s", self.model, exc)
            raise


_DEMO_ANNOTATIONS: List[dict] = [
    {
        "id": "c1",
        "quote": 'Electric cars are not the "silver bullet" for climate change that many claim them to be.',
        "type": "Claim",
        "explanation": "The thesis: electric cars alone will not solve climate change.",
    },
    {
        "id": "ca1",
        "quote": "While it is true that they produce zero tailpipe emissions",
        "type": "Counterargument",
        "explanation": "Concedes the strongest point in favour of electric cars.",
        "supported_claim_ids": [],
        "supported_evidence_ids": [],
        "is_logically_valid": True,
        "invalid_logic_explanation": "",
        "bias_indicators": [],
        "logical_fallacies": [],
    },
    {
        "id": "r1",
        "quote": "the production of their batteries is an incredibly energy-intensive process",
        "type": "Reasoning",
        "explanation": "Shifts attention from tailpipe emissions to manufacturing costs.",
        "supported_claim_ids": ["c1"],
        "supported_evidence_ids": ["e1"],
        "is_logically_valid": True,
        "invalid_logic_explanation": "",
        "bias_indicators": [
            {
                "id": "b1",
                "type": "emotionally_charged_language",
                "text": "incredibly energy-intensive",
                "severity": "low",
            }
        ],
        "logical_fallacies": [],
    },
    {
        "id": "e1",
        "quote": (
            "A 2021 study by the International Energy Agency found that manufacturing an electric "
            "vehicle releases significantly more greenhouse gases than building a conventional car."
        ),
        "type": "Evidence",
        "explanation": "Cites an institutional study on manufacturing emissions.",
        "evidence_type": "expert_testimony",
        "source_credibility": "high",
        "supported_claim_ids": ["c1"],
        "supported_evidence_ids": [],
        "is_logically_valid": True,
        "invalid_logic_explanation": "",
        "bias_indicators": [
            {
                "id": "b2",
                "type": "cherry_picking",
                "text": "Reports manufacturing emissions without lifetime emissions.",
                "severity": "medium",
            }
        ],
        "logical_fallacies": [],
    },
    {
        "id": "r2",
        "quote": (
            "unless the electricity grid powering these factories and charging these cars is "
            "decarbonized, the net environmental benefit remains marginal at best"
        ),
        "type": "Reasoning",
        "explanation": "Makes the benefit conditional on a cleaner grid.",
        "supported_claim_ids": ["c1", "c2"],
        "supported_evidence_ids": ["e1"],
        "is_logically_valid": False,
        "invalid_logic_explanation": (
            "A single manufacturing study does not establish that lifetime benefits are marginal."
        ),
        "bias_indicators": [],
        "logical_fallacies": [
            {
                "id": "f1",
                "fallacy_type": "overgeneralization",
                "text": "remains marginal at best",
                "severity": "medium",
            }
        ],
    },
    {
        "id": "c2",
        "quote": "We must focus on a holistic approach to transportation that includes better public transit",
        "type": "Claim",
        "explanation": "The policy recommendation that follows from the argument.",
    },
]


class DemoAnalyzer:
    """Canned analysis of the built-in sample text; needs no API key."""

    sample_text = SAMPLE_TEXT

    def analyze(self, text: str) -> AnalysisResult:
        if text != self.sample_text:
            logger.info("Demo analyzer only knows the sample text; most quotes will not anchor.")
        return parse_analysis_payload({"annotations": _DEMO_ANNOTATIONS})


def analyze_text(text: str, analyzer: Optional[Analyzer] = None) -> AnalysisResult:
    """Run ``analyzer`` (Gemini by default) on ``text`` and trace the outcome."""
    if not text or not text.strip():
        raise ValueError("Text to analyze must not be empty.")
    backend = analyzer or GeminiAnalyzer()
    backend_name = type(backend).__name__
    log_trace_event("analyzer", "start", {"backend": backend_name, "chars": len(text)})
    try:
        result = backend.analyze(text)
    except AnalysisError as exc:
        log_trace_event("analyzer", "failed", {"backend": backend_name, "error": str(exc)})
        raise
    log_trace_event(
        "analyzer",
        "complete",
        {"backend": backend_name, "annotations": len(result.annotations)},
    )
    logger.info("%s returned %d annotations", backend_name, len(result.annotations))
    return result
