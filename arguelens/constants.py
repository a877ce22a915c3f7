"""Display styles per annotation type and the built-in sample text."""

from __future__ import annotations

from .schemas import AnnotationType

TYPE_STYLES = {
    AnnotationType.CLAIM: {
        "bg": "#dbeafe",
        "border": "#60a5fa",
        "text": "#1e3a8a",
        "highlight": "rgba(191, 219, 254, 0.5)",
        "label": "Main Claim",
        "short": "Claim",
    },
    AnnotationType.EVIDENCE: {
        "bg": "#d1fae5",
        "border": "#34d399",
        "text": "#064e3b",
        "highlight": "rgba(167, 243, 208, 0.5)",
        "label": "Supporting Evidence",
        "short": "Evidence",
    },
    AnnotationType.REASONING: {
        "bg": "#fef3c7",
        "border": "#fbbf24",
        "text": "#78350f",
        "highlight": "rgba(253, 230, 138, 0.5)",
        "label": "Reasoning / Logic",
        "short": "Reasoning",
    },
    AnnotationType.COUNTERARGUMENT: {
        "bg": "#ffe4e6",
        "border": "#fb7185",
        "text": "#881337",
        "highlight": "rgba(254, 205, 211, 0.5)",
        "label": "Counterargument",
        "short": "Counters",
    },
}

CREDIBILITY_COLORS = {
    "high": "#16a34a",
    "medium": "#ca8a04",
    "low": "#dc2626",
    "unknown": "#475569",
}

SAMPLE_TEXT = (
    'Electric cars are not the "silver bullet" for climate change that many claim them to be. '
    "While it is true that they produce zero tailpipe emissions, the production of their batteries "
    "is an incredibly energy-intensive process. A 2021 study by the International Energy Agency "
    "found that manufacturing an electric vehicle releases significantly more greenhouse gases than "
    "building a conventional car. Therefore, unless the electricity grid powering these factories "
    "and charging these cars is decarbonized, the net environmental benefit remains marginal at best. "
    "We must focus on a holistic approach to transportation that includes better public transit, "
    "rather than solely relying on replacing one type of personal vehicle with another."
)
