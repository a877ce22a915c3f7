"""Data models for annotations, analysis results, and rendered segments."""

from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

Severity = Literal["low", "medium", "high"]


class AnnotationType(str, Enum):
    CLAIM = "Claim"
    EVIDENCE = "Evidence"
    REASONING = "Reasoning"
    COUNTERARGUMENT = "Counterargument"


class BiasIndicator(BaseModel):
    id: str
    type: Literal[
        "emotionally_charged_language",
        "one_sidedness",
        "omission",
        "cherry_picking",
        "lack_of_sources",
        "other",
    ]
    text: str
    severity: Severity


class LogicalFallacy(BaseModel):
    id: str
    fallacy_type: Literal[
        "ad_hominem",
        "straw_man",
        "slippery_slope",
        "red_herring",
        "false_cause",
        "overgeneralization",
        "other",
    ]
    text: str
    severity: Severity


class Annotation(BaseModel):
    """One rhetorical component the analysis engine claims to see in the text.

    Only ``id``, ``quote`` and ``type`` take part in anchoring; every other
    field is carried through untouched for display.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    quote: str
    type: AnnotationType
    explanation: str = ""

    # Evidence only
    evidence_type: Optional[
        Literal["fact", "statistic", "example", "expert_testimony", "anecdote", "other"]
    ] = None
    source_credibility: Optional[Literal["high", "medium", "low", "unknown"]] = None

    supported_claim_ids: List[str] = Field(default_factory=list)
    supported_evidence_ids: List[str] = Field(default_factory=list)
    is_logically_valid: Optional[bool] = None
    invalid_logic_explanation: Optional[str] = None
    bias_indicators: List[BiasIndicator] = Field(default_factory=list)
    logical_fallacies: List[LogicalFallacy] = Field(default_factory=list)

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: object) -> object:
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in AnnotationType:
                if member.value.lower() == lowered:
                    return member
        return value


class AnalysisResult(BaseModel):
    annotations: List[Annotation] = Field(default_factory=list)


class TextSegment(BaseModel):
    """A contiguous slice of the source text, optionally tied to an annotation."""

    text: str
    annotation: Optional[Annotation] = None

    @computed_field(alias="isHighlighted")  # type: ignore[prop-decorator]
    @property
    def is_highlighted(self) -> bool:
        return self.annotation is not None


class AnchorReport(BaseModel):
    segments: List[TextSegment]
    anchored_ids: List[str] = Field(default_factory=list)
    unresolved_ids: List[str] = Field(default_factory=list)
    overlapping_ids: List[str] = Field(default_factory=list)

    @property
    def dropped_count(self) -> int:
        return len(self.unresolved_ids) + len(self.overlapping_ids)
