"""Anchor annotation quotes to the source text and split it into segments.

The analysis engine hands back annotations whose ``quote`` is supposed to
appear verbatim in the text. Nothing guarantees that: quotes may be
missing, repeated, or overlap each other. This module places each quote at
its first exact occurrence, keeps a non-overlapping subset by scanning
left to right, and returns segments that cover the text exactly once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .schemas import AnchorReport, Annotation, TextSegment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Match:
    start: int
    end: int
    annotation: Annotation


def locate_quotes(text: str, annotations: Sequence[Annotation]) -> Tuple[List[Match], List[str]]:
    """Find the first occurrence of each quote.

    Returns the matches in input order plus the ids of annotations whose
    quote is empty or absent from ``text``.
    """
    matches: List[Match] = []
    unresolved: List[str] = []
    for annotation in annotations:
        quote = annotation.quote
        start = text.find(quote) if quote else -1
        if start == -1:
            unresolved.append(annotation.id)
            continue
        matches.append(Match(start=start, end=start + len(quote), annotation=annotation))
    return matches, unresolved


def select_non_overlapping(matches: Sequence[Match]) -> Tuple[List[Match], List[Match]]:
    """Keep matches greedily by start offset; ties favour input order.

    A match is kept only when it starts at or after the end of the last
    kept match. Everything else is rejected whole.
    """
    ordered = sorted(matches, key=lambda match: match.start)
    accepted: List[Match] = []
    rejected: List[Match] = []
    last_end = 0
    for match in ordered:
        if match.start >= last_end:
            accepted.append(match)
            last_end = match.end
        else:
            rejected.append(match)
    return accepted, rejected


def _build_segments(text: str, accepted: Sequence[Match]) -> List[TextSegment]:
    if not text:
        return []
    segments: List[TextSegment] = []
    cursor = 0
    for match in accepted:
        if match.start > cursor:
            segments.append(TextSegment(text=text[cursor:match.start]))
        segments.append(TextSegment(text=text[match.start:match.end], annotation=match.annotation))
        cursor = match.end
    if cursor < len(text):
        segments.append(TextSegment(text=text[cursor:]))
    return segments


def anchor_annotations(text: str, annotations: Sequence[Annotation]) -> AnchorReport:
    """Resolve segments and report which annotations were dropped and why."""
    matches, unresolved = locate_quotes(text, annotations)
    accepted, rejected = select_non_overlapping(matches)
    if unresolved:
        logger.debug("Quotes not found in text for annotations: %s", ", ".join(unresolved))
    if rejected:
        logger.debug(
            "Dropped overlapping annotations: %s",
            ", ".join(match.annotation.id for match in rejected),
        )
    return AnchorReport(
        segments=_build_segments(text, accepted),
        anchored_ids=[match.annotation.id for match in accepted],
        unresolved_ids=unresolved,
        overlapping_ids=[match.annotation.id for match in rejected],
    )


def resolve_segments(text: str, annotations: Sequence[Annotation]) -> List[TextSegment]:
    """Return the ordered plain/highlighted segments covering ``text``."""
    return anchor_annotations(text, annotations).segments
