"""Turn raw analysis JSON into validated annotations.

The model output is untrusted. Annotations that lack a usable ``id``,
``quote`` or ``type`` are skipped; malformed optional fields are stripped
so the rest of the annotation survives.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Set

from pydantic import ValidationError

from .schemas import AnalysisResult, Annotation

logger = logging.getLogger(__name__)

CORE_FIELDS = frozenset({"id", "quote", "type"})
_MAX_REPAIRS = 5


class AnalysisError(RuntimeError):
    """The analysis service could not produce a usable result."""


def _repair(data: Dict[str, Any], exc: ValidationError) -> bool:
    """Strip the optional fields (or list items) named in ``exc``.

    Returns False when a core field is at fault and the annotation cannot
    be kept.
    """
    drop_fields: Set[str] = set()
    drop_items: Dict[str, Set[int]] = {}
    for error in exc.errors():
        loc = error.get("loc", ())
        if not loc or loc[0] in CORE_FIELDS:
            return False
        field = str(loc[0])
        if len(loc) > 1 and isinstance(loc[1], int) and isinstance(data.get(field), list):
            drop_items.setdefault(field, set()).add(loc[1])
        else:
            drop_fields.add(field)
    for field in drop_fields:
        data.pop(field, None)
        drop_items.pop(field, None)
    for field, indices in drop_items.items():
        data[field] = [item for idx, item in enumerate(data[field]) if idx not in indices]
    return True


def coerce_annotation(raw: Any) -> Optional[Annotation]:
    """Validate one annotation, salvaging it when only optional data is bad."""
    if not isinstance(raw, dict):
        logger.warning("Skipping non-object annotation entry: %r", raw)
        return None
    data = dict(raw)
    for _ in range(_MAX_REPAIRS):
        try:
            return Annotation.model_validate(data)
        except ValidationError as exc:
            if not _repair(data, exc):
                logger.warning(
                    "Skipping annotation %r with invalid core fields: %s",
                    raw.get("id"),
                    exc.errors()[0].get("msg", "invalid"),
                )
                return None
            logger.debug("Stripped malformed optional fields from annotation %r", raw.get("id"))
    logger.warning("Giving up on annotation %r after repeated repairs", raw.get("id"))
    return None


def parse_analysis_payload(payload: Any) -> AnalysisResult:
    """Accept ``{"annotations": [...]}``, a bare list, or the JSON text of either."""
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise AnalysisError(f"Analysis response is not valid JSON: {exc}") from exc

    if isinstance(payload, list):
        raw_items = payload
    elif isinstance(payload, dict):
        raw_items = payload.get("annotations", [])
        if raw_items is None:
            raw_items = []
        if not isinstance(raw_items, list):
            raise AnalysisError("Analysis response field 'annotations' is not a list.")
    else:
        raise AnalysisError(f"Unexpected analysis response type: {type(payload).__name__}")

    annotations: List[Annotation] = []
    for raw in raw_items:
        annotation = coerce_annotation(raw)
        if annotation is not None:
            annotations.append(annotation)
    skipped = len(raw_items) - len(annotations)
    if skipped:
        logger.warning("Skipped %d of %d annotations from analysis response", skipped, len(raw_items))
    return AnalysisResult(annotations=annotations)
