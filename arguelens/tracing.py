"""Trace logging for analysis runs."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .utils import ensure_dirs


def trace_path() -> Path:
    return Path(os.getenv("TRACE_PATH", "artifacts/traces.jsonl")).expanduser()


def log_trace_event(
    component: str,
    stage: str,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """Append one JSON line describing a step of an analysis run."""
    payload: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "component": component,
        "stage": stage,
    }
    if details:
        payload["details"] = details
    path = trace_path()
    ensure_dirs(path.parent)
    with path.open("a", encoding="utf-8") as handle:
        handle.write(json.dumps(payload) + "\n")
