"""Shared helpers for directories and logging."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def ensure_dirs(*paths: str | Path | Iterable[str | Path]) -> None:
    """Create directories if they do not exist."""
    flat: list[str | Path] = []
    for item in paths:
        if isinstance(item, (list, tuple, set)):
            flat.extend(item)
        else:
            flat.append(item)
    for raw_path in flat:
        Path(raw_path).expanduser().mkdir(parents=True, exist_ok=True)


def configure_logging() -> None:
    """Install a basic root handler unless the host app already did."""
    if logging.getLogger().handlers:
        return
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )
