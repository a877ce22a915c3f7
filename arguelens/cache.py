"""Disk cache for raw analysis responses."""

from __future__ import annotations

import hashlib
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .utils import configure_logging, ensure_dirs

configure_logging()
logger = logging.getLogger(__name__)

_CACHE: Optional[Dict[str, Any]] = None


def _cache_file() -> Path:
    cache_dir = Path(os.getenv("ANALYSIS_CACHE_DIR", ".data/cache")).expanduser()
    return cache_dir / "analyses.json"


def analysis_cache_key(model: str, text: str) -> str:
    return hashlib.sha256(f"{model}|{text}".encode("utf-8")).hexdigest()


def _load_cache() -> Dict[str, Any]:
    global _CACHE
    if _CACHE is None:
        cache_file = _cache_file()
        if cache_file.exists():
            try:
                _CACHE = json.loads(cache_file.read_text(encoding="utf-8"))
            except json.JSONDecodeError:
                logger.warning("Analysis cache at %s is corrupt; starting fresh", cache_file)
                _CACHE = {}
        else:
            _CACHE = {}
    return _CACHE


def _save_cache() -> None:
    cache_file = _cache_file()
    ensure_dirs(cache_file.parent)
    cache_file.write_text(json.dumps(_CACHE or {}, indent=2), encoding="utf-8")


def cache_get(key: str) -> Optional[Any]:
    return _load_cache().get(key)


def cache_set(key: str, value: Any) -> None:
    data = _load_cache()
    data[key] = value
    _save_cache()
    logger.debug("Cached analysis entry: %s", key[:16])


def get_cache_stats() -> Dict[str, int]:
    return {"analyses": len(_load_cache())}


def clear_cache() -> None:
    global _CACHE
    _CACHE = {}
    _save_cache()
    logger.info("Cleared analysis cache")


def reset_cache_state() -> None:
    """Forget the in-memory copy so the next access rereads the file."""
    global _CACHE
    _CACHE = None
