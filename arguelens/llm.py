"""Gemini LLM helper utilities."""

from __future__ import annotations

import json
import logging
import os
import re
from typing import Any, Optional

import google.generativeai as genai

from .utils import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
CHAT_MODEL_RAW = os.getenv("CHAT_MODEL", "models/gemini-2.0-flash")
if CHAT_MODEL_RAW.startswith(("models/", "tunedModels/")):
    CHAT_MODEL = CHAT_MODEL_RAW
else:
    CHAT_MODEL = f"models/{CHAT_MODEL_RAW}"

if GEMINI_API_KEY:
    genai.configure(api_key=GEMINI_API_KEY)
else:
    logger.warning("GEMINI_API_KEY not set; analysis calls will fail outside demo mode.")

_JSON_PATTERN = re.compile(r"(\{.*\}|\[.*\])", re.DOTALL)


def extract_json_block(text: str) -> str:
    text = text.strip()
    try:
        json.loads(text)
        return text
    except json.JSONDecodeError:
        pass
    match = _JSON_PATTERN.search(text)
    if match:
        return match.group(1)
    raise ValueError("No JSON block found in LLM response.")


def build_generation_config(
    json_mode: bool = False,
    response_schema: Optional[dict[str, Any]] = None,
) -> genai.types.GenerationConfig:
    config_kwargs: dict[str, Any] = {"temperature": 0.2, "top_p": 0.9}
    if json_mode or response_schema is not None:
        config_kwargs["response_mime_type"] = "application/json"
    if response_schema is not None:
        config_kwargs["response_schema"] = response_schema
    return genai.types.GenerationConfig(**config_kwargs)


def call_llm(
    system_prompt: str,
    user_prompt: str,
    model: Optional[str] = None,
    json_mode: bool = False,
    response_schema: Optional[dict[str, Any]] = None,
) -> str:
    """Call the Gemini model and return raw text."""
    if not GEMINI_API_KEY:
        raise RuntimeError("GEMINI_API_KEY is missing.")
    client = genai.GenerativeModel(model or CHAT_MODEL)
    prompt = f"System:\n{system_prompt.strip()}\n\nUser:\n{user_prompt.strip()}"
    response = client.generate_content(
        prompt,
        generation_config=build_generation_config(json_mode, response_schema),
    )
    if not response.candidates:
        raise RuntimeError("No candidates returned from Gemini.")
    parts = response.candidates[0].content.parts
    text = "".join(getattr(part, "text", "") for part in parts)
    if not text.strip():
        raise RuntimeError("Empty Gemini response.")
    return text


def call_llm_json(
    system_prompt: str,
    user_prompt: str,
    model: Optional[str] = None,
    response_schema: Optional[dict[str, Any]] = None,
) -> Any:
    """Call Gemini in JSON mode, optionally constrained by ``response_schema``."""
    raw = call_llm(
        system_prompt,
        user_prompt,
        model=model,
        json_mode=True,
        response_schema=response_schema,
    )
    return json.loads(extract_json_block(raw))
