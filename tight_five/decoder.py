"""Turn raw model text into usable results.

Models are told to answer with bare JSON, but they don't always listen.
``decode_suggestions`` recovers an ordered list of strings in tiers:

  1. Strip ```/```json fences and surrounding whitespace.
  2. Strict JSON: a top-level array (or an object wrapping one under
     ``suggestions``) -> trimmed, non-empty strings.
  3. Line heuristic: split on newlines and bullet markers (•, *), strip a
     leading dash-family bullet and a leading "N." / "N)" / "N:" marker.
  4. Nothing usable -> DecodeError. An empty list is never returned.

``decode_object`` does the same job for the structured tasks that expect a
JSON object: fence strip, strict decode, then the outermost {...} span.
"""

import json
import logging
import re
from typing import Any

from tight_five.errors import DecodeError

logger = logging.getLogger(__name__)

MAX_GENERATED_SUGGESTIONS = 5

_FENCE_RE = re.compile(r"```(?:json)?\n?", re.IGNORECASE)
_SPLIT_RE = re.compile(r"[\n•*]")
_DASH_BULLET_RE = re.compile(r"^[-–—]\s*")
_NUMBER_MARKER_RE = re.compile(r"^\d+[.):]\s*")

_LIST_KEYS = ("suggestions", "options", "tags")


def strip_fences(raw: str) -> str:
    """Remove markdown code fences (optionally tagged json) and trim."""
    return _FENCE_RE.sub("", raw or "").strip()


def _clean_items(items: list[Any]) -> list[str]:
    cleaned: list[str] = []
    for item in items:
        if item is None:
            continue
        text = str(item).strip()
        if text:
            cleaned.append(text)
    return cleaned


def _decode_json_list(text: str) -> list[str] | None:
    """Strict tier. None means "not a JSON list"; [] means "a JSON list with nothing in it"."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    if isinstance(data, dict):
        for key in _LIST_KEYS:
            if isinstance(data.get(key), list):
                data = data[key]
                break
    if isinstance(data, str):
        data = [data]
    if not isinstance(data, list):
        return None
    return _clean_items(data)


def _decode_lines(text: str) -> list[str]:
    """Heuristic tier: one suggestion per line or bullet."""
    items: list[str] = []
    for fragment in _SPLIT_RE.split(text):
        fragment = _DASH_BULLET_RE.sub("", fragment.strip())
        fragment = _NUMBER_MARKER_RE.sub("", fragment).strip()
        if fragment:
            items.append(fragment)
    return items


def decode_suggestions(raw: str, limit: int | None = None) -> list[str]:
    """Decode a model response into a non-empty ordered list of strings.

    ``limit`` caps the result for calls that asked for a bounded number of
    suggestions. Raises DecodeError when nothing usable is left.
    """
    text = strip_fences(raw)
    if not text:
        raise DecodeError("Model response was empty")

    items = _decode_json_list(text)
    if items is None:
        logger.warning("Model response is not a JSON array; falling back to line parsing")
        items = _decode_lines(text)

    if not items:
        raise DecodeError("Model response contained no usable suggestions")
    if limit is not None:
        items = items[:limit]
    return items


def decode_object(raw: str) -> dict[str, Any]:
    """Decode a model response that should be a single JSON object."""
    text = strip_fences(raw)
    if not text:
        raise DecodeError("Model response was empty")

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = None
        start = text.find("{")
        end = text.rfind("}")
        if start != -1 and end > start:
            try:
                data = json.loads(text[start:end + 1])
            except json.JSONDecodeError:
                pass
        if data is None:
            logger.warning("Model response is not valid JSON: %r", text[:200])
            raise DecodeError("Model response is not valid JSON")

    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def extract_response_text(data: dict[str, Any]) -> str:
    """Pull completion text out of a provider response body.

    Understands OpenAI chat completions (``choices[].message.content``),
    OpenAI legacy completions (``choices[].text``), the OpenAI Responses API
    (``output_text`` or ``output[].text``) and KoboldCpp (``results[].text``).
    Returns "" when none of these carry text.
    """
    direct = data.get("output_text")
    if isinstance(direct, str) and direct.strip():
        return direct.strip()

    output = data.get("output")
    if isinstance(output, list):
        chunks = [
            item["text"] for item in output
            if isinstance(item, dict) and item.get("type") == "output_text" and item.get("text")
        ]
        if chunks:
            return "\n".join(chunks).strip()

    choices = data.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        message = choices[0].get("message")
        if isinstance(message, dict) and isinstance(message.get("content"), str):
            return message["content"]
        if isinstance(choices[0].get("text"), str):
            return choices[0]["text"]

    results = data.get("results")
    if isinstance(results, list) and results and isinstance(results[0], dict):
        if isinstance(results[0].get("text"), str):
            return results[0]["text"]

    return ""
