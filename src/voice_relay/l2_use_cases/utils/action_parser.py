"""Two-stage parsing of LLM action lists: strict JSON, then a line-split fallback."""

from __future__ import annotations

import json
import logging
import re

from voice_relay.l2_use_cases.utils.prompt_builder import ACTION_COUNT

log = logging.getLogger('vr.llm')

_FENCE_RE = re.compile(r'```(?:json)?', re.IGNORECASE)
_NUMBERING_RE = re.compile(r'^\s*(?:\d+[.)]|[-*])\s*')


def _strip_fences(text: str) -> str:
    return _FENCE_RE.sub('', text).strip()


def _parse_json(text: str) -> list[str] | None:
    try:
        parsed = json.loads(_strip_fences(text))
    except json.JSONDecodeError:
        return None
    if not isinstance(parsed, list):
        return None
    return [str(item).strip() for item in parsed if str(item).strip()]


def _parse_lines(text: str) -> list[str]:
    actions = []
    for line in _strip_fences(text).splitlines():
        cleaned = _NUMBERING_RE.sub('', line).strip().strip('"').strip()
        if cleaned:
            actions.append(cleaned)
    return actions


def parse_actions(text: str | None, *, limit: int = ACTION_COUNT) -> list[str]:
    """Extract up to *limit* action strings from a model response. Empty input yields []."""
    if not text or not text.strip():
        return []
    actions = _parse_json(text)
    if actions is None:
        log.debug('Actions response is not a JSON list, falling back to line split')
        actions = _parse_lines(text)
    return actions[:limit]
