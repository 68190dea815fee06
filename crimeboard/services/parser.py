# =============================================================================
# Agent Response Parser: JSON Extraction from Free Text
# =============================================================================
#
# Agents are instructed to answer with JSON only, but the hosted model does
# not always comply: answers arrive wrapped in prose, fenced in markdown, or
# truncated mid-object. This module turns whatever came back into a dict.
#
# Accepted shapes:
#   1. Pure JSON                         '{"a": 1}'
#   2. JSON surrounded by prose          'Here you go: {"a": 1} Thanks!'
#   3. Anything else                     'not json' → {}
#
# The extraction is greedy: it takes the span from the first "{" to the last
# "}" and parses that. It never raises.
# =============================================================================

from __future__ import annotations

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_OBJECT_SPAN = re.compile(r"\{[\s\S]*\}")


def parse_agent_json(text: str | None) -> dict[str, Any]:
    """
    Extract a JSON object from an agent's raw response.

    Args:
        text: Raw completion text (may be None or empty).

    Returns:
        The parsed object, or {} when nothing parsable was found. A valid
        JSON value that is not an object (e.g., a bare list) also yields {}.
    """
    if not text or not text.strip():
        return {}

    match = _OBJECT_SPAN.search(text)
    candidate = match.group(0) if match else text

    try:
        parsed = json.loads(candidate)
    except (json.JSONDecodeError, ValueError):
        logger.warning(
            "Unparsable agent response (%d chars): %s",
            len(text), text[:120],
        )
        return {}

    if not isinstance(parsed, dict):
        logger.warning(
            "Agent response is %s, expected a JSON object",
            type(parsed).__name__,
        )
        return {}

    return parsed
