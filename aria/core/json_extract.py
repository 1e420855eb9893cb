import json
import logging
import re
from typing import Any, Optional

from aria.core.exceptions import ParseError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_OPENERS = {"object": ("{", "}"), "array": ("[", "]")}


def extract_json(text: Optional[str], expect: Optional[str] = None) -> Any:
    """
    Parse a JSON object or array out of free-form model output.

    Prefers the body of a markdown code fence when one is present, then takes
    the span from the first opening bracket to the last matching closing
    bracket. ``expect`` may be "object" or "array" to pin the shape.

    Raises:
        ParseError: no JSON of the requested shape could be decoded.
    """
    if not text or not text.strip():
        raise ParseError("Empty AI response.", raw=text)

    candidate = text
    fence = _FENCE_RE.search(text)
    if fence and fence.group(1).strip():
        candidate = fence.group(1)

    kinds = [expect] if expect else _earliest_first(candidate)
    for kind in kinds:
        opener, closer = _OPENERS[kind]
        start = candidate.find(opener)
        end = candidate.rfind(closer)
        if start == -1 or end <= start:
            continue
        try:
            return json.loads(candidate[start:end + 1])
        except json.JSONDecodeError:
            continue

    logger.error(f"No parseable JSON in AI response: {text[:200]!r}")
    raise ParseError("Failed to parse AI response.", raw=text)


def _earliest_first(text: str) -> list:
    positions = []
    for kind, (opener, _) in _OPENERS.items():
        idx = text.find(opener)
        if idx != -1:
            positions.append((idx, kind))
    return [kind for _, kind in sorted(positions)]
