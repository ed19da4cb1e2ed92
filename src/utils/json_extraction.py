"""Lenient JSON extraction from LLM responses.

LLMs wrap JSON in markdown fences, prepend chatty preambles, or return it
bare.  Each strategy below is a pure function that returns the decoded value
or ``None``; :func:`extract_json` tries them in order and the first success
wins.  No strategy raises for control flow.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)


def _loads_or_none(text: str) -> Any | None:
    try:
        return json.loads(text)
    except (ValueError, TypeError):
        return None


def _matches(value: Any, expect: type | None) -> bool:
    return value is not None and (expect is None or isinstance(value, expect))


def parse_direct(text: str, expect: type | None = None) -> Any | None:
    """Decode the whole (stripped) response as JSON."""
    stripped = text.strip()
    if not stripped:
        return None
    value = _loads_or_none(stripped)
    return value if _matches(value, expect) else None


def parse_fenced(text: str, expect: type | None = None) -> Any | None:
    """Decode the first markdown code fence holding a value of the expected type."""
    for match in _JSON_FENCE_RE.finditer(text):
        value = _loads_or_none(match.group(1).strip())
        if _matches(value, expect):
            return value
    return None


def parse_brace_scan(text: str, expect: type | None = None) -> Any | None:
    """Decode the outermost ``{...}`` or ``[...]`` span in the text.

    Whichever bracket opens first is tried first, so an array wrapping
    objects comes back whole.  ``rfind`` on the closing bracket keeps
    nested structures intact.
    """
    spans: list[tuple[int, int]] = []
    for opener, closer in (("{", "}"), ("[", "]")):
        start = text.find(opener)
        end = text.rfind(closer)
        if start != -1 and end > start:
            spans.append((start, end))
    for start, end in sorted(spans):
        value = _loads_or_none(text[start : end + 1])
        if _matches(value, expect):
            return value
    return None


STRATEGIES: tuple[Callable[[str, type | None], Any | None], ...] = (
    parse_direct,
    parse_fenced,
    parse_brace_scan,
)


def extract_json(text: str | None, expect: type | None = None) -> Any | None:
    """Return the first JSON value any strategy can decode, else ``None``.

    Parameters
    ----------
    text:
        Raw LLM response.
    expect:
        Optional ``dict`` or ``list``; values of another type are treated
        as a failed strategy and the next one is tried.
    """
    if not text:
        return None
    for strategy in STRATEGIES:
        value = strategy(text, expect)
        if value is not None:
            return value
    return None
