"""Merge candidate lists from every dimension into one deduplicated list.

Identity is ``(platform, case-folded handle without a leading "@")``.  The
first occurrence wins, so earlier dimensions and earlier tiers take
precedence.  The merged list is ordered by audience size, largest first;
Python's sort is stable, so equal audiences keep first-seen order and the
output is deterministic for a given input.
"""

from __future__ import annotations

from collections.abc import Iterable

from src.models.candidate import Candidate


def merge(
    candidate_lists: Iterable[Iterable[Candidate]],
    limit: int | None = None,
) -> list[Candidate]:
    """Deduplicate, rank by audience size, and truncate to ``limit``.

    ``merge(L) == merge(L + L)`` for any input, and an empty input yields
    an empty list.
    """
    seen: set[tuple[str, str]] = set()
    unique: list[Candidate] = []
    for candidates in candidate_lists:
        for candidate in candidates:
            key = candidate.identity()
            if key in seen:
                continue
            seen.add(key)
            unique.append(candidate)

    unique.sort(key=lambda c: c.audience_size, reverse=True)
    if limit is not None:
        return unique[: max(limit, 0)]
    return unique
