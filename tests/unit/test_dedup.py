"""Unit tests for src.services.dedup."""

from __future__ import annotations

from typing import Callable

from src.models.candidate import Candidate
from src.services.dedup import merge


class TestMerge:
    def test_empty(self) -> None:
        assert merge([]) == []
        assert merge([[], []]) == []

    def test_identity_is_case_and_at_insensitive(self, make_candidate: Callable[..., Candidate]) -> None:
        first = make_candidate("FitJane", audience_size=10)
        dup = make_candidate("@fitjane", audience_size=999)
        merged = merge([[first], [dup]])
        assert merged == [first]

    def test_same_handle_other_platform_kept(self, make_candidate: Callable[..., Candidate]) -> None:
        merged = merge([[make_candidate("jane", "instagram")], [make_candidate("jane", "twitter")]])
        assert len(merged) == 2

    def test_sorted_by_audience_stable(self, make_candidate: Callable[..., Candidate]) -> None:
        a = make_candidate("a", audience_size=100)
        b = make_candidate("b", audience_size=500)
        c = make_candidate("c", audience_size=100)
        assert [x.handle for x in merge([[a, b, c]])] == ["b", "a", "c"]

    def test_idempotent(self, make_candidate: Callable[..., Candidate]) -> None:
        lists = [
            [make_candidate("a", audience_size=3), make_candidate("b", audience_size=7)],
            [make_candidate("c", "twitter", audience_size=5)],
        ]
        assert merge(lists) == merge(lists + lists)
        assert merge([merge(lists)]) == merge(lists)

    def test_limit(self, make_candidate: Callable[..., Candidate]) -> None:
        lists = [[make_candidate(str(i), audience_size=i) for i in range(10)]]
        merged = merge(lists, limit=3)
        assert [c.handle for c in merged] == ["9", "8", "7"]
        assert merge(lists, limit=0) == []
