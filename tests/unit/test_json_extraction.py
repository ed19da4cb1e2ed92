"""Unit tests for src.utils.json_extraction."""

from __future__ import annotations

import pytest

from src.utils.json_extraction import (
    extract_json,
    parse_brace_scan,
    parse_direct,
    parse_fenced,
)


class TestStrategies:
    def test_direct(self) -> None:
        assert parse_direct(' {"a": 1} ') == {"a": 1}
        assert parse_direct("not json") is None
        assert parse_direct("   ") is None

    def test_fenced(self) -> None:
        text = 'Here you go:\n```json\n{"score": 80}\n```\nThanks!'
        assert parse_fenced(text) == {"score": 80}
        assert parse_fenced("```\n[1, 2]\n```") == [1, 2]
        assert parse_fenced("no fence") is None

    def test_brace_scan_object(self) -> None:
        assert parse_brace_scan('Sure! {"a": [1, 2]} done') == {"a": [1, 2]}

    def test_brace_scan_array_of_objects_in_prose(self) -> None:
        assert parse_brace_scan('Result: [{"handle": "x"}] end') == [{"handle": "x"}]

    def test_brace_scan_expect_skips_first_span(self) -> None:
        text = 'Here are [3] ideas: {"name": "Spring Reset"}'
        assert parse_brace_scan(text, expect=dict) == {"name": "Spring Reset"}

    def test_fenced_expect_picks_matching_fence(self) -> None:
        text = "```\n{\"note\": 1}\n```\nthen\n```json\n[1]\n```"
        assert parse_fenced(text, expect=list) == [1]

    def test_brace_scan_nothing(self) -> None:
        assert parse_brace_scan("plain words") is None


class TestExtractJson:
    @pytest.mark.parametrize("text", [None, "", "no json here", "{broken"])
    def test_returns_none_when_nothing_parses(self, text: str | None) -> None:
        assert extract_json(text) is None

    def test_first_strategy_wins(self) -> None:
        assert extract_json('{"a": 1}') == {"a": 1}

    def test_expect_skips_wrong_type(self) -> None:
        text = 'The list is [1, 2] and the object {"k": "v"}'
        assert extract_json(text, expect=dict) == {"k": "v"}

    def test_expect_list_from_fence(self) -> None:
        text = '```json\n[{"handle": "jane"}]\n```'
        assert extract_json(text, expect=list) == [{"handle": "jane"}]

    def test_expect_unsatisfied(self) -> None:
        assert extract_json('{"a": 1}', expect=list) is None

    def test_expect_list_from_prose(self) -> None:
        text = 'Here is one account: [{"handle": "solo", "followers": 900}] hope it helps'
        assert extract_json(text, expect=list) == [{"handle": "solo", "followers": 900}]
