"""Tests for fenced code block unwrapping of model output."""

from __future__ import annotations

import json

from src.generation.unwrap import unwrap_fenced

PAYLOAD = json.dumps({"businessInfo": {"name": "Rapid Plumbing"}, "modern": "<!DOCTYPE html>"})


def test_bare_json_unchanged() -> None:
    assert unwrap_fenced(PAYLOAD) == PAYLOAD


def test_language_tagged_fence() -> None:
    text = f"```json\n{PAYLOAD}\n```"
    assert unwrap_fenced(text) == PAYLOAD


def test_bare_fence() -> None:
    text = f"```\n{PAYLOAD}\n```"
    assert unwrap_fenced(text) == PAYLOAD


def test_fenced_and_unfenced_parse_identically() -> None:
    variants = [PAYLOAD, f"```json\n{PAYLOAD}\n```", f"```\n{PAYLOAD}\n```"]
    parsed = [json.loads(unwrap_fenced(v)) for v in variants]
    assert parsed[0] == parsed[1] == parsed[2]


def test_prose_around_fence_discarded() -> None:
    text = f"Here are your websites:\n\n```json\n{PAYLOAD}\n```\n\nLet me know!"
    assert unwrap_fenced(text) == PAYLOAD


def test_first_fenced_segment_wins() -> None:
    text = '```json\n{"a": 1}\n```\nand also\n```json\n{"b": 2}\n```'
    assert json.loads(unwrap_fenced(text)) == {"a": 1}


def test_fence_on_same_line_as_json() -> None:
    assert unwrap_fenced(f"```{PAYLOAD}```") == PAYLOAD


def test_unclosed_fence_takes_remainder() -> None:
    assert unwrap_fenced(f"```json\n{PAYLOAD}\n") == PAYLOAD


def test_no_fence_returns_raw_text_unmodified() -> None:
    text = "  not json at all  "
    assert unwrap_fenced(text) == text
