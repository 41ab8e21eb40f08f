"""Tests for webhook transcript extraction."""

from __future__ import annotations

from src.webhook.extractor import extract_transcript, render_turns, transcript_candidates
from src.webhook.models import TranscriptSource


class TestPayloadShapes:
    """Each supported payload shape yields the canonical transcript."""

    def test_top_level_transcript(self) -> None:
        result = extract_transcript({"transcript": "Caller: I run a plumbing business"})
        assert result is not None
        assert result.text == "Caller: I run a plumbing business"
        assert result.source is TranscriptSource.TOP_LEVEL

    def test_data_transcript(self) -> None:
        result = extract_transcript({"data": {"transcript": "from data"}})
        assert result is not None
        assert result.text == "from data"
        assert result.source is TranscriptSource.DATA

    def test_conversation_transcript(self) -> None:
        result = extract_transcript({"conversation": {"transcript": "from conversation"}})
        assert result is not None
        assert result.text == "from conversation"
        assert result.source is TranscriptSource.CONVERSATION

    def test_messages_reconstructed(self) -> None:
        payload = {
            "messages": [
                {"role": "user", "content": "Hi"},
                {"role": "agent", "text": "Hello!"},
            ],
        }
        result = extract_transcript(payload)
        assert result is not None
        assert result.text == "user: Hi\nagent: Hello!"
        assert result.source is TranscriptSource.MESSAGES

    def test_messages_defaults_role_and_text(self) -> None:
        result = extract_transcript({"messages": [{"content": "no role"}, {"role": "agent"}]})
        assert result is not None
        assert result.text == "unknown: no role\nagent: "

    def test_top_level_transcript_is_verbatim(self) -> None:
        text = "  Owner: we open at 7am\n\nCaller: great  "
        result = extract_transcript({"transcript": text})
        assert result is not None
        assert result.text == text


class TestPrecedence:
    """First non-empty source wins, in fixed order."""

    def test_top_level_wins_over_nested(self) -> None:
        payload = {
            "transcript": "top",
            "data": {"transcript": "data"},
            "conversation": {"transcript": "conversation"},
            "messages": [{"role": "user", "content": "msg"}],
        }
        result = extract_transcript(payload)
        assert result is not None
        assert result.text == "top"

    def test_data_wins_over_conversation(self) -> None:
        payload = {
            "data": {"transcript": "data"},
            "conversation": {"transcript": "conversation"},
        }
        result = extract_transcript(payload)
        assert result is not None
        assert result.text == "data"

    def test_nested_wins_over_messages(self) -> None:
        payload = {
            "conversation": {"transcript": "conversation"},
            "messages": [{"role": "user", "content": "msg"}],
        }
        result = extract_transcript(payload)
        assert result is not None
        assert result.source is TranscriptSource.CONVERSATION

    def test_empty_top_level_falls_through(self) -> None:
        payload = {"transcript": "", "data": {"transcript": "data"}}
        result = extract_transcript(payload)
        assert result is not None
        assert result.text == "data"

    def test_whitespace_only_falls_through(self) -> None:
        payload = {"transcript": "   \n", "messages": [{"role": "user", "content": "Hi"}]}
        result = extract_transcript(payload)
        assert result is not None
        assert result.source is TranscriptSource.MESSAGES


class TestNoTranscript:
    def test_empty_payload(self) -> None:
        assert extract_transcript({}) is None

    def test_unrelated_fields(self) -> None:
        assert extract_transcript({"type": "call_started", "agent_id": "a1"}) is None

    def test_empty_messages_list(self) -> None:
        assert extract_transcript({"messages": []}) is None

    def test_nested_container_not_an_object(self) -> None:
        assert extract_transcript({"data": "transcript", "conversation": ["x"]}) is None

    def test_non_string_transcript_is_not_fabricated(self) -> None:
        assert extract_transcript({"transcript": 42}) is None


class TestCandidates:
    """Absent and present-but-empty fields are distinguished."""

    def test_absent_fields_marked_not_present(self) -> None:
        candidates = transcript_candidates({})
        assert [c.source for c in candidates] == list(TranscriptSource)
        assert all(not c.present for c in candidates)

    def test_present_but_empty(self) -> None:
        candidates = transcript_candidates({"transcript": "", "data": {"transcript": ""}})
        by_source = {c.source: c for c in candidates}
        assert by_source[TranscriptSource.TOP_LEVEL].present is True
        assert by_source[TranscriptSource.TOP_LEVEL].usable is False
        assert by_source[TranscriptSource.DATA].present is True
        assert by_source[TranscriptSource.CONVERSATION].present is False


class TestTurnLists:
    def test_nested_transcript_as_turn_list(self) -> None:
        payload = {
            "data": {
                "transcript": [
                    {"role": "agent", "message": "What does your business do?"},
                    {"role": "user", "message": "We fix pipes."},
                ],
            },
        }
        result = extract_transcript(payload)
        assert result is not None
        assert result.text == "agent: What does your business do?\nuser: We fix pipes."

    def test_content_preferred_over_text(self) -> None:
        assert render_turns([{"role": "user", "content": "a", "text": "b"}]) == "user: a"

    def test_non_object_turns_skipped(self) -> None:
        assert render_turns(["stray", {"role": "user", "content": "Hi"}]) == "user: Hi"
