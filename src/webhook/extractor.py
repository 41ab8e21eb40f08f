"""Transcript extraction from voice-platform webhook payloads.

The platform has delivered transcripts in several shapes across versions:

1. ``{"transcript": "..."}``
2. ``{"data": {"transcript": ...}}``
3. ``{"conversation": {"transcript": ...}}``
4. ``{"messages": [{"role": ..., "content"|"text": ...}, ...]}``

Sources are checked in that order and the first non-empty one wins.
Extraction only ever concatenates text found in the payload.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from src.webhook.models import ExtractedTranscript, TranscriptCandidate, TranscriptSource

logger = logging.getLogger(__name__)

_TURN_TEXT_KEYS = ("content", "text", "message")


def render_turns(turns: list[Any]) -> str:
    """Join speaker-tagged turns as ``role: text`` lines, in order.

    Missing roles become ``unknown`` and missing text becomes an empty
    string. Entries that are not objects carry no speaker or text and are
    skipped.
    """
    lines: list[str] = []
    for turn in turns:
        if not isinstance(turn, Mapping):
            continue
        role = turn.get("role") or "unknown"
        text = ""
        for key in _TURN_TEXT_KEYS:
            value = turn.get(key)
            if value:
                text = value if isinstance(value, str) else str(value)
                break
        lines.append(f"{role}: {text}")
    return "\n".join(lines)


def _coerce(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return render_turns(value)
    return ""


def _nested(payload: Mapping[str, Any], container: str, source: TranscriptSource) -> TranscriptCandidate:
    inner = payload.get(container)
    if not isinstance(inner, Mapping) or "transcript" not in inner:
        return TranscriptCandidate(source=source, present=False)
    return TranscriptCandidate(source=source, present=True, text=_coerce(inner["transcript"]))


def transcript_candidates(payload: Mapping[str, Any]) -> list[TranscriptCandidate]:
    """Return every transcript location in precedence order, found or not."""
    candidates = [
        TranscriptCandidate(
            source=TranscriptSource.TOP_LEVEL,
            present="transcript" in payload,
            text=_coerce(payload.get("transcript")),
        ),
        _nested(payload, "data", TranscriptSource.DATA),
        _nested(payload, "conversation", TranscriptSource.CONVERSATION),
    ]

    messages = payload.get("messages")
    if isinstance(messages, list):
        candidates.append(TranscriptCandidate(
            source=TranscriptSource.MESSAGES, present=True, text=render_turns(messages),
        ))
    else:
        candidates.append(TranscriptCandidate(source=TranscriptSource.MESSAGES, present=False))

    return candidates


def extract_transcript(payload: Mapping[str, Any]) -> ExtractedTranscript | None:
    """Derive the canonical transcript, or None if no source holds any text."""
    for candidate in transcript_candidates(payload):
        if candidate.usable:
            logger.debug("Transcript taken from %s", candidate.source.value)
            return ExtractedTranscript(text=candidate.text, source=candidate.source)
        if candidate.present:
            logger.debug("Transcript field %s present but empty", candidate.source.value)
    return None
