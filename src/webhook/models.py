"""Data models for the webhook transcript pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TranscriptSource(str, Enum):
    """Where in a webhook payload a transcript was found, in precedence order."""

    TOP_LEVEL = "transcript"
    DATA = "data.transcript"
    CONVERSATION = "conversation.transcript"
    MESSAGES = "messages"


@dataclass(frozen=True)
class TranscriptCandidate:
    """One possible transcript location and what it held.

    ``present`` is False when the field was missing from the payload; a
    present field may still be empty.
    """

    source: TranscriptSource
    present: bool
    text: str = ""

    @property
    def usable(self) -> bool:
        return self.present and bool(self.text.strip())


@dataclass(frozen=True)
class ExtractedTranscript:
    """Canonical transcript derived from a webhook payload."""

    text: str
    source: TranscriptSource
