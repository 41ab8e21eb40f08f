"""Recover a JSON answer from a possibly fenced model response."""

from __future__ import annotations

import re

_FENCE = "```"
# Optional language tag directly after the opening fence, e.g. ```json
_LANGUAGE_TAG = re.compile(r"[A-Za-z0-9_+-]*[ \t]*(?:\r?\n)?")


def unwrap_fenced(text: str) -> str:
    """Return the first fenced segment of ``text``, or ``text`` unchanged.

    Both ```` ```json ```` and bare ```` ``` ```` openers are accepted. An
    opener without a closer yields everything after the opener. Surrounding
    whitespace of an extracted segment is stripped.
    """
    start = text.find(_FENCE)
    if start == -1:
        return text

    body_start = _LANGUAGE_TAG.match(text, start + len(_FENCE)).end()  # type: ignore[union-attr]
    end = text.find(_FENCE, body_start)
    segment = text[body_start:] if end == -1 else text[body_start:end]
    return segment.strip()
