"""Audit logger: append-only JSON Lines with a SHA-256 hash chain.

Each line carries ``prev_hash``, the SHA-256 of the previous line, so any
edit or deletion inside the file breaks the chain at that point.
"""

from __future__ import annotations

import fcntl
import hashlib
import json
from dataclasses import dataclass
from pathlib import Path

from src.models import AuditEvent


@dataclass
class ChainValidationResult:
    valid: bool
    entries: int = 0
    broken_at_line: int | None = None


def validate_audit_chain(log_path: Path) -> ChainValidationResult:
    """Walk the log and report the first line whose prev_hash does not match."""
    text = log_path.read_text().strip()
    if not text:
        return ChainValidationResult(valid=True)

    lines = text.split("\n")
    prev_hash: str | None = None
    for number, line in enumerate(lines, start=1):
        try:
            entry = json.loads(line)
        except json.JSONDecodeError:
            return ChainValidationResult(valid=False, entries=len(lines), broken_at_line=number)
        if entry.get("prev_hash") != prev_hash:
            return ChainValidationResult(valid=False, entries=len(lines), broken_at_line=number)
        prev_hash = hashlib.sha256(line.encode()).hexdigest()

    return ChainValidationResult(valid=True, entries=len(lines))


class AuditLogger:
    """Hash-chained audit trail for webhook and generation outcomes."""

    def __init__(self, log_path: str) -> None:
        self.log_path = Path(log_path)
        self._last_hash: str | None = None
        if self.log_path.exists():
            text = self.log_path.read_text().strip()
            if text:
                last_line = text.split("\n")[-1]
                self._last_hash = hashlib.sha256(last_line.encode()).hexdigest()

    def log(self, event: AuditEvent) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

        data = json.loads(event.model_dump_json())
        data["prev_hash"] = self._last_hash
        line = json.dumps(data, separators=(",", ":"))

        with open(self.log_path, "a") as f:
            fcntl.flock(f, fcntl.LOCK_EX)
            try:
                f.write(line + "\n")
            finally:
                fcntl.flock(f, fcntl.LOCK_UN)

        self._last_hash = hashlib.sha256(line.encode()).hexdigest()
