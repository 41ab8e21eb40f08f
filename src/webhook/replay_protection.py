"""At-most-once processing of webhook deliveries per conversation.

The voice platform retries callbacks; a conversation id that has already
been claimed is not generated again. Claims are released when processing
fails so that a retry can succeed.

Uses SQLite so claims survive restarts and are shared between workers on
one host.
"""

from __future__ import annotations

import sqlite3
import time
from collections.abc import Iterator
from contextlib import closing, contextmanager
from pathlib import Path


class ConversationReplayGuard:
    """SQLite-backed claim table keyed by conversation id."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        with closing(sqlite3.connect(self._db_path, timeout=5.0)) as conn, conn:
            yield conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """CREATE TABLE IF NOT EXISTS webhook_conversations (
                    conversation_id TEXT PRIMARY KEY,
                    claimed_at REAL NOT NULL
                )"""
            )

    def claim(self, conversation_id: str) -> bool:
        """Return True if this call claimed the id, False if already claimed."""
        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT OR IGNORE INTO webhook_conversations (conversation_id, claimed_at) "
                "VALUES (?, ?)",
                (conversation_id, time.time()),
            )
            return cursor.rowcount == 1

    def release(self, conversation_id: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM webhook_conversations WHERE conversation_id = ?",
                (conversation_id,),
            )
