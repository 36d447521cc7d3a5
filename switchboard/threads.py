"""switchboard/threads.py

SQLite-backed conversation threads and reference notes.

A user has at most one active thread: not closed, and updated within the
idle window. Messages are stored as a JSON array of ``{role, content}``
objects, read once at the start of a turn and written once at the end.
Timestamps are stored as epoch seconds so the idle check compares numbers.
"""

from __future__ import annotations

# Standard Library
import dataclasses
import json
import logging
import sqlite3
from collections.abc import Callable, Generator, Iterable, Mapping
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _epoch(moment: datetime) -> float:
    """Seconds since the epoch; naive datetimes are taken to be UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp()


@dataclasses.dataclass(slots=True)
class ConversationThread:
    """A stored conversation.

    Attributes:
        id: Row id of the thread.
        user_id: Owner of the thread.
        messages: Ordered ``{role, content}`` history.
    """

    id: int
    user_id: str
    messages: list[dict[str, Any]] = dataclasses.field(default_factory=list)


@dataclasses.dataclass(frozen=True, slots=True)
class Note:
    """A reference note offered to the single agent as extra context."""

    id: int
    title: str
    content: str
    created_at: float


class ThreadStore:
    """Persists conversation threads and notes in a SQLite file."""

    def __init__(
        self,
        database_path: str,
        idle_minutes: int = 30,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the store and create its tables.

        Args:
            database_path: Path to the SQLite database file.
            idle_minutes: Minutes without an update after which a thread is
                no longer returned as active.
            clock: Returns the current time; naive values are read as UTC.
                Defaults to the system clock.
        """
        self.database_path = database_path
        self.idle_window = timedelta(minutes=idle_minutes)
        self.clock = clock or _utcnow
        self.create_tables()

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Yield a connection that commits on success and rolls back on error.

        Raises:
            sqlite3.Error: Propagated after rollback.
        """
        conn = sqlite3.connect(self.database_path)
        try:
            yield conn
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            logger.exception("Database operation failed, transaction rolled back.")
            raise
        finally:
            conn.close()

    def _now(self) -> float:
        return _epoch(self.clock())

    def create_tables(self) -> None:
        """Create the ``threads`` and ``notes`` tables if missing."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS threads (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    messages TEXT NOT NULL DEFAULT '[]',
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL,
                    closed_at REAL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS notes (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    content TEXT NOT NULL,
                    created_at REAL NOT NULL
                )
            """)

    # ----------------------------------------------------------------
    # Threads
    # ----------------------------------------------------------------

    def get_or_create_active(self, user_id: str) -> ConversationThread:
        """Return the user's active thread, opening a new one if needed.

        Args:
            user_id: Thread owner.

        Returns:
            The most recently updated open thread inside the idle window, or
            a fresh empty thread.
        """
        now = self.clock()
        cutoff = _epoch(now - self.idle_window)
        with self._get_connection() as conn:
            row = conn.execute(
                """
                SELECT id, messages FROM threads
                WHERE user_id = ? AND closed_at IS NULL AND updated_at > ?
                ORDER BY updated_at DESC, id DESC
                LIMIT 1
                """,
                (user_id, cutoff),
            ).fetchone()
            if row is not None:
                return ConversationThread(row[0], user_id, _decode(row[1]))

            cursor = conn.execute(
                "INSERT INTO threads (user_id, messages, created_at, updated_at) "
                "VALUES (?, '[]', ?, ?)",
                (user_id, _epoch(now), _epoch(now)),
            )
            thread_id = cursor.lastrowid
        logger.info("Opened thread %s for user %s", thread_id, user_id)
        return ConversationThread(thread_id, user_id, [])

    def append(self, thread: ConversationThread, role: str, content: str) -> None:
        """Append a message to the in-memory thread; call :meth:`persist` to save."""
        thread.messages.append({"role": role, "content": content})

    def persist(self, thread_id: int, messages: Iterable[Mapping[str, Any]]) -> None:
        """Overwrite a thread's stored messages and bump its update time."""
        payload = json.dumps([dict(message) for message in messages], ensure_ascii=False)
        with self._get_connection() as conn:
            conn.execute(
                "UPDATE threads SET messages = ?, updated_at = ? WHERE id = ?",
                (payload, self._now(), thread_id),
            )

    def close(self, thread_id: int) -> None:
        """Mark a thread closed so it is never returned as active again."""
        with self._get_connection() as conn:
            conn.execute(
                "UPDATE threads SET closed_at = ? WHERE id = ? AND closed_at IS NULL",
                (self._now(), thread_id),
            )
        logger.info("Closed thread %s", thread_id)

    def load(self, thread_id: int) -> ConversationThread | None:
        """Read a thread by id regardless of its state."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT id, user_id, messages FROM threads WHERE id = ?",
                (thread_id,),
            ).fetchone()
        if row is None:
            return None
        return ConversationThread(row[0], row[1], _decode(row[2]))

    # ----------------------------------------------------------------
    # Notes
    # ----------------------------------------------------------------

    def add_note(self, title: str, content: str) -> int:
        """Store a note and return its id."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                "INSERT INTO notes (title, content, created_at) VALUES (?, ?, ?)",
                (title, content, self._now()),
            )
            return cursor.lastrowid

    def notes(self) -> list[Note]:
        """All notes, newest first."""
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT id, title, content, created_at FROM notes "
                "ORDER BY created_at DESC, id DESC"
            ).fetchall()
        return [Note(*row) for row in rows]

    def notes_context(self) -> str:
        """Render the notes as a numbered system-prompt block, or ``""``."""
        notes = self.notes()
        if not notes:
            return ""
        lines = [
            f"{index}. **{note.title}** - {note.content}"
            for index, note in enumerate(notes, start=1)
        ]
        return "Available notes from database:\n" + "\n".join(lines)


def _decode(raw: str | None) -> list[dict[str, Any]]:
    """Decode a stored message array, treating corrupt data as empty."""
    try:
        decoded = json.loads(raw or "[]")
    except json.JSONDecodeError:
        logger.warning("Stored thread messages are not valid JSON; starting empty")
        return []
    return decoded if isinstance(decoded, list) else []
