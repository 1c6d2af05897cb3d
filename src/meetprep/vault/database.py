"""In-memory SQLite FTS5 index over vault documents."""

import re
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from meetprep.vault.models import IndexedDocument, SearchHit

SCHEMA_SQL = """
-- meetprep search index
-- This index is disposable: it regenerates from the vault on every scan

-- Documents table
CREATE TABLE IF NOT EXISTS documents (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    path        TEXT NOT NULL UNIQUE,
    title       TEXT NOT NULL DEFAULT '',
    content     TEXT NOT NULL DEFAULT '',
    tags        TEXT NOT NULL DEFAULT '',
    frontmatter TEXT NOT NULL DEFAULT ''
);

-- FTS5 virtual table, prefix indexes speed up partial-word queries
CREATE VIRTUAL TABLE IF NOT EXISTS documents_fts USING fts5(
    title,
    content,
    tags,
    frontmatter,
    content='documents',
    content_rowid='id',
    tokenize='unicode61 remove_diacritics 2',
    prefix='2 3'
);

-- Triggers to keep FTS5 synchronized
CREATE TRIGGER IF NOT EXISTS documents_ai AFTER INSERT ON documents BEGIN
    INSERT INTO documents_fts(rowid, title, content, tags, frontmatter)
    VALUES (NEW.id, NEW.title, NEW.content, NEW.tags, NEW.frontmatter);
END;

CREATE TRIGGER IF NOT EXISTS documents_ad AFTER DELETE ON documents BEGIN
    INSERT INTO documents_fts(documents_fts, rowid, title, content, tags, frontmatter)
    VALUES ('delete', OLD.id, OLD.title, OLD.content, OLD.tags, OLD.frontmatter);
END;

CREATE TRIGGER IF NOT EXISTS documents_au AFTER UPDATE ON documents BEGIN
    INSERT INTO documents_fts(documents_fts, rowid, title, content, tags, frontmatter)
    VALUES ('delete', OLD.id, OLD.title, OLD.content, OLD.tags, OLD.frontmatter);
    INSERT INTO documents_fts(rowid, title, content, tags, frontmatter)
    VALUES (NEW.id, NEW.title, NEW.content, NEW.tags, NEW.frontmatter);
END;
"""

TERM_PATTERN = re.compile(r"\w+", re.UNICODE)


def build_match_expression(query: str, max_terms: int = 32) -> str:
    """
    Turn free text into an FTS5 MATCH expression.

    Every word becomes a quoted prefix term (``"acm"*`` matches "acme") and
    terms are OR-combined, so bm25 ranks documents matching more terms
    higher. Returns "" when the query has no words.
    """
    terms = list(dict.fromkeys(t.lower() for t in TERM_PATTERN.findall(query)))
    return " OR ".join(f'"{term}"*' for term in terms[:max_terms])


class SearchIndex:
    """SQLite FTS5 index for vault documents.

    The database lives in memory on a single connection. Every cursor holds
    the same lock, so a search never runs while a write is half-applied.
    """

    # bm25 weights for (title, content, tags, frontmatter)
    COLUMN_WEIGHTS = (4.0, 1.0, 2.0, 0.5)

    def __init__(self):
        self._lock = threading.RLock()
        self._conn: sqlite3.Connection | None = None

    def _get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(":memory:", check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(SCHEMA_SQL)
        return self._conn

    @contextmanager
    def _read_cursor(self) -> Iterator[sqlite3.Cursor]:
        """Get a cursor for read operations."""
        with self._lock:
            cursor = self._get_connection().cursor()
            try:
                yield cursor
            finally:
                cursor.close()

    @contextmanager
    def _write_cursor(self) -> Iterator[sqlite3.Cursor]:
        """Get a cursor for write operations, committed on success."""
        with self._lock:
            conn = self._get_connection()
            cursor = conn.cursor()
            try:
                yield cursor
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                cursor.close()

    def initialize(self) -> None:
        """Create the schema."""
        self._get_connection()

    def close(self) -> None:
        """Close the connection, discarding the index."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def clear(self) -> None:
        """Remove every document."""
        with self._write_cursor() as cursor:
            cursor.execute("DELETE FROM documents")
            cursor.execute("INSERT INTO documents_fts(documents_fts) VALUES('rebuild')")

    def upsert(self, doc: IndexedDocument) -> None:
        """Insert or replace the document stored under ``doc.path``."""
        with self._write_cursor() as cursor:
            cursor.execute(
                """INSERT INTO documents (path, title, content, tags, frontmatter)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(path) DO UPDATE SET
                    title = excluded.title,
                    content = excluded.content,
                    tags = excluded.tags,
                    frontmatter = excluded.frontmatter
                """,
                (doc.path, doc.title, doc.content, doc.tags, doc.frontmatter),
            )

    def delete(self, path: str) -> bool:
        """Delete a document by path. Returns True if it existed."""
        with self._write_cursor() as cursor:
            cursor.execute("DELETE FROM documents WHERE path = ?", (path,))
            return cursor.rowcount > 0

    def count(self) -> int:
        with self._read_cursor() as cursor:
            cursor.execute("SELECT COUNT(*) AS n FROM documents")
            return cursor.fetchone()["n"]

    def contains(self, path: str) -> bool:
        with self._read_cursor() as cursor:
            cursor.execute("SELECT 1 FROM documents WHERE path = ?", (path,))
            return cursor.fetchone() is not None

    def search(self, query: str, limit: int = 10) -> list[SearchHit]:
        """
        Search all fields and return document paths ranked by bm25.

        Scores are the negated bm25 value, so higher is better.
        """
        expression = build_match_expression(query)
        if not expression or limit <= 0:
            return []

        weights = ", ".join(str(w) for w in self.COLUMN_WEIGHTS)
        search_query = f"""
            SELECT d.path AS path, bm25(documents_fts, {weights}) AS rank_score
            FROM documents_fts
            JOIN documents d ON documents_fts.rowid = d.id
            WHERE documents_fts MATCH ?
            ORDER BY rank_score
            LIMIT ?
        """
        with self._read_cursor() as cursor:
            cursor.execute(search_query, (expression, limit))
            return [
                SearchHit(path=row["path"], score=-row["rank_score"])
                for row in cursor.fetchall()
            ]
