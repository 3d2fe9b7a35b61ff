# src/sqlite_repository.py
"""SQLite content repository.

Implements the ContentRepository protocol on a single ``posts`` table so the
batch command can run against a local content store.
"""

import sqlite3
from collections.abc import Iterator
from contextlib import closing, contextmanager

from models import ContentRecord, RecordId, RepositoryError
from utils import log_error


class SQLiteContentRepository:
    """Thin SQLite wrapper that satisfies the ContentRepository contract.

    Records read through ``get`` are cached by id until ``invalidate_cache``
    is called for them. ``fetch`` always reads from the database.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._cache: dict[RecordId, ContentRecord] = {}

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open a connection that commits on success and is always closed."""
        with closing(sqlite3.connect(self._db_path)) as conn:
            conn.row_factory = sqlite3.Row
            with conn:
                yield conn

    def init_db(self) -> None:
        """Create the posts table if it does not exist.

        Raises:
            RepositoryError: If the database cannot be opened or written.
        """
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS posts (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        post_type TEXT NOT NULL,
                        post_status TEXT NOT NULL,
                        post_content TEXT NOT NULL DEFAULT ''
                    )
                    """
                )
        except sqlite3.Error as e:
            raise RepositoryError(f"Failed to initialize content store: {e}") from e

    def insert(self, post_type: str, body: str, status: str = "publish") -> RecordId:
        """Insert a record and return its id."""
        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO posts (post_type, post_status, post_content) VALUES (?, ?, ?)",
                (post_type, status, body),
            )
            return RecordId(cursor.lastrowid)

    @staticmethod
    def _to_record(row: sqlite3.Row) -> ContentRecord:
        return ContentRecord(
            id=RecordId(row["id"]),
            type=row["post_type"],
            body=row["post_content"],
            status=row["post_status"],
        )

    def get(self, record_id: RecordId) -> ContentRecord | None:
        """Return a record by id, served from cache when possible."""
        if record_id in self._cache:
            return self._cache[record_id]

        with self._connect() as conn:
            row = conn.execute(
                "SELECT id, post_type, post_status, post_content FROM posts WHERE id = ?",
                (record_id,),
            ).fetchone()

        if row is None:
            return None
        record = self._to_record(row)
        self._cache[record.id] = record
        return record

    def fetch(self, types: tuple[str, ...], statuses: tuple[str, ...]) -> list[ContentRecord]:
        """Return all records of the given types and statuses, ordered by id.

        Raises:
            RepositoryError: If the database cannot be queried.
        """
        if not types or not statuses:
            return []

        type_marks = ",".join("?" * len(types))
        status_marks = ",".join("?" * len(statuses))
        sql = (
            "SELECT id, post_type, post_status, post_content FROM posts "
            f"WHERE post_type IN ({type_marks}) AND post_status IN ({status_marks}) "
            "ORDER BY id"
        )
        try:
            with self._connect() as conn:
                rows = conn.execute(sql, (*types, *statuses)).fetchall()
        except sqlite3.Error as e:
            raise RepositoryError(f"Failed to fetch posts: {e}") from e

        return [self._to_record(row) for row in rows]

    def update_body(self, record_id: RecordId, new_body: str) -> bool:
        """Write a new body. Returns False if the write failed or matched no row."""
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    "UPDATE posts SET post_content = ? WHERE id = ?",
                    (new_body, record_id),
                )
                updated = cursor.rowcount == 1
        except sqlite3.Error as e:
            log_error("repository_update_failed", e, record_id=record_id)
            return False
        return updated

    def invalidate_cache(self, record_id: RecordId) -> None:
        self._cache.pop(record_id, None)
