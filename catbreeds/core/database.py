"""
Thread-safe SQLite cache for catbreeds.

This module stores one row per breed id. Descriptive columns are written by
the sync engine on every successful fetch; is_favorite is written only by
set_favorite(); last_updated is stamped on every upsert and never moves
backwards for a given id.

Schema:
    schema_version:     Single row holding DATABASE_VERSION
    breeds:             One row per breed id (remote fields + image + local state)

Staleness:
    There is no TTL. Callers decide freshness from get_last_update_time().

Usage:
    db = Database(cache_dir / "breeds.db")

    db.upsert_breeds(breeds)               # replace-on-conflict, one transaction
    page = db.get_breeds_paginated(10, 20) # ordered by name
    db.set_favorite("abys", True)
"""

import sqlite3
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Iterable

from catbreeds.api.models import CatBreed
from catbreeds.core.exceptions import CacheError


DATABASE_VERSION = 2


_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS breeds (
    id TEXT PRIMARY KEY NOT NULL,

    -- Remote-owned fields
    name TEXT NOT NULL,
    description TEXT,
    origin TEXT,
    temperament TEXT,
    life_span TEXT,
    reference_image_id TEXT,

    -- Resolved reference image
    image_url TEXT,
    image_width INTEGER,
    image_height INTEGER,
    image_mime_type TEXT,

    -- Locally owned
    is_favorite INTEGER NOT NULL DEFAULT 0,
    last_updated INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_breeds_name ON breeds(name);
CREATE INDEX IF NOT EXISTS idx_breeds_favorite ON breeds(is_favorite);
"""

_UPSERT_SQL = """
    INSERT INTO breeds (
        id, name, description, origin, temperament, life_span,
        reference_image_id, image_url, image_width, image_height,
        image_mime_type, is_favorite, last_updated
    ) VALUES (
        :id, :name, :description, :origin, :temperament, :life_span,
        :reference_image_id, :image_url, :image_width, :image_height,
        :image_mime_type, :is_favorite, :last_updated
    )
    ON CONFLICT(id) DO UPDATE SET
        name = excluded.name,
        description = excluded.description,
        origin = excluded.origin,
        temperament = excluded.temperament,
        life_span = excluded.life_span,
        reference_image_id = excluded.reference_image_id,
        image_url = excluded.image_url,
        image_width = excluded.image_width,
        image_height = excluded.image_height,
        image_mime_type = excluded.image_mime_type,
        last_updated = MAX(breeds.last_updated, excluded.last_updated)
"""


def now_millis() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


class Database:
    """
    Thread-safe SQLite breed cache.

    Uses a single persistent connection with thread locking for safety.
    All public methods acquire self._lock before executing, and wrap
    sqlite3 errors in CacheError.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._lock = threading.Lock()
        self._conn: sqlite3.Connection | None = None

        if not db_path.parent.exists():
            raise CacheError(
                f"Parent directory does not exist: {db_path.parent}",
                details={"path": str(db_path.parent)}
            )

        try:
            self._init_database()
        except sqlite3.Error as e:
            raise CacheError(
                f"Failed to initialize database: {e}",
                details={"path": str(db_path)}
            ) from e

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Get the persistent database connection as a context manager.

        The connection is created once and reused for all operations.
        """
        if self._conn is None:
            self._conn = sqlite3.connect(
                str(self.db_path),
                timeout=30.0,
                check_same_thread=False  # We handle thread safety with _lock
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode = WAL")
        yield self._conn

    @contextmanager
    def _locked(self, action: str) -> Generator[sqlite3.Connection, None, None]:
        """Acquire the lock and the connection, converting sqlite errors."""
        with self._lock:
            try:
                with self._get_connection() as conn:
                    yield conn
            except sqlite3.Error as e:
                raise CacheError(
                    f"Failed to {action}: {e}",
                    details={"path": str(self.db_path), "original_error": str(e)}
                ) from e

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __del__(self) -> None:
        if getattr(self, "_conn", None) is not None:
            try:
                self._conn.close()
            except sqlite3.Error:
                pass

    def _init_database(self) -> None:
        with self._get_connection() as conn:
            conn.executescript(_SCHEMA_SQL)

            cursor = conn.execute("SELECT version FROM schema_version LIMIT 1")
            row = cursor.fetchone()

            if row is None:
                conn.execute("INSERT INTO schema_version (version) VALUES (?)", (DATABASE_VERSION,))
            elif row[0] != DATABASE_VERSION:
                raise CacheError(
                    f"Database version mismatch: expected {DATABASE_VERSION}, got {row[0]}",
                    details={"expected": DATABASE_VERSION, "actual": row[0]}
                )
            conn.commit()

    @staticmethod
    def _to_breeds(rows: Iterable[sqlite3.Row]) -> list[CatBreed]:
        return [CatBreed.from_database_dict(dict(row)) for row in rows]

    # =========================================================================
    # Reads
    # =========================================================================

    def get_breed(self, breed_id: str) -> CatBreed | None:
        """Get a breed by id, or None if it is not cached."""
        with self._locked("read breed") as conn:
            cursor = conn.execute("SELECT * FROM breeds WHERE id = ?", (breed_id,))
            row = cursor.fetchone()
            return CatBreed.from_database_dict(dict(row)) if row else None

    def get_breeds_paginated(self, limit: int, offset: int) -> list[CatBreed]:
        """Get one window of breeds ordered by name ascending."""
        with self._locked("read breeds page") as conn:
            cursor = conn.execute(
                "SELECT * FROM breeds ORDER BY name ASC, id ASC LIMIT ? OFFSET ?",
                (limit, offset)
            )
            return self._to_breeds(cursor.fetchall())

    def get_all_breeds(self) -> list[CatBreed]:
        with self._locked("read breeds") as conn:
            cursor = conn.execute("SELECT * FROM breeds ORDER BY name ASC, id ASC")
            return self._to_breeds(cursor.fetchall())

    def search_breeds(self, query: str) -> list[CatBreed]:
        """
        Case-insensitive substring search on name, ordered by name.

        LIKE wildcards in the query are matched literally.
        """
        escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        with self._locked("search breeds") as conn:
            cursor = conn.execute(
                """
                SELECT * FROM breeds
                WHERE LOWER(name) LIKE '%' || LOWER(?) || '%' ESCAPE '\\'
                ORDER BY name ASC, id ASC
                """,
                (escaped,)
            )
            return self._to_breeds(cursor.fetchall())

    def get_favorite_breeds(self) -> list[CatBreed]:
        with self._locked("read favorite breeds") as conn:
            cursor = conn.execute(
                "SELECT * FROM breeds WHERE is_favorite = 1 ORDER BY name ASC, id ASC"
            )
            return self._to_breeds(cursor.fetchall())

    def count_breeds(self) -> int:
        with self._locked("count breeds") as conn:
            return conn.execute("SELECT COUNT(*) FROM breeds").fetchone()[0]

    def count_favorites(self) -> int:
        with self._locked("count favorite breeds") as conn:
            return conn.execute("SELECT COUNT(*) FROM breeds WHERE is_favorite = 1").fetchone()[0]

    def get_last_update_time(self) -> int | None:
        """Most recent last_updated across all rows, or None when empty."""
        with self._locked("read last update time") as conn:
            return conn.execute("SELECT MAX(last_updated) FROM breeds").fetchone()[0]

    # =========================================================================
    # Writes
    # =========================================================================

    def upsert_breeds(self, breeds: list[CatBreed], timestamp: int | None = None) -> None:
        """
        Insert or replace breeds in a single transaction.

        Remote-owned columns are taken from the given breeds. is_favorite is
        only written for new rows; an existing row keeps its stored flag, so
        a favorite toggled during a sync is never reverted. last_updated is
        set to timestamp (default: now) but never lowered for an existing row.
        Either all rows are written or none.
        """
        if not breeds:
            return

        stamp = timestamp if timestamp is not None else now_millis()
        rows = []
        for breed in breeds:
            row = breed.to_database_dict()
            row["last_updated"] = stamp
            rows.append(row)

        with self._locked("write breeds") as conn:
            try:
                conn.executemany(_UPSERT_SQL, rows)
                conn.commit()
            except sqlite3.Error:
                conn.rollback()
                raise

    def upsert_breed(self, breed: CatBreed, timestamp: int | None = None) -> None:
        self.upsert_breeds([breed], timestamp)

    def set_favorite(self, breed_id: str, is_favorite: bool) -> bool:
        """
        Update only the favorite flag of one row.

        Returns:
            True if a row was updated, False if the id is not cached.
        """
        with self._locked("update favorite status") as conn:
            cursor = conn.execute(
                "UPDATE breeds SET is_favorite = ? WHERE id = ?",
                (1 if is_favorite else 0, breed_id)
            )
            conn.commit()
            return cursor.rowcount > 0

    def clear_all(self) -> None:
        """Delete every cached breed, favorites included."""
        with self._locked("clear cache") as conn:
            conn.execute("DELETE FROM breeds")
            conn.commit()
