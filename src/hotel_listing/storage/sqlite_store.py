"""SQLite-backed data store gateway for hotels, rooms and reviews."""
from __future__ import annotations

import asyncio
import logging
import re
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Sequence, TypeVar

from hotel_listing.config.settings import VALID_JOURNAL_MODES, VALID_SYNCHRONOUS_MODES
from hotel_listing.hotels.exceptions import GatewayError

ISO_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"
SCHEMA_VERSION = 1

ROOM_POST_TYPE = "room"
REVIEW_POST_TYPE = "review"
RATING_META_KEY = "rating"
ROOM_META_KEYS = {
    "price": "price",
    "surface": "surface",
    "bedrooms": "bedrooms_count",
    "bathrooms": "bathrooms_count",
    "type": "type",
    "image": "coverImage",
}

_PREFIX_PATTERN = re.compile(r"^[A-Za-z0-9_]*$")

T = TypeVar("T")

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).strftime(ISO_FORMAT)


def _stringify(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


class SqliteStore:
    """Thin async wrapper over sqlite3 implementing the data store gateway."""

    _SQLITE_PARAMETER_LIMIT = 900

    def __init__(
        self,
        db_path: Path,
        *,
        busy_timeout_ms: int = 2000,
        journal_mode: str | None = "wal",
        synchronous: str | None = "normal",
        table_prefix: str = "wp_",
        retries: int = 2,
        retry_backoff_s: float = 0.05,
    ) -> None:
        if not _PREFIX_PATTERN.match(table_prefix):
            raise ValueError(f"Invalid table prefix '{table_prefix}'")
        self._path = db_path
        self._busy_timeout_ms = busy_timeout_ms
        self._journal_mode = self._normalize_journal_mode(journal_mode)
        self._synchronous = self._normalize_synchronous(synchronous)
        self._prefix = table_prefix
        self._retries = max(retries, 0)
        self._retry_backoff_s = max(retry_backoff_s, 0.0)
        self._connection: sqlite3.Connection | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings) -> "SqliteStore":
        return cls(settings.sqlite_path, **settings.store_kwargs())

    # ------------------------------------------------------------------
    # lifecycle

    async def initialize(self) -> None:
        if self._connection is not None:
            return
        async with self._lock:
            if self._connection is None:
                conn = await asyncio.to_thread(self._open_connection)
                self._connection = conn

    async def close(self) -> None:
        if self._connection is None:
            return
        conn = self._connection
        self._connection = None
        await asyncio.to_thread(conn.close)

    async def __aenter__(self) -> "SqliteStore":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, exc_tb) -> None:
        await self.close()

    def _open_connection(self) -> sqlite3.Connection:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.execute(f"PRAGMA busy_timeout = {int(max(self._busy_timeout_ms, 0))};")
        if self._journal_mode:
            conn.execute(f"PRAGMA journal_mode = {self._journal_mode.upper()};")
        if self._synchronous:
            conn.execute(f"PRAGMA synchronous = {self._synchronous.upper()};")
        try:
            self._apply_migrations(conn)
        except sqlite3.OperationalError as exc:
            conn.close()
            logger.error(
                "SQLite migration failed (path=%s, timeout_ms=%s): %s",
                self._path,
                self._busy_timeout_ms,
                exc,
            )
            raise
        return conn

    @staticmethod
    def _normalize_journal_mode(value: str | None) -> str | None:
        if value is None:
            return None
        mode = value.strip().lower()
        if not mode:
            return None
        if mode not in VALID_JOURNAL_MODES:
            raise ValueError(
                f"Unsupported SQLite journal_mode '{value}'. Expected one of: {sorted(VALID_JOURNAL_MODES)}"
            )
        return mode

    @staticmethod
    def _normalize_synchronous(value: str | None) -> str | None:
        if value is None:
            return None
        mode = value.strip().lower()
        if not mode:
            return None
        if mode not in VALID_SYNCHRONOUS_MODES:
            raise ValueError(
                f"Unsupported SQLite synchronous mode '{value}'. Expected one of: {sorted(VALID_SYNCHRONOUS_MODES)}"
            )
        return mode

    def _table(self, name: str) -> str:
        return f"{self._prefix}{name}"

    def _apply_migrations(self, conn: sqlite3.Connection) -> None:
        meta_table = self._table("schema_meta")
        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {meta_table} (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );
            """
        )
        current = self._get_schema_version(conn)
        if current >= SCHEMA_VERSION:
            return
        for version in range(current + 1, SCHEMA_VERSION + 1):
            script = MIGRATIONS.get(version)
            if not script:
                raise RuntimeError(f"Missing migration script for version {version}")
            conn.executescript(script.format(prefix=self._prefix))
            conn.execute(
                f"INSERT INTO {meta_table}(key, value) VALUES('schema_version', ?)\n"
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (str(version),),
            )
        conn.commit()

    def _get_schema_version(self, conn: sqlite3.Connection) -> int:
        cursor = conn.execute(f"SELECT value FROM {self._table('schema_meta')} WHERE key='schema_version'")
        row = cursor.fetchone()
        if not row:
            return 0
        try:
            return int(row[0])
        except (TypeError, ValueError):
            return 0

    def _require_connection(self) -> sqlite3.Connection:
        if not self._connection:
            raise RuntimeError("SQLite store has not been initialised")
        return self._connection

    async def _read(self, label: str, op: Callable[[], T]) -> T:
        attempt = 0
        while True:
            try:
                async with self._lock:
                    return await asyncio.to_thread(op)
            except sqlite3.OperationalError as exc:
                if attempt >= self._retries:
                    raise GatewayError(f"SQLite read '{label}' failed after {attempt + 1} attempts: {exc}") from exc
                delay = self._retry_backoff_s * (2**attempt)
                attempt += 1
                logger.warning(
                    "SQLite read '%s' failed (%s); retrying in %.3fs (attempt %s)",
                    label,
                    exc,
                    delay,
                    attempt + 1,
                )
                await asyncio.sleep(delay)

    async def _write(self, op: Callable[[], T]) -> T:
        async with self._lock:
            return await asyncio.to_thread(op)

    def _query_in_chunks(
        self,
        conn: sqlite3.Connection,
        sql_template: str,
        ids: Sequence[int],
        prefix_params: Sequence[Any] = (),
    ) -> list[sqlite3.Row]:
        rows: list[sqlite3.Row] = []
        # Deduplicate while preserving order to keep parameter counts low.
        unique_ids = list(dict.fromkeys(ids))
        for start in range(0, len(unique_ids), self._SQLITE_PARAMETER_LIMIT):
            chunk = unique_ids[start : start + self._SQLITE_PARAMETER_LIMIT]
            placeholders = ",".join("?" for _ in chunk)
            cursor = conn.execute(sql_template.format(placeholders=placeholders), (*prefix_params, *chunk))
            rows.extend(cursor.fetchall())
        return rows

    # ------------------------------------------------------------------
    # gateway reads

    async def fetch_hotels(self) -> List[Dict[str, Any]]:
        def _op() -> List[Dict[str, Any]]:
            conn = self._require_connection()
            cursor = conn.execute(f"SELECT ID, display_name FROM {self._table('users')} ORDER BY ID")
            return [dict(row) for row in cursor.fetchall()]

        return await self._read("hotels", _op)

    async def fetch_attributes(self, hotel_id: int) -> List[Dict[str, Any]]:
        def _op() -> List[Dict[str, Any]]:
            conn = self._require_connection()
            cursor = conn.execute(
                f"""
                SELECT meta_key, meta_value FROM {self._table('usermeta')}
                WHERE user_id = ?
                ORDER BY umeta_id
                """,
                (hotel_id,),
            )
            return [dict(row) for row in cursor.fetchall()]

        return await self._read("attributes", _op)

    async def fetch_review_stats(self, hotel_id: int) -> Dict[str, Any]:
        def _op() -> Dict[str, Any]:
            conn = self._require_connection()
            cursor = conn.execute(
                f"""
                SELECT COUNT(pm.meta_value) AS count, AVG(CAST(pm.meta_value AS REAL)) AS average
                FROM {self._table('posts')} p
                INNER JOIN {self._table('postmeta')} pm ON p.ID = pm.post_id
                WHERE pm.meta_key = ? AND p.post_author = ?
                """,
                (RATING_META_KEY, hotel_id),
            )
            row = cursor.fetchone()
            return {"count": int(row["count"] or 0), "average": row["average"]}

        return await self._read("review_stats", _op)

    async def fetch_rooms(self, hotel_id: int) -> List[Dict[str, Any]]:
        def _op() -> List[Dict[str, Any]]:
            conn = self._require_connection()
            cursor = conn.execute(self._rooms_sql("= ?"), (ROOM_POST_TYPE, hotel_id))
            return [dict(row) for row in cursor.fetchall()]

        return await self._read("rooms", _op)

    def _rooms_sql(self, author_clause: str) -> str:
        columns = ",\n".join(
            f"MAX(CASE WHEN pm.meta_key = '{meta_key}' THEN pm.meta_value END) AS {column}"
            for column, meta_key in ROOM_META_KEYS.items()
        )
        return f"""
            SELECT p.ID, p.post_author AS hotel_id, p.post_title,
                   {columns}
            FROM {self._table('posts')} p
            LEFT JOIN {self._table('postmeta')} pm ON pm.post_id = p.ID
            WHERE p.post_type = ? AND p.post_author {author_clause}
            GROUP BY p.ID
            ORDER BY p.ID
        """

    # ------------------------------------------------------------------
    # bulk reads

    async def fetch_attributes_bulk(self, hotel_ids: Sequence[int]) -> Dict[int, List[Dict[str, Any]]]:
        if not hotel_ids:
            return {}

        def _op() -> Dict[int, List[Dict[str, Any]]]:
            conn = self._require_connection()
            rows = self._query_in_chunks(
                conn,
                f"""
                SELECT user_id, meta_key, meta_value FROM {self._table('usermeta')}
                WHERE user_id IN ({{placeholders}})
                ORDER BY umeta_id
                """,
                hotel_ids,
            )
            grouped: Dict[int, List[Dict[str, Any]]] = {}
            for row in rows:
                grouped.setdefault(int(row["user_id"]), []).append(
                    {"meta_key": row["meta_key"], "meta_value": row["meta_value"]}
                )
            return grouped

        return await self._read("attributes_bulk", _op)

    async def fetch_review_stats_bulk(self, hotel_ids: Sequence[int]) -> Dict[int, Dict[str, Any]]:
        if not hotel_ids:
            return {}

        def _op() -> Dict[int, Dict[str, Any]]:
            conn = self._require_connection()
            rows = self._query_in_chunks(
                conn,
                f"""
                SELECT p.post_author AS hotel_id,
                       COUNT(pm.meta_value) AS count,
                       AVG(CAST(pm.meta_value AS REAL)) AS average
                FROM {self._table('posts')} p
                INNER JOIN {self._table('postmeta')} pm ON p.ID = pm.post_id
                WHERE pm.meta_key = ? AND p.post_author IN ({{placeholders}})
                GROUP BY p.post_author
                """,
                hotel_ids,
                prefix_params=(RATING_META_KEY,),
            )
            return {
                int(row["hotel_id"]): {"count": int(row["count"] or 0), "average": row["average"]}
                for row in rows
            }

        return await self._read("review_stats_bulk", _op)

    async def fetch_rooms_bulk(self, hotel_ids: Sequence[int]) -> Dict[int, List[Dict[str, Any]]]:
        if not hotel_ids:
            return {}

        def _op() -> Dict[int, List[Dict[str, Any]]]:
            conn = self._require_connection()
            rows = self._query_in_chunks(
                conn,
                self._rooms_sql("IN ({placeholders})"),
                hotel_ids,
                prefix_params=(ROOM_POST_TYPE,),
            )
            grouped: Dict[int, List[Dict[str, Any]]] = {}
            for row in rows:
                grouped.setdefault(int(row["hotel_id"]), []).append(dict(row))
            return grouped

        return await self._read("rooms_bulk", _op)

    # ------------------------------------------------------------------
    # seeding

    async def add_hotel(self, name: str, *, login: str | None = None) -> int:
        def _op() -> int:
            conn = self._require_connection()
            with conn:
                cursor = conn.execute(
                    f"INSERT INTO {self._table('users')}(user_login, display_name, user_registered) VALUES(?, ?, ?)",
                    (login or name.lower().replace(" ", "-"), name, _utc_now()),
                )
                return int(cursor.lastrowid)

        return await self._write(_op)

    async def set_attributes(self, hotel_id: int, attributes: Mapping[str, Any]) -> None:
        def _op() -> None:
            conn = self._require_connection()
            table = self._table("usermeta")
            with conn:
                for key, value in attributes.items():
                    conn.execute(f"DELETE FROM {table} WHERE user_id=? AND meta_key=?", (hotel_id, key))
                    conn.execute(
                        f"INSERT INTO {table}(user_id, meta_key, meta_value) VALUES(?, ?, ?)",
                        (hotel_id, key, _stringify(value)),
                    )

        await self._write(_op)

    async def add_room(
        self,
        hotel_id: int,
        *,
        title: str,
        price: float,
        surface: float,
        bedrooms: int,
        bathrooms: int,
        type: str,
        image: str | None = None,
    ) -> int:
        values = {
            "price": price,
            "surface": surface,
            "bedrooms": bedrooms,
            "bathrooms": bathrooms,
            "type": type,
            "image": image,
        }
        meta = {ROOM_META_KEYS[column]: value for column, value in values.items() if value is not None}
        return await self._insert_post(hotel_id, ROOM_POST_TYPE, title, None, meta)

    async def add_review(
        self,
        hotel_id: int,
        rating: int,
        *,
        title: str | None = None,
        content: str | None = None,
    ) -> int:
        return await self._insert_post(
            hotel_id, REVIEW_POST_TYPE, title or "Review", content, {RATING_META_KEY: rating}
        )

    async def _insert_post(
        self,
        author_id: int,
        post_type: str,
        title: str,
        content: str | None,
        meta: Mapping[str, Any],
    ) -> int:
        def _op() -> int:
            conn = self._require_connection()
            with conn:
                cursor = conn.execute(
                    f"""
                    INSERT INTO {self._table('posts')}(post_author, post_type, post_title, post_content, post_date)
                    VALUES(?, ?, ?, ?, ?)
                    """,
                    (author_id, post_type, title, content, _utc_now()),
                )
                post_id = int(cursor.lastrowid)
                conn.executemany(
                    f"INSERT INTO {self._table('postmeta')}(post_id, meta_key, meta_value) VALUES(?, ?, ?)",
                    [(post_id, key, _stringify(value)) for key, value in meta.items()],
                )
                return post_id

        return await self._write(_op)


MIGRATIONS: dict[int, str] = {
    1: """
        CREATE TABLE IF NOT EXISTS {prefix}users (
            ID INTEGER PRIMARY KEY AUTOINCREMENT,
            user_login TEXT NOT NULL,
            display_name TEXT NOT NULL,
            user_registered TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS {prefix}usermeta (
            umeta_id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL REFERENCES {prefix}users(ID) ON DELETE CASCADE,
            meta_key TEXT NOT NULL,
            meta_value TEXT
        );
        CREATE INDEX IF NOT EXISTS idx_{prefix}usermeta_user ON {prefix}usermeta(user_id, meta_key);

        CREATE TABLE IF NOT EXISTS {prefix}posts (
            ID INTEGER PRIMARY KEY AUTOINCREMENT,
            post_author INTEGER NOT NULL REFERENCES {prefix}users(ID) ON DELETE CASCADE,
            post_type TEXT NOT NULL,
            post_title TEXT,
            post_content TEXT,
            post_date TEXT NOT NULL
        );
        CREATE INDEX IF NOT EXISTS idx_{prefix}posts_author ON {prefix}posts(post_author, post_type);

        CREATE TABLE IF NOT EXISTS {prefix}postmeta (
            meta_id INTEGER PRIMARY KEY AUTOINCREMENT,
            post_id INTEGER NOT NULL REFERENCES {prefix}posts(ID) ON DELETE CASCADE,
            meta_key TEXT NOT NULL,
            meta_value TEXT
        );
        CREATE INDEX IF NOT EXISTS idx_{prefix}postmeta_post ON {prefix}postmeta(post_id, meta_key);
    """,
}
