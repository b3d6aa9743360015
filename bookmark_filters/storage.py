"""Key-value blob storage for filter state and history."""
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Protocol

import aiosqlite


# Default database location
DEFAULT_DB_PATH = Path.home() / ".bookmark-filters" / "state.db"


class KeyValueStorage(Protocol):
    """Protocol for storage backends holding opaque string blobs."""

    async def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove a key. Returns True if it existed."""
        ...


class InMemoryStorage:
    """Dict-backed storage, for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})
        self.write_count = 0

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value
        self.write_count += 1

    async def delete(self, key: str) -> bool:
        return self.data.pop(key, None) is not None


class SqliteStorage:
    """Async SQLite key-value store."""

    def __init__(self, db_path: Optional[Path] = None):
        """Initialize the storage.

        Args:
            db_path: Path to SQLite database. Defaults to ~/.bookmark-filters/state.db
        """
        self.db_path = db_path or DEFAULT_DB_PATH
        self._connection: Optional[aiosqlite.Connection] = None

    async def initialize(self) -> None:
        """Open the database, creating the table if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._connection = await aiosqlite.connect(self.db_path)

        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        await self._connection.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    def _require_connection(self) -> aiosqlite.Connection:
        if not self._connection:
            raise RuntimeError("Storage not initialized. Call initialize() first.")
        return self._connection

    async def get(self, key: str) -> Optional[str]:
        connection = self._require_connection()

        cursor = await connection.execute(
            "SELECT value FROM kv_store WHERE key = ?",
            (key,)
        )
        row = await cursor.fetchone()

        return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        connection = self._require_connection()

        now = datetime.now(timezone.utc).isoformat()

        await connection.execute("""
            INSERT INTO kv_store (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
        """, (key, value, now))

        await connection.commit()

    async def delete(self, key: str) -> bool:
        connection = self._require_connection()

        cursor = await connection.execute(
            "DELETE FROM kv_store WHERE key = ?",
            (key,)
        )
        await connection.commit()

        return cursor.rowcount > 0


# Global storage instance
_storage: Optional[SqliteStorage] = None


async def get_storage() -> SqliteStorage:
    """Get or create the global SQLite storage instance.

    Returns:
        Initialized SqliteStorage at the configured path
    """
    global _storage

    if _storage is None:
        from bookmark_filters.config import get_config
        _storage = SqliteStorage(get_config().storage_db_path)
        await _storage.initialize()

    return _storage
