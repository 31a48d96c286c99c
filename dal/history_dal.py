"""Async Data Access Layer for the KV_STORE table.

Each key holds one serialized blob which is fully overwritten on write,
mirroring browser local storage semantics.
"""

from __future__ import annotations

from typing import Optional

from utils.database_init import AsyncDatabaseInitializer


class KeyValueDAL:
    """Read and overwrite string values stored under a key.

    The constructor accepts an `AsyncDatabaseInitializer` (or any object
    exposing an async `connection()` context manager that yields an
    `aiosqlite.Connection`).
    """

    def __init__(self, db_initializer: AsyncDatabaseInitializer) -> None:
        self._db = db_initializer

    async def get(self, key: str) -> Optional[str]:
        """Return the value stored under `key`, or None if absent."""
        async with self._db.connection() as conn:
            cur = await conn.execute("SELECT value FROM KV_STORE WHERE key = ?", (key,))
            row = await cur.fetchone()
        return row[0] if row else None

    async def put(self, key: str, value: str) -> None:
        """Insert or replace the value stored under `key`."""
        async with self._db.connection() as conn:
            await conn.execute(
                "INSERT INTO KV_STORE (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )
            await conn.commit()
