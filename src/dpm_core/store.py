"""SQLite persistence for registry snapshots.

Unlike a cache, the store is a source of truth for the caller: every
``aiosqlite.Error`` and every corrupt stored document is logged with
``exc_info`` and re-raised as ``DATABASE_ERROR``. Nothing is swallowed.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

import aiosqlite
import structlog
from pydantic import ValidationError

from dpm_core.errors import DpmError, ErrorCode, package_not_found
from dpm_core.models.package import PackageBasicInfo
from dpm_core.registry import Registry

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

log = structlog.get_logger()

_CREATE_PACKAGES_TABLE = """
CREATE TABLE IF NOT EXISTS packages (
    name        TEXT PRIMARY KEY,
    document    TEXT NOT NULL,
    version     TEXT NOT NULL,
    updated_at  TEXT NOT NULL
)
"""


def _database_error(operation: str, exc: aiosqlite.Error) -> DpmError:
    return DpmError(ErrorCode.DATABASE_ERROR, f"{operation}: {exc}")


class CatalogStore:
    """Stores one registry snapshot, one row per package."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    @classmethod
    @asynccontextmanager
    async def open(cls, db_path: str) -> AsyncIterator[CatalogStore]:
        """Connect to *db_path*, creating parent directories, and initialise."""
        if db_path != ":memory:":
            path = Path(db_path).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            db_path = str(path)
        async with aiosqlite.connect(db_path) as db:
            store = cls(db)
            await store.init_db()
            yield store

    async def init_db(self) -> None:
        """Create the table and set WAL mode. Called once at startup."""
        try:
            await self._db.execute("PRAGMA journal_mode = WAL")
            await self._db.execute(_CREATE_PACKAGES_TABLE)
            await self._db.commit()
        except aiosqlite.Error as exc:
            log.error("store_init_error", exc_info=True)
            raise _database_error("init", exc) from exc

    async def save(self, registry: Registry) -> None:
        """Replace the stored snapshot with *registry*'s entries."""
        now = datetime.now(UTC).isoformat()
        rows = [
            (name, entry.model_dump_json(), entry.version, now)
            for name, entry in registry.packages.items()
        ]
        try:
            await self._db.execute("DELETE FROM packages")
            await self._db.executemany(
                "INSERT INTO packages (name, document, version, updated_at) VALUES (?, ?, ?, ?)",
                rows,
            )
            await self._db.commit()
        except aiosqlite.Error as exc:
            log.error("store_write_error", packages=len(rows), exc_info=True)
            try:
                await self._db.rollback()
            except aiosqlite.Error:
                log.warning("store_rollback_error", exc_info=True)
            raise _database_error("save", exc) from exc
        log.info("store_saved", packages=len(rows))

    async def load(self) -> Registry:
        """Rebuild a registry from the stored snapshot (empty if nothing stored)."""
        try:
            cursor = await self._db.execute("SELECT name, document FROM packages")
            rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            log.error("store_read_error", exc_info=True)
            raise _database_error("load", exc) from exc
        registry = Registry()
        for name, document in rows:
            try:
                entry = PackageBasicInfo.model_validate_json(document)
            except ValidationError as exc:
                log.error("store_corrupt_row", package=name, exc_info=True)
                raise DpmError(
                    ErrorCode.DATABASE_ERROR, f"load: corrupt document for {name!r}"
                ) from exc
            registry.add_entry(name, entry)
        return registry

    async def delete(self, name: str) -> None:
        try:
            cursor = await self._db.execute("DELETE FROM packages WHERE name = ?", (name,))
            deleted = cursor.rowcount
            await self._db.commit()
        except aiosqlite.Error as exc:
            log.error("store_write_error", package=name, exc_info=True)
            raise _database_error("delete", exc) from exc
        if deleted == 0:
            raise package_not_found(name)
