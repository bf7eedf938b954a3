"""Unit tests for dpm_core.store."""

from __future__ import annotations

from typing import TYPE_CHECKING

import aiosqlite
import pytest

from dpm_core.errors import DpmError, ErrorCode
from dpm_core.registry import Registry
from dpm_core.store import CatalogStore

if TYPE_CHECKING:
    from pathlib import Path


class TestCatalogStore:
    async def test_load_empty(self, store: CatalogStore) -> None:
        registry = await store.load()
        assert len(registry) == 0

    async def test_save_and_load(self, store: CatalogStore, registry: Registry) -> None:
        await store.save(registry)
        loaded = await store.load()
        assert loaded.packages == registry.packages

    async def test_save_replaces_snapshot(self, store: CatalogStore, registry: Registry) -> None:
        await store.save(registry)
        registry.remove("tool")
        registry.update("pkgx", version="2.0.0")
        await store.save(registry)

        loaded = await store.load()
        assert loaded.names() == ["pkgx"]
        assert loaded.get("pkgx").version == "2.0.0"

    async def test_consumer_fields_persisted(self, store: CatalogStore) -> None:
        registry = Registry()
        registry.add(
            "app", "https://h/app.zip", "app.zip", "1", "", entry="main.py", description="An app"
        )
        await store.save(registry)
        loaded = (await store.load()).get("app")
        assert loaded.entry == "main.py"
        assert loaded.description == "An app"

    async def test_delete(self, store: CatalogStore, registry: Registry) -> None:
        await store.save(registry)
        await store.delete("tool")
        assert (await store.load()).names() == ["pkgx"]

    async def test_delete_missing(self, store: CatalogStore) -> None:
        with pytest.raises(DpmError) as exc_info:
            await store.delete("ghost")
        assert exc_info.value.code == ErrorCode.PACKAGE_NOT_FOUND

    async def test_read_failure_raises_database_error(self, store: CatalogStore) -> None:
        """Simulate a database read error: surfaces as DATABASE_ERROR, not swallowed."""
        original_execute = store._db.execute

        async def failing_execute(*args, **kwargs):
            raise aiosqlite.OperationalError("disk I/O error")

        store._db.execute = failing_execute  # type: ignore[assignment]
        try:
            with pytest.raises(DpmError) as exc_info:
                await store.load()
        finally:
            store._db.execute = original_execute  # type: ignore[assignment]
        assert exc_info.value.code == ErrorCode.DATABASE_ERROR
        assert "disk I/O error" in exc_info.value.message

    async def test_write_failure_keeps_previous_snapshot(
        self, store: CatalogStore, registry: Registry
    ) -> None:
        await store.save(registry)
        original_executemany = store._db.executemany

        async def failing_executemany(*args, **kwargs):
            raise aiosqlite.OperationalError("database is locked")

        store._db.executemany = failing_executemany  # type: ignore[assignment]
        try:
            with pytest.raises(DpmError) as exc_info:
                await store.save(Registry())
        finally:
            store._db.executemany = original_executemany  # type: ignore[assignment]

        assert exc_info.value.code == ErrorCode.DATABASE_ERROR
        assert (await store.load()).names() == ["pkgx", "tool"]

    async def test_rollback_failure_keeps_original_error(
        self, store: CatalogStore, registry: Registry
    ) -> None:
        original_executemany = store._db.executemany
        original_rollback = store._db.rollback

        async def failing_executemany(*args, **kwargs):
            raise aiosqlite.OperationalError("database is locked")

        async def failing_rollback(*args, **kwargs):
            raise aiosqlite.OperationalError("cannot rollback")

        store._db.executemany = failing_executemany  # type: ignore[assignment]
        store._db.rollback = failing_rollback  # type: ignore[assignment]
        try:
            with pytest.raises(DpmError) as exc_info:
                await store.save(registry)
        finally:
            store._db.executemany = original_executemany  # type: ignore[assignment]
            store._db.rollback = original_rollback  # type: ignore[assignment]
            await store._db.rollback()

        assert exc_info.value.code == ErrorCode.DATABASE_ERROR
        assert "database is locked" in exc_info.value.message

    async def test_corrupt_document_raises_database_error(self, store: CatalogStore) -> None:
        await store._db.execute(
            "INSERT INTO packages (name, document, version, updated_at) VALUES (?, ?, ?, ?)",
            ("broken", '{"url": 1}', "1", "2026-01-01T00:00:00+00:00"),
        )
        await store._db.commit()

        with pytest.raises(DpmError) as exc_info:
            await store.load()
        assert exc_info.value.code == ErrorCode.DATABASE_ERROR
        assert "broken" in exc_info.value.message


class TestOpen:
    async def test_creates_parent_dirs(self, tmp_path: Path, registry: Registry) -> None:
        db_path = tmp_path / "a" / "b" / "catalog.db"
        async with CatalogStore.open(str(db_path)) as store:
            await store.save(registry)
        assert db_path.exists()

        async with CatalogStore.open(str(db_path)) as store:
            assert (await store.load()).names() == ["pkgx", "tool"]
