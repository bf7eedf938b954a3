"""Unit-specific fixtures (no I/O beyond tmp_path and in-memory SQLite)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import aiosqlite
import pytest

from dpm_core.config import Settings
from dpm_core.store import CatalogStore

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
async def store():
    """In-memory SQLite catalog store for unit tests."""
    async with aiosqlite.connect(":memory:") as db:
        s = CatalogStore(db)
        await s.init_db()
        yield s


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(download={"dir": str(tmp_path / "downloads")})
