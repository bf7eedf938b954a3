"""Integration test fixtures.

Provides a consumer-side wiring (settings, http client, catalog client and
on-disk store) against a respx-mocked remote repository. Sample entries come
from tests/conftest.py.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from dpm_core.client import CatalogClient, build_http_client
from dpm_core.config import Settings
from dpm_core.store import CatalogStore

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def consumer_settings(tmp_path: Path) -> Settings:
    return Settings(
        download={"dir": str(tmp_path / "downloads")},
        store={"db_path": str(tmp_path / "data" / "catalog.db")},
    )


@pytest.fixture()
async def http_client(consumer_settings: Settings) -> httpx.AsyncClient:
    async with build_http_client(consumer_settings.http) as client:
        yield client


@pytest.fixture()
def catalog_client(http_client: httpx.AsyncClient, consumer_settings: Settings) -> CatalogClient:
    return CatalogClient(http_client, consumer_settings)


@pytest.fixture()
async def disk_store(consumer_settings: Settings) -> CatalogStore:
    async with CatalogStore.open(consumer_settings.store.db_path) as store:
        yield store
