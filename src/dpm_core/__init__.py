"""Local package catalog synchronized against a remote JSON manifest."""

from __future__ import annotations

from dpm_core.client import CatalogClient, build_http_client
from dpm_core.config import Settings
from dpm_core.errors import DpmError, ErrorCode, HashMismatchError
from dpm_core.models import DownloadResult, Dependency, PackageBasicInfo, PackageInfo
from dpm_core.registry import Registry
from dpm_core.store import CatalogStore

__all__ = [
    "CatalogClient",
    "CatalogStore",
    "Dependency",
    "DownloadResult",
    "DpmError",
    "ErrorCode",
    "HashMismatchError",
    "PackageBasicInfo",
    "PackageInfo",
    "Registry",
    "Settings",
    "build_http_client",
]
