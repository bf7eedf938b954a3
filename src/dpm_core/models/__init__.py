from __future__ import annotations

from dpm_core.models.download import DownloadResult
from dpm_core.models.package import Dependency, PackageBasicInfo, PackageInfo

__all__ = [
    # package
    "Dependency",
    "PackageInfo",
    "PackageBasicInfo",
    # download
    "DownloadResult",
]
