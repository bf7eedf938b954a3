from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel

from dpm_core.models.package import PackageInfo


class DownloadResult(BaseModel):
    """Outcome of a verified artifact download."""

    package_name: str
    descriptor: PackageInfo
    path: Path
    size: int  # bytes written
    digest: str  # "<algorithm>:<hex>" computed over the streamed body
    verified: bool  # False only when no hash was declared and verification was skipped
