"""Shared fixtures: sample catalog entries and documents."""

from __future__ import annotations

import pytest

from dpm_core.models.package import Dependency, PackageBasicInfo, PackageInfo
from dpm_core.registry import Registry
from sample_data import ARTIFACT_SHA256


@pytest.fixture()
def sample_entry() -> PackageBasicInfo:
    return PackageBasicInfo(
        url="https://repo.example.com/files/pkgx-1.0.0.zip",
        file_name="pkgx-1.0.0.zip",
        version="1.0.0",
        hash=ARTIFACT_SHA256,
        dependencies=[
            Dependency(name="liba", version="2.1.0"),
            Dependency(name="libb", version="0.3"),
        ],
    )


@pytest.fixture()
def sample_descriptor() -> PackageInfo:
    return PackageInfo(
        package_name="pkgx",
        file_name="pkgx-1.0.0.zip",
        version="1.0.0",
        description="Example package",
        hash=ARTIFACT_SHA256,
        dependencies=[Dependency(name="liba", version="2.1.0")],
    )


@pytest.fixture()
def registry(sample_entry: PackageBasicInfo) -> Registry:
    reg = Registry()
    reg.add_entry("pkgx", sample_entry)
    reg.add("tool", "https://repo.example.com/files/tool.tar.gz", "tool.tar.gz", "0.9.1", "")
    return reg
