"""Package catalog: name → catalog entry, with its mutation contract.

The registry is the unit of serialization for the remote manifest
(``{"packages": {...}}``). Entries are immutable; every mutation swaps a
whole ``PackageBasicInfo`` in the map. Not safe for concurrent writers.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

import structlog
from pydantic import BaseModel

from dpm_core.errors import package_not_found
from dpm_core.models.package import Dependency, PackageBasicInfo

log = structlog.get_logger()


class Registry(BaseModel):
    """In-memory catalog. Keys are unique package names."""

    packages: dict[str, PackageBasicInfo] = {}

    def __contains__(self, name: object) -> bool:
        return name in self.packages

    def __len__(self) -> int:
        return len(self.packages)

    def names(self) -> list[str]:
        return sorted(self.packages)

    def view(self) -> Mapping[str, PackageBasicInfo]:
        """Read-only view of the package map."""
        return MappingProxyType(self.packages)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def has(self, name: str) -> bool:
        return name in self.packages

    def get(self, name: str) -> PackageBasicInfo:
        """Return the entry for *name*. Raises PACKAGE_NOT_FOUND if absent."""
        try:
            return self.packages[name]
        except KeyError:
            raise package_not_found(name) from None

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(
        self,
        name: str,
        url: str,
        file_name: str,
        version: str,
        hash: str,
        dependencies: list[Dependency] | None = None,
        entry: str | None = None,
        description: str | None = None,
    ) -> None:
        """Insert or fully replace the entry for *name*. No format validation."""
        self.add_entry(
            name,
            PackageBasicInfo(
                url=url,
                file_name=file_name,
                version=version,
                hash=hash,
                dependencies=dependencies,
                entry=entry,
                description=description,
            ),
        )

    def add_entry(self, name: str, entry: PackageBasicInfo) -> None:
        self.packages[name] = entry
        log.debug("package_added", package=name, version=entry.version)

    def remove(self, name: str) -> PackageBasicInfo:
        """Detach and return the entry for *name*. Raises PACKAGE_NOT_FOUND if absent."""
        try:
            removed = self.packages.pop(name)
        except KeyError:
            raise package_not_found(name) from None
        log.debug("package_removed", package=name)
        return removed

    def update(
        self,
        name: str,
        url: str | None = None,
        file_name: str | None = None,
        version: str | None = None,
        hash: str | None = None,
        dependencies: list[Dependency] | None = None,
        entry: str | None = None,
        description: str | None = None,
    ) -> PackageBasicInfo:
        """Merge the given fields into the entry for *name*, creating it if absent.

        ``None`` means "leave as is". A present ``dependencies`` list replaces
        the stored list wholesale. A missing entry is created with ``""`` for
        omitted string fields and no dependencies; supplied ``entry`` and
        ``description`` are kept.
        """
        changes = {
            "url": url,
            "file_name": file_name,
            "version": version,
            "hash": hash,
            "dependencies": dependencies,
            "entry": entry,
            "description": description,
        }
        present = {key: value for key, value in changes.items() if value is not None}

        existing = self.packages.get(name)
        if existing is None:
            updated = PackageBasicInfo(
                url=url or "",
                file_name=file_name or "",
                version=version or "",
                hash=hash or "",
                dependencies=None,
                entry=entry,
                description=description,
            )
            log.debug("package_upserted", package=name)
        else:
            # validated copy: empty entry/description become None
            updated = PackageBasicInfo(**{**dict(existing), **present})
            log.debug("package_updated", package=name, fields=sorted(present))

        self.packages[name] = updated
        return updated

    def replace(self, packages: Mapping[str, PackageBasicInfo]) -> None:
        """Swap the whole package map. Nothing from the previous map survives."""
        self.packages = dict(packages)
