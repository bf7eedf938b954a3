"""Remote synchronization: manifest refresh, descriptor fetch, artifact download.

Every coroutine here is a suspension point. There are no retries and no
fallback to previously fetched data: failures surface to the caller as
``DpmError``.

Descriptor location convention: for an entry whose ``url`` ends in its
``file_name``, the descriptor lives at the same path with the file name
replaced by ``src/<package>/packageInfo.json``. Both descriptor-reading
operations use it.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import aiofiles
import httpx
import structlog

from dpm_core.config import HttpSettings, Settings
from dpm_core.errors import DpmError, ErrorCode, network_error
from dpm_core.integrity import StreamingHasher, parse_declared_hash
from dpm_core.models.download import DownloadResult
from dpm_core.models.package import PackageInfo
from dpm_core.registry import Registry
from dpm_core.transfer import fetch_from_url

if TYPE_CHECKING:
    from dpm_core.models.package import PackageBasicInfo

log = structlog.get_logger()

DESCRIPTOR_FILE_NAME = "packageInfo.json"


def build_http_client(settings: HttpSettings | None = None) -> httpx.AsyncClient:
    """Create the shared httpx client. Caller owns and closes it."""
    settings = settings or HttpSettings()
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={"User-Agent": settings.user_agent},
    )


def descriptor_url(name: str, entry: PackageBasicInfo) -> str:
    """Swap the last occurrence of the entry's file name for the descriptor path."""
    head, sep, tail = entry.url.rpartition(entry.file_name) if entry.file_name else ("", "", "")
    if not sep:
        raise DpmError(
            ErrorCode.INVALID_PACKAGE,
            f"{name}: url {entry.url!r} does not contain file name {entry.file_name!r}",
        )
    return f"{head}src/{name}/{DESCRIPTOR_FILE_NAME}{tail}"


def _safe_component(value: str, what: str) -> str:
    if not value or value in (".", "..") or Path(value).name != value or "\\" in value:
        raise DpmError(ErrorCode.SECURITY_ERROR, f"Unsafe {what} for a local path: {value!r}")
    return value


def artifact_path(download_dir: str | Path, name: str, entry: PackageBasicInfo) -> Path:
    """Local path for a package artifact, scoped by name and version."""
    return (
        Path(download_dir)
        / _safe_component(name, "package name")
        / _safe_component(entry.version, "version")
        / _safe_component(entry.file_name, "file name")
    )


class CatalogClient:
    """Network-facing operations over a ``Registry``."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings | None = None) -> None:
        self._client = client
        self._settings = settings or Settings()

    async def refresh_from_url(self, registry: Registry, url: str | None = None) -> None:
        """Replace *registry*'s entire package map with the remote manifest.

        The fetch and parse complete before the registry is touched, so a
        failure leaves local state as it was.
        """
        url = url or self._settings.registry.url
        fetched = await fetch_from_url(self._client, Registry, url)
        dropped = set(registry.packages) - set(fetched.packages)
        registry.replace(fetched.packages)
        log.info("registry_refreshed", url=url, packages=len(fetched), dropped=len(dropped))

    async def fetch_package_descriptor(self, registry: Registry, name: str) -> PackageInfo:
        entry = registry.get(name)
        return await fetch_from_url(self._client, PackageInfo, descriptor_url(name, entry))

    async def fetch_and_download(self, registry: Registry, name: str) -> DownloadResult:
        """Fetch the descriptor, stream the artifact to disk and verify its hash."""
        settings = self._settings.download
        entry = registry.get(name)

        declared = parse_declared_hash(entry.hash, settings.default_hash_algorithm)
        if declared is None and settings.require_hash:
            raise DpmError(ErrorCode.SECURITY_ERROR, f"{name}: no hash declared for artifact")

        descriptor = await self.fetch_package_descriptor(registry, name)
        if descriptor.version != entry.version:
            raise DpmError(
                ErrorCode.VERSION_MISMATCH,
                f"{name}: catalog has {entry.version}, descriptor has {descriptor.version}",
            )

        target = artifact_path(settings.dir, name, entry)
        algorithm = declared.algorithm if declared else settings.default_hash_algorithm
        hasher = StreamingHasher(algorithm)
        await self._stream_to_file(name, entry.url, target, hasher)

        if declared is None:
            log.warning("hash_verification_skipped", package=name, path=str(target))
        else:
            try:
                hasher.verify(declared)
            except DpmError:
                target.unlink(missing_ok=True)
                log.warning(
                    "hash_mismatch", package=name, expected=str(declared), actual=hasher.digest
                )
                raise

        log.info(
            "artifact_downloaded",
            package=name,
            version=entry.version,
            path=str(target),
            size=hasher.size,
        )
        return DownloadResult(
            package_name=name,
            descriptor=descriptor,
            path=target,
            size=hasher.size,
            digest=hasher.digest,
            verified=declared is not None,
        )

    async def _stream_to_file(
        self, name: str, url: str, target: Path, hasher: StreamingHasher
    ) -> None:
        # A failure mid-stream leaves the partial file in place
        try:
            async with self._client.stream("GET", url) as response:
                if not response.is_success:
                    raise DpmError(
                        ErrorCode.NETWORK_ERROR,
                        f"Failed to fetch package '{name}': "
                        f"{response.status_code} {response.reason_phrase}",
                        recoverable=response.status_code >= 500,
                    )
                target.parent.mkdir(parents=True, exist_ok=True)
                async with aiofiles.open(target, "wb") as f:
                    async for chunk in response.aiter_bytes(self._settings.download.chunk_size):
                        hasher.update(chunk)
                        await f.write(chunk)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise network_error(f"{url}: {exc}") from exc
        except OSError as exc:
            raise DpmError(ErrorCode.IO_ERROR, f"{target}: {exc.strerror or exc}") from exc
