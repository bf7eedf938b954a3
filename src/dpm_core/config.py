"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Constructor arguments
  2. Environment variables  (DPM__DOWNLOAD__CHUNK_SIZE=131072)
  3. dpm.yaml               (searched in cwd, then the platform config dir)
  4. Hardcoded defaults

The config file is optional. Unknown keys are rejected at every level.
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_APP_NAME = "dpm"
_DEFAULT_DATA_DIR = platformdirs.user_data_dir(_APP_NAME)
_DEFAULT_DB_PATH = str(Path(_DEFAULT_DATA_DIR) / "catalog.db")
_DEFAULT_DOWNLOAD_DIR = str(Path(tempfile.gettempdir()) / _APP_NAME)


def _find_config_file() -> str | None:
    """Return the path of the first dpm.yaml found, or None."""
    candidates = [
        Path("dpm.yaml"),
        Path(platformdirs.user_config_dir(_APP_NAME)) / "dpm.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


class RegistrySettings(_Section):
    url: str = "https://dpm.example.org/repo/repoInfo.json"


class HttpSettings(_Section):
    timeout_seconds: float = 30.0
    user_agent: str = "dpm-core"


class DownloadSettings(_Section):
    dir: str = _DEFAULT_DOWNLOAD_DIR
    chunk_size: int = 65536
    default_hash_algorithm: str = "sha256"
    # When False, entries without a declared hash are downloaded unverified
    require_hash: bool = False


class StoreSettings(_Section):
    db_path: str = _DEFAULT_DB_PATH


class LoggingSettings(_Section):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: DPM__HTTP__TIMEOUT_SECONDS=5
        env_prefix="DPM__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
        extra="forbid",
    )

    registry: RegistrySettings = RegistrySettings()
    http: HttpSettings = HttpSettings()
    download: DownloadSettings = DownloadSettings()
    store: StoreSettings = StoreSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
