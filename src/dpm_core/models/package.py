from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    SerializerFunctionWrapHandler,
    field_validator,
    model_serializer,
)


class Dependency(BaseModel):
    """Named, versioned reference to another package. Recorded, never resolved."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str


class PackageInfo(BaseModel):
    """Descriptor shipped beside an artifact (``packageInfo.json``)."""

    model_config = ConfigDict(frozen=True)

    package_name: str
    file_name: str
    version: str
    description: str
    hash: str
    dependencies: list[Dependency] | None = None


class PackageBasicInfo(BaseModel):
    """Catalog entry: what the registry knows about a package without its descriptor."""

    model_config = ConfigDict(frozen=True)

    url: str
    file_name: str
    version: str
    hash: str
    dependencies: list[Dependency] | None = None
    entry: str | None = None  # consumer-facing fields; omitted from output when empty
    description: str | None = None

    @field_validator("entry", "description", mode="before")
    @classmethod
    def _empty_is_absent(cls, v: Any) -> Any:
        return None if v == "" else v

    @model_serializer(mode="wrap")
    def _omit_empty_consumer_fields(self, handler: SerializerFunctionWrapHandler) -> Any:
        data = handler(self)
        for key in ("entry", "description"):
            if not data.get(key):
                data.pop(key, None)
        return data
