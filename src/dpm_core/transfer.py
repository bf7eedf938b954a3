"""JSON load/save/fetch for any pydantic record type.

Malformed JSON maps to ``FORMAT_ERROR``; well-formed JSON of the wrong
shape maps to ``INVALID_PACKAGE``. Local file failures are ``IO_ERROR``,
transport failures ``NETWORK_ERROR``.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from dpm_core.errors import DpmError, ErrorCode, network_error

if TYPE_CHECKING:
    from os import PathLike

log = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=BaseModel)


def _parse_error(model: type[BaseModel], exc: ValidationError) -> DpmError:
    first = exc.errors()[0]
    if any(err["type"] == "json_invalid" for err in exc.errors()):
        return DpmError(ErrorCode.FORMAT_ERROR, f"{model.__name__}: {first['msg']}")
    location = ".".join(str(part) for part in first["loc"]) or "<root>"
    return DpmError(
        ErrorCode.INVALID_PACKAGE,
        f"{model.__name__}: {location}: {first['msg']} ({exc.error_count()} error(s))",
    )


def parse_from_text(model: type[ModelT], text: str | bytes) -> ModelT:
    """Parse an in-memory JSON document. Pure, no I/O."""
    try:
        return model.model_validate_json(text)
    except ValidationError as exc:
        raise _parse_error(model, exc) from exc


def load_from_path(model: type[ModelT], path: str | PathLike[str]) -> ModelT:
    """Read and parse a JSON document from disk."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise DpmError(ErrorCode.FORMAT_ERROR, f"{path}: not valid UTF-8") from exc
    except OSError as exc:
        raise DpmError(ErrorCode.IO_ERROR, f"{path}: {exc.strerror or exc}") from exc
    return parse_from_text(model, text)


def save_to_path(record: BaseModel, path: str | PathLike[str]) -> None:
    """Create or truncate *path* and write *record* as indented JSON."""
    try:
        Path(path).write_text(record.model_dump_json(indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        raise DpmError(ErrorCode.IO_ERROR, f"{path}: {exc.strerror or exc}") from exc
    log.debug("document_saved", path=str(path), record=type(record).__name__)


async def fetch_from_url(client: httpx.AsyncClient, model: type[ModelT], url: str) -> ModelT:
    """GET *url* and parse the body as *model*.

    The HTTP status is not inspected: an error page simply fails to parse.
    Callers that care about the status issue their own request.
    """
    try:
        response = await client.get(url)
        text = response.text
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise network_error(f"{url}: {exc}") from exc
    log.debug("document_fetched", url=url, status=response.status_code, size=len(text))
    return parse_from_text(model, text)
