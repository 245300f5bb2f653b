"""Document encoding for the AI gateway.

Turns an uploaded file into a transport-ready payload: the raw bytes plus
the media type the source reported. No parsing and no size checks happen
here; upload surfaces enforce their own limits.
"""

import asyncio
import logging
import mimetypes
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from quantscholar.errors import ReadError

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "application/octet-stream"


class UploadSource(Protocol):
    """Anything exposing an async ``read()``, e.g. FastAPI or NiceGUI uploads."""

    async def read(self) -> bytes: ...


class DocumentPayload(BaseModel):
    """Encoded document shared by the extraction and chat calls.

    Attributes:
        content: Raw file bytes.
        media_type: Media type as supplied by the source.
        file_name: Original file name, when known.
    """

    model_config = ConfigDict(frozen=True)

    content: bytes
    media_type: str
    file_name: str | None = None


def _source_name(source: UploadSource) -> str | None:
    # UploadFile calls it filename, NiceGUI calls it name
    return getattr(source, "filename", None) or getattr(source, "name", None)


async def _read_path(path: Path) -> bytes:
    return await asyncio.to_thread(path.read_bytes)


async def encode_document(
    source: UploadSource | Path | str,
    media_type: str | None = None,
) -> DocumentPayload:
    """Read a document in full and wrap it as a payload.

    Args:
        source: Filesystem path or upload object with an async ``read()``.
        media_type: Explicit media type, overriding what the source reports.

    Returns:
        DocumentPayload with content, media type and file name.

    Raises:
        ReadError: If the underlying read fails.
    """
    path: Path | None = None
    if isinstance(source, (str, Path)):
        path = Path(source)
        file_name: str | None = path.name
        reported = mimetypes.guess_type(path.name)[0]
    else:
        file_name = _source_name(source)
        reported = getattr(source, "content_type", None)

    try:
        content = await (_read_path(path) if path is not None else source.read())
    except Exception as e:
        logger.warning(f"Failed to read document {file_name!r}: {e}")
        raise ReadError(f"Could not read {file_name or 'document'}: {e}") from e

    if not isinstance(content, bytes):
        raise ReadError(f"Expected bytes from {file_name or 'document'}, got {type(content).__name__}")

    payload = DocumentPayload(
        content=content,
        media_type=media_type or reported or DEFAULT_MEDIA_TYPE,
        file_name=file_name,
    )
    logger.info(f"Encoded {file_name or 'document'} ({len(content)} bytes, {payload.media_type})")
    return payload
