"""Building selected files and reading their content for upload."""

import asyncio
import mimetypes
from pathlib import Path
from typing import Optional, Union

from ..core.exceptions import FileReadError
from ..core.logging import get_logger
from .schemas import DEFAULT_MIME_TYPE, SelectedFile


logger = get_logger(__name__)


def guess_mime_type(file_name: str, declared: Optional[str] = None) -> str:
    """Prefer the declared type, then the extension, then octet-stream."""
    if declared:
        return declared
    guessed, _ = mimetypes.guess_type(file_name)
    return guessed or DEFAULT_MIME_TYPE


def selected_file_from_path(path: Union[str, Path], mime_type: Optional[str] = None) -> SelectedFile:
    """
    Describe a local file without reading it.

    Raises:
        FileReadError: If the path is missing or not a regular file
    """
    path = Path(path)
    try:
        stat = path.stat()
    except OSError as e:
        raise FileReadError(f"Cannot read {path.name}: {e.strerror or e}", file_name=path.name)

    if not path.is_file():
        raise FileReadError(f"{path.name} is not a file", file_name=path.name)

    return SelectedFile(
        name=path.name,
        size=stat.st_size,
        mime_type=guess_mime_type(path.name, mime_type),
        path=path
    )


def selected_file_from_bytes(name: str, content: bytes, mime_type: Optional[str] = None) -> SelectedFile:
    """Describe a file the browser already sent to the server."""
    return SelectedFile(
        name=name,
        size=len(content),
        mime_type=guess_mime_type(name, mime_type),
        content=content
    )


async def read_file_content(selected: SelectedFile) -> bytes:
    """
    Read the complete file content into memory.

    Raises:
        FileReadError: If the content is unavailable or cannot be read
    """
    if selected.content is not None:
        return selected.content

    if selected.path is None:
        raise FileReadError(f"No content available for {selected.name}", file_name=selected.name)

    loop = asyncio.get_event_loop()
    try:
        content = await loop.run_in_executor(None, selected.path.read_bytes)
    except OSError as e:
        raise FileReadError(f"Cannot read {selected.name}: {e.strerror or e}", file_name=selected.name)

    if len(content) != selected.size:
        logger.warning(f"{selected.name} changed size since selection: {selected.size} -> {len(content)} bytes")
    return content
