"""Copying the last share link to the clipboard."""

from typing import Awaitable, Callable, Optional

from ..core.logging import get_logger
from .schemas import Notice, NoticeLevel


logger = get_logger(__name__)


COPIED_MESSAGE = "URL copied to clipboard"
NOTHING_TO_COPY_MESSAGE = "No file URL to copy"
COPY_FAILED_MESSAGE = "Could not copy URL to clipboard"

ClipboardWriter = Callable[[str], Awaitable[bool]]


async def copy_link(
    link: Optional[str],
    writer: ClipboardWriter,
    notify: Callable[[Notice], None]
) -> bool:
    """
    Put ``link`` on the clipboard and tell the user.

    Args:
        link: The published view link, if any
        writer: Writes text to the clipboard and reports whether it was accepted
        notify: Receives the resulting notice

    Returns:
        True if the writer accepted the link
    """
    if not link:
        notify(Notice(message=NOTHING_TO_COPY_MESSAGE, level=NoticeLevel.WARNING))
        return False

    try:
        accepted = await writer(link)
    except Exception as e:
        logger.warning(f"Clipboard write failed: {e}")
        accepted = False

    if not accepted:
        notify(Notice(message=COPY_FAILED_MESSAGE, level=NoticeLevel.NEGATIVE))
        return False

    notify(Notice(message=COPIED_MESSAGE, level=NoticeLevel.POSITIVE))
    return True
