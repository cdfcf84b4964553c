"""
Upload workflow.

Turns a locally selected file into a shared Google Drive link: sign in,
resolve the destination folder, open a resumable session, send the
content, fetch the view link. Each step boundary updates the workflow
state so the page can show a busy indicator, and every failure ends up
as a notice instead of an exception.
"""

import time
from typing import Callable, List, Optional, Tuple

from ..core.exceptions import (
    DriveIntegrationError, DriveUploaderError, FolderResolutionError,
    MetadataFetchError, NoFileSelectedError, WorkflowBusyError
)
from ..core.logging import get_logger, log_error_with_context, log_processing_stage
from ..drive_integration.client import GoogleDriveClient, get_drive_client
from ..drive_integration.schemas import UploadedFile
from ..settings import UploadSettings
from .files import read_file_content
from .schemas import Notice, NoticeLevel, SelectedFile, UploadOutcome, WorkflowPhase, WorkflowState


logger = get_logger(__name__)


StateListener = Callable[[WorkflowState], None]
Notifier = Callable[[Notice], None]

SUCCESS_MESSAGE = "File uploaded successfully"


class UploadWorkflow:
    """
    Sequential upload of one file at a time.

    Only one upload may be in flight per workflow; a second call made while
    busy is rejected with a notice and touches nothing.
    """

    def __init__(
        self,
        client: Optional[GoogleDriveClient] = None,
        settings: Optional[UploadSettings] = None,
        notify: Optional[Notifier] = None
    ) -> None:
        """
        Initialize the workflow.

        Args:
            client: Drive client to use; the process-wide client when omitted
            settings: Upload settings (destination folder name)
            notify: Callback receiving every user-facing notice
        """
        self._client = client
        self.settings = settings or UploadSettings()
        self._notify = notify
        self._listeners: List[StateListener] = []
        self._state = WorkflowState()
        self._busy = False
        self.last_outcome: Optional[UploadOutcome] = None
        self.last_file: Optional[UploadedFile] = None

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def web_view_link(self) -> Optional[str]:
        """View link of the last successful upload."""
        return self.last_file.web_view_link if self.last_file else None

    def add_listener(self, listener: StateListener) -> None:
        """Call ``listener`` with the new state on every phase change."""
        self._listeners.append(listener)

    def _set_state(self, phase: WorkflowPhase, reason: Optional[str] = None) -> None:
        self._state = WorkflowState(phase=phase, reason=reason)
        log_processing_stage(phase.value, {"reason": reason} if reason else None)
        for listener in self._listeners:
            listener(self._state)

    def _publish(self, notice: Notice) -> None:
        logger.debug(f"Notice ({notice.level.value}): {notice.message}")
        if self._notify:
            self._notify(notice)

    def _reject(self, error: DriveUploaderError) -> UploadOutcome:
        """Turn away a call before any work starts; state is left alone."""
        logger.warning(error.message)
        self._publish(Notice(message=error.message, level=NoticeLevel.WARNING))
        outcome = UploadOutcome(success=False, message=error.message, error_code=error.error_code)
        self.last_outcome = outcome
        return outcome

    async def upload(self, file: Optional[SelectedFile]) -> UploadOutcome:
        """
        Upload ``file`` to the destination folder and publish its view link.

        Args:
            file: The selected file, or None when nothing was selected

        Returns:
            UploadOutcome describing success or the failure notice shown
        """
        if file is None:
            return self._reject(NoFileSelectedError())

        if self._busy:
            return self._reject(WorkflowBusyError())

        self._busy = True
        start_time = time.monotonic()

        logger.info("Starting file upload process")
        logger.info(f"File size: {file.size} bytes")
        logger.info(f"File type: {file.mime_type}")

        try:
            uploaded, bytes_sent = await self._run(file)
        except DriveUploaderError as e:
            logger.error(f"Error uploading file: {e.message}")
            return self._fail(e.message, e.error_code, start_time)
        except Exception as e:
            log_error_with_context(e, {"file_name": file.name, "phase": self._state.phase.value}, __name__)
            return self._fail(str(e) or type(e).__name__, "UNEXPECTED_ERROR", start_time)
        finally:
            self._busy = False

        self.last_file = uploaded
        self._set_state(WorkflowPhase.SUCCEEDED)
        self._publish(Notice(message=SUCCESS_MESSAGE, level=NoticeLevel.POSITIVE))

        outcome = UploadOutcome(
            success=True,
            file=uploaded,
            message=SUCCESS_MESSAGE,
            bytes_uploaded=bytes_sent,
            upload_duration=time.monotonic() - start_time
        )
        self.last_outcome = outcome
        logger.info(f"Uploaded {uploaded.name} (ID: {uploaded.id}): {uploaded.web_view_link}")
        return outcome

    def _fail(self, reason: str, error_code: Optional[str], start_time: float) -> UploadOutcome:
        message = f"Error uploading file: {reason}"
        self._set_state(WorkflowPhase.FAILED, reason)
        self._publish(Notice(message=message, level=NoticeLevel.NEGATIVE))

        outcome = UploadOutcome(
            success=False,
            message=message,
            error_code=error_code,
            upload_duration=time.monotonic() - start_time
        )
        self.last_outcome = outcome
        return outcome

    async def _run(self, file: SelectedFile) -> Tuple[UploadedFile, int]:
        client = self._client or get_drive_client()

        self._set_state(WorkflowPhase.AUTHENTICATING)
        if not client.is_signed_in:
            await client.sign_in()

        self._set_state(WorkflowPhase.RESOLVING_FOLDER)
        folder_id = await self._resolve_folder(client)

        self._set_state(WorkflowPhase.TRANSFERRING)
        content = await read_file_content(file)
        logger.info(f"Uploading file: {file.name} to folder: {folder_id}")

        session = await client.start_resumable_session(file.name, folder_id)
        result = await client.transfer(session, content, file.mime_type)

        try:
            uploaded = await client.get_file(result['id'])
        except DriveIntegrationError as e:
            raise MetadataFetchError(
                f"Failed to fetch file details: {e.message}",
                drive_error=e.drive_error,
                file_id=result['id'],
                status_code=e.status_code
            )

        if not uploaded.web_view_link:
            raise MetadataFetchError(
                "Failed to fetch file details: no view link returned",
                file_id=uploaded.id
            )

        return uploaded, len(content)

    async def _resolve_folder(self, client: GoogleDriveClient) -> str:
        """
        Reuse the first non-trashed folder with the configured name, or create it.

        Two workflows racing here can both create the folder; Drive allows
        duplicate names and later lookups simply pick the first match.
        """
        folder_name = self.settings.folder_name
        try:
            folders = await client.find_folders(folder_name)
            if folders:
                logger.debug(f"Reusing folder {folder_name} (ID: {folders[0].id})")
                return folders[0].id

            folder = await client.create_folder(folder_name)
            return folder.id

        except DriveIntegrationError as e:
            logger.error(f"Error getting or creating {folder_name} folder: {e.message}")
            raise FolderResolutionError(
                f"Failed to get or create {folder_name} folder",
                folder_name=folder_name,
                drive_error=e.drive_error,
                status_code=e.status_code
            )
