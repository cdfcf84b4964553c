"""
Pydantic schemas for the upload workflow.

Selected files, workflow state, notices and upload outcomes. Everything
here lives for one browser session at most.
"""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict

from ..drive_integration.schemas import UploadedFile


DEFAULT_MIME_TYPE = "application/octet-stream"


class WorkflowPhase(str, Enum):
    """Phases of an upload, in the order they are entered."""
    IDLE = "idle"
    AUTHENTICATING = "authenticating"
    RESOLVING_FOLDER = "resolving_folder"
    TRANSFERRING = "transferring"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


BUSY_PHASES = frozenset({
    WorkflowPhase.AUTHENTICATING,
    WorkflowPhase.RESOLVING_FOLDER,
    WorkflowPhase.TRANSFERRING,
})


class WorkflowState(BaseModel):
    """Current phase plus the failure reason when the phase is FAILED."""

    model_config = ConfigDict(frozen=True)

    phase: WorkflowPhase = Field(default=WorkflowPhase.IDLE, description="Current phase")
    reason: Optional[str] = Field(default=None, description="Failure reason")

    @property
    def is_busy(self) -> bool:
        return self.phase in BUSY_PHASES


class NoticeLevel(str, Enum):
    """Notification types understood by ``ui.notify``."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    WARNING = "warning"
    INFO = "info"


class Notice(BaseModel):
    """A transient, user-facing notification."""

    model_config = ConfigDict(frozen=True)

    message: str = Field(description="Text shown to the user")
    level: NoticeLevel = Field(default=NoticeLevel.INFO, description="Notification type")


class SelectedFile(BaseModel):
    """A local file chosen by the user, held either in memory or on disk."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(description="File name")
    size: int = Field(ge=0, description="Size in bytes")
    mime_type: str = Field(default=DEFAULT_MIME_TYPE, description="Declared MIME type")
    content: Optional[bytes] = Field(default=None, description="In-memory content")
    path: Optional[Path] = Field(default=None, description="Local path to read on upload")

    def __repr__(self) -> str:
        return f"SelectedFile(name={self.name!r}, size={self.size}, mime_type={self.mime_type!r})"


class UploadOutcome(BaseModel):
    """Result of one call to ``UploadWorkflow.upload``."""

    success: bool = Field(description="Whether the upload finished")
    file: Optional[UploadedFile] = Field(default=None, description="Uploaded file details")
    message: str = Field(description="Notice text shown for this outcome")
    error_code: Optional[str] = Field(default=None, description="Error code when failed")
    bytes_uploaded: Optional[int] = Field(default=None, description="Bytes sent in the PUT")
    upload_duration: Optional[float] = Field(default=None, description="Seconds from start to finish")
    finished_at: datetime = Field(default_factory=datetime.now, description="Completion timestamp")

    @property
    def web_view_link(self) -> Optional[str]:
        return self.file.web_view_link if self.file else None
