"""Upload workflow module: from a selected file to a Drive share link."""

from .clipboard import copy_link
from .files import read_file_content, selected_file_from_bytes, selected_file_from_path
from .schemas import Notice, NoticeLevel, SelectedFile, UploadOutcome, WorkflowPhase, WorkflowState
from .workflow import UploadWorkflow

__all__ = [
    "copy_link",
    "read_file_content",
    "selected_file_from_bytes",
    "selected_file_from_path",
    "Notice",
    "NoticeLevel",
    "SelectedFile",
    "UploadOutcome",
    "WorkflowPhase",
    "WorkflowState",
    "UploadWorkflow"
]
