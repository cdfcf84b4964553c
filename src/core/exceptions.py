"""
Custom exceptions for the DriveUploader application.

This module defines application-specific exceptions that provide
clear error handling and user-facing messages for each upload step.
"""

from typing import Optional, Dict, Any


class DriveUploaderError(Exception):
    """Base exception for all DriveUploader application errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(DriveUploaderError):
    """Raised when there are configuration-related errors."""

    def __init__(self, message: str, config_key: Optional[str] = None) -> None:
        super().__init__(message, "CONFIG_ERROR")
        self.config_key = config_key


class ConfigFetchError(DriveUploaderError):
    """Raised when the /config endpoint is unreachable or returns malformed data."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None
    ) -> None:
        super().__init__(message, "CONFIG_FETCH_ERROR")
        self.url = url
        self.status_code = status_code


class DriveIntegrationError(DriveUploaderError):
    """Raised when Google Drive operations fail."""

    def __init__(
        self,
        message: str,
        drive_error: Optional[str] = None,
        file_id: Optional[str] = None,
        status_code: Optional[int] = None,
        error_code: str = "DRIVE_ERROR"
    ) -> None:
        super().__init__(message, error_code)
        self.drive_error = drive_error
        self.file_id = file_id
        self.status_code = status_code


class AuthenticationError(DriveUploaderError):
    """Raised when sign-in fails or is cancelled."""

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        auth_type: Optional[str] = None
    ) -> None:
        super().__init__(message, "AUTH_ERROR")
        self.service = service
        self.auth_type = auth_type


class NoFileSelectedError(DriveUploaderError):
    """Raised when an upload is requested without a selected file."""

    def __init__(self, message: str = "Please select a file") -> None:
        super().__init__(message, "NO_FILE_SELECTED")


class WorkflowBusyError(DriveUploaderError):
    """Raised when an upload is requested while another one is in flight."""

    def __init__(self, message: str = "An upload is already in progress") -> None:
        super().__init__(message, "WORKFLOW_BUSY")


class FolderResolutionError(DriveIntegrationError):
    """Raised when the destination folder can be neither found nor created."""

    def __init__(self, message: str, folder_name: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, error_code="FOLDER_ERROR", **kwargs)
        self.folder_name = folder_name


class FileReadError(DriveUploaderError):
    """Raised when the selected file cannot be read into memory."""

    def __init__(self, message: str, file_name: Optional[str] = None) -> None:
        super().__init__(message, "FILE_READ_ERROR")
        self.file_name = file_name


class UploadSessionError(DriveIntegrationError):
    """Raised when a resumable upload session cannot be opened."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, error_code="UPLOAD_SESSION_ERROR", **kwargs)


class TransferError(DriveIntegrationError):
    """Raised when the file content PUT is rejected."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, error_code="TRANSFER_ERROR", **kwargs)


class MetadataFetchError(DriveIntegrationError):
    """Raised when the uploaded file's metadata cannot be retrieved."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, error_code="METADATA_ERROR", **kwargs)
