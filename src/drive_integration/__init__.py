"""Google Drive integration module for file uploads."""

from .auth import DriveAuthenticator
from .client import GoogleDriveClient, init_drive_client, get_drive_client, reset_drive_client
from .config_client import fetch_client_config
from .schemas import ClientConfig, DriveFile, UploadSession, UploadedFile

__all__ = [
    "DriveAuthenticator",
    "GoogleDriveClient",
    "init_drive_client",
    "get_drive_client",
    "reset_drive_client",
    "fetch_client_config",
    "ClientConfig",
    "DriveFile",
    "UploadSession",
    "UploadedFile"
]
