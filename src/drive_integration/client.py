"""
Google Drive API client.

This module provides the Drive operations the upload workflow needs:
interactive sign-in, folder lookup and creation, resumable upload
sessions, content transfer and metadata retrieval. It also owns the
process-wide client handle.
"""

import asyncio
import time
from typing import List, Optional, Dict, Any

import httpx
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ..core.logging import get_logger, log_api_call
from ..core.exceptions import (
    AuthenticationError, ConfigurationError, DriveIntegrationError,
    TransferError, UploadSessionError
)
from ..settings import AppSettings, GoogleSettings, UploadSettings, get_settings
from .auth import DriveAuthenticator
from .schemas import ClientConfig, DriveFile, DriveFileType, SearchQuery, UploadSession, UploadedFile


logger = get_logger(__name__)


class GoogleDriveClient:
    """
    Google Drive API client for the upload workflow.

    Metadata calls go through the discovery-based ``drive`` v3 service and
    run in the default executor. The resumable session and the content
    PUT are plain HTTP calls made with httpx and the signed-in user's
    bearer token.
    """

    def __init__(
        self,
        google_settings: GoogleSettings,
        upload_settings: UploadSettings,
        client_config: Optional[ClientConfig] = None,
        authenticator: Optional[DriveAuthenticator] = None,
        service: Any = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        """
        Initialize the Google Drive client.

        Args:
            google_settings: OAuth and scope settings
            upload_settings: Upload endpoint and timeout settings
            client_config: Client ID and API key, usually from /config
            authenticator: Pre-built authenticator (tests)
            service: Pre-built Drive service (tests)
            transport: httpx transport for session and transfer calls (tests)
        """
        self.google_settings = google_settings
        self.upload_settings = upload_settings
        self.client_config = client_config or ClientConfig(
            client_id=google_settings.client_id,
            api_key=google_settings.api_key
        )
        self.authenticator = authenticator or DriveAuthenticator(
            google_settings, client_id=self.client_config.client_id
        )
        self.service = service
        self.transport = transport

        logger.info("Initialized Google Drive client")

    @property
    def is_signed_in(self) -> bool:
        """Whether a Drive service exists for a currently valid session."""
        return self.service is not None and self.authenticator.is_authenticated

    async def sign_in(self) -> None:
        """
        Run the interactive sign-in and build the Drive service.

        Raises:
            AuthenticationError: If sign-in fails or is cancelled
        """
        loop = asyncio.get_event_loop()
        try:
            credentials = await loop.run_in_executor(None, self.authenticator.authenticate)
            self.service = build(
                'drive', 'v3',
                credentials=credentials,
                developerKey=self.client_config.api_key,
                cache_discovery=False
            )
            logger.info("Successfully signed in to Google Drive")

        except AuthenticationError:
            raise
        except Exception as e:
            logger.error(f"Google Drive sign-in failed: {e}")
            raise AuthenticationError(
                f"Authentication failed: {str(e)}",
                service="Google Drive",
                auth_type="OAuth2"
            )

    def _ensure_authenticated(self) -> None:
        """Ensure client is authenticated before API calls."""
        if not self.service:
            raise DriveIntegrationError("Client not authenticated. Call sign_in() first.")

    async def _execute(self, request: Any, action: str) -> Dict[str, Any]:
        """Execute a googleapiclient request off the event loop."""
        loop = asyncio.get_event_loop()
        try:
            return await loop.run_in_executor(None, request.execute)
        except HttpError as e:
            status = getattr(e.resp, "status", None)
            logger.error(f"{action} failed: {e}")
            raise DriveIntegrationError(
                f"{action} failed: {e.reason or e}",
                drive_error=str(e),
                status_code=int(status) if status else None
            )

    async def find_folders(self, folder_name: str) -> List[DriveFile]:
        """
        List non-trashed folders with an exact name.

        Args:
            folder_name: Folder name to match

        Returns:
            Matching folders, possibly empty
        """
        self._ensure_authenticated()

        search_query = SearchQuery(file_name=folder_name, mime_type=DriveFileType.FOLDER.value)
        result = await self._execute(
            self.service.files().list(
                q=search_query.to_query_string(),
                fields=search_query.fields
            ),
            "Folder search"
        )

        folders = [DriveFile.from_api(item) for item in result.get('files') or []]
        logger.debug(f"Found {len(folders)} folder(s) named '{folder_name}'")
        return folders

    async def create_folder(self, folder_name: str) -> DriveFile:
        """
        Create a folder at the root of the user's Drive.

        Args:
            folder_name: Name of the new folder

        Returns:
            The created folder
        """
        self._ensure_authenticated()

        file_metadata = {
            'name': folder_name,
            'mimeType': DriveFileType.FOLDER.value
        }
        result = await self._execute(
            self.service.files().create(body=file_metadata, fields='id,name,mimeType'),
            "Folder creation"
        )

        folder = DriveFile.from_api(result)
        logger.info(f"Created folder: {folder_name} (ID: {folder.id})")
        return folder

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.upload_settings.request_timeout,
            transport=self.transport
        )

    async def _bearer_headers(self) -> Dict[str, str]:
        loop = asyncio.get_event_loop()
        token = await loop.run_in_executor(None, self.authenticator.access_token)
        return {'Authorization': f'Bearer {token}'}

    async def start_resumable_session(self, file_name: str, folder_id: str) -> UploadSession:
        """
        Open a resumable upload session for one file.

        Args:
            file_name: Name the uploaded file will get
            folder_id: Destination folder ID

        Returns:
            UploadSession holding the session URL from the Location header

        Raises:
            UploadSessionError: On transport errors, non-2xx status or a missing Location
        """
        self._ensure_authenticated()

        url = self.upload_settings.upload_url
        headers = await self._bearer_headers()
        headers['Content-Type'] = 'application/json; charset=UTF-8'
        start_time = time.monotonic()

        try:
            async with self._http_client() as http:
                response = await http.post(
                    url,
                    headers=headers,
                    json={'name': file_name, 'parents': [folder_id]}
                )
        except httpx.RequestError as e:
            raise UploadSessionError(f"Failed to start upload session: {e}", drive_error=str(e))

        log_api_call("Google Drive", "POST", url, response.status_code, time.monotonic() - start_time)

        if not response.is_success:
            raise UploadSessionError(
                f"Failed to start upload session: {response.reason_phrase or response.status_code}",
                drive_error=response.text,
                status_code=response.status_code
            )

        session_url = response.headers.get('Location')
        if not session_url:
            raise UploadSessionError(
                "Failed to start upload session: no session URL returned",
                status_code=response.status_code
            )

        logger.debug(f"Upload session URL: {session_url}")
        return UploadSession(session_url=session_url, folder_id=folder_id, file_name=file_name)

    async def transfer(self, session: UploadSession, content: bytes, mime_type: str) -> Dict[str, Any]:
        """
        Send the whole file in a single PUT to the session URL.

        Args:
            session: Open upload session
            content: Complete file content
            mime_type: Content type declared for the file

        Returns:
            The Drive files resource from the final response (contains ``id``)

        Raises:
            TransferError: On transport errors, non-2xx status or an unreadable response
        """
        start_time = time.monotonic()

        try:
            async with self._http_client() as http:
                response = await http.put(
                    session.session_url,
                    headers={'Content-Type': mime_type},
                    content=content
                )
        except httpx.RequestError as e:
            raise TransferError(f"Failed to upload file: {e}", drive_error=str(e))

        log_api_call("Google Drive", "PUT", session.session_url, response.status_code,
                     time.monotonic() - start_time)

        if not response.is_success:
            raise TransferError(
                f"Failed to upload file: {response.reason_phrase or response.status_code}",
                drive_error=response.text,
                status_code=response.status_code
            )

        try:
            result = response.json()
        except ValueError as e:
            raise TransferError(f"Failed to upload file: unreadable response ({e})",
                                status_code=response.status_code)

        if not isinstance(result, dict) or 'id' not in result:
            raise TransferError("Failed to upload file: response has no file ID",
                                status_code=response.status_code)

        logger.info(f"Upload response status: {response.status_code} (ID: {result['id']})")
        return result

    async def get_file(self, file_id: str) -> UploadedFile:
        """
        Fetch ID, name and view link of an uploaded file.

        Raises:
            DriveIntegrationError: If the request fails
        """
        self._ensure_authenticated()

        result = await self._execute(
            self.service.files().get(fileId=file_id, fields='id,name,webViewLink'),
            "File details request"
        )
        return UploadedFile.from_api(result)

    def sign_out(self) -> None:
        """Drop the Drive service and in-memory credentials; the token file is kept."""
        self.service = None
        self.authenticator.forget()
        logger.info("Signed out of Google Drive")

    def close(self) -> None:
        """Close the Drive service's HTTP connections and sign out."""
        if self.service is not None and hasattr(self.service, 'close'):
            self.service.close()
        self.sign_out()

    async def aclose(self) -> None:
        """Close the client off the event loop."""
        loop = asyncio.get_event_loop()
        await loop.run_in_executor(None, self.close)


# Process-wide client handle
_drive_client: Optional[GoogleDriveClient] = None


def init_drive_client(
    client_config: ClientConfig,
    settings: Optional[AppSettings] = None,
    **kwargs: Any
) -> GoogleDriveClient:
    """
    Create the process-wide Drive client, replacing any existing one.

    Args:
        client_config: Client ID and API key
        settings: Application settings (global settings by default)
        **kwargs: Passed through to GoogleDriveClient

    Raises:
        ConfigurationError: If no OAuth client is configured at all
    """
    global _drive_client
    settings = settings or get_settings()

    secrets_file = settings.google.client_secrets_file
    if not client_config.client_id and not (secrets_file and secrets_file.exists()):
        raise ConfigurationError(
            "Google client ID is not configured",
            config_key="GOOGLE_CLIENT_ID"
        )

    reset_drive_client()
    _drive_client = GoogleDriveClient(
        settings.google, settings.upload, client_config=client_config, **kwargs
    )
    logger.info("Google API client initialized")
    return _drive_client


def get_drive_client() -> GoogleDriveClient:
    """
    Return the process-wide Drive client.

    Raises:
        DriveIntegrationError: If init_drive_client() has not been called
    """
    if _drive_client is None:
        raise DriveIntegrationError("Google API client is not initialized")
    return _drive_client


def reset_drive_client() -> None:
    """Tear down the process-wide Drive client."""
    global _drive_client
    if _drive_client is not None:
        _drive_client.close()
        logger.debug("Google API client reset")
    _drive_client = None
