"""
Tests for the Google Drive client and the process-wide client handle.
"""

import json
from unittest.mock import Mock, patch

import httplib2
import httpx
import pytest
from googleapiclient.errors import HttpError

from src.core.exceptions import (
    AuthenticationError, ConfigurationError, DriveIntegrationError,
    TransferError, UploadSessionError
)
from src.drive_integration.client import (
    GoogleDriveClient, get_drive_client, init_drive_client, reset_drive_client
)
from src.drive_integration.schemas import ClientConfig, UploadSession
from src.settings import UploadSettings

from tests.conftest import SESSION_URL, FakeUploadEndpoint


pytestmark = pytest.mark.unit


def make_http_error(status: int, message: str = "backend error") -> HttpError:
    content = json.dumps({"error": {"code": status, "message": message}}).encode()
    return HttpError(httplib2.Response({"status": status}), content)


class TestFolders:
    """Test folder lookup and creation."""

    @pytest.mark.asyncio
    async def test_find_folders_query(self, drive_client, drive_service):
        """Test the lookup matches name, folder type and excludes trash."""
        drive_service.files.return_value.list.return_value.execute.return_value = {
            "files": [{"id": "folder-9"}]
        }

        folders = await drive_client.find_folders("uploads")

        assert [f.id for f in folders] == ["folder-9"]
        drive_service.files.return_value.list.assert_called_once_with(
            q="name='uploads' and mimeType='application/vnd.google-apps.folder' and trashed=false",
            fields="files(id)"
        )

    @pytest.mark.asyncio
    async def test_find_folders_empty_response(self, drive_client, drive_service):
        """Test a response without a files key means no folders."""
        drive_service.files.return_value.list.return_value.execute.return_value = {}
        assert await drive_client.find_folders("uploads") == []

    @pytest.mark.asyncio
    async def test_create_folder(self, drive_client, drive_service):
        """Test folder creation sends the folder MIME type."""
        folder = await drive_client.create_folder("uploads")

        assert folder.id == "folder-1"
        assert folder.is_folder
        drive_service.files.return_value.create.assert_called_once_with(
            body={"name": "uploads", "mimeType": "application/vnd.google-apps.folder"},
            fields="id,name,mimeType"
        )

    @pytest.mark.asyncio
    async def test_http_error_is_wrapped(self, drive_client, drive_service):
        """Test googleapiclient errors become DriveIntegrationError with the status."""
        drive_service.files.return_value.list.return_value.execute.side_effect = make_http_error(403)

        with pytest.raises(DriveIntegrationError) as exc_info:
            await drive_client.find_folders("uploads")

        assert exc_info.value.status_code == 403
        assert exc_info.value.error_code == "DRIVE_ERROR"

    @pytest.mark.asyncio
    async def test_requires_sign_in(self, test_settings, authenticator):
        """Test API calls fail before sign-in."""
        client = GoogleDriveClient(test_settings.google, UploadSettings(), authenticator=authenticator)

        assert client.is_signed_in is False
        with pytest.raises(DriveIntegrationError):
            await client.find_folders("uploads")


class TestResumableSession:
    """Test opening resumable upload sessions."""

    @pytest.mark.asyncio
    async def test_session_request(self, drive_client, upload_endpoint):
        """Test the session POST carries token, JSON metadata and returns Location."""
        session = await drive_client.start_resumable_session("report.pdf", "folder-1")

        assert session.session_url == SESSION_URL
        assert session.folder_id == "folder-1"

        request = upload_endpoint.posts[0]
        assert str(request.url) == UploadSettings().upload_url
        assert request.headers["Authorization"] == "Bearer test-token"
        assert request.headers["Content-Type"] == "application/json; charset=UTF-8"
        assert json.loads(request.content) == {"name": "report.pdf", "parents": ["folder-1"]}

    @pytest.mark.asyncio
    async def test_session_non_success_status(self, drive_client, upload_endpoint):
        """Test a non-2xx response raises UploadSessionError with the reason phrase."""
        upload_endpoint.session_status = 403

        with pytest.raises(UploadSessionError) as exc_info:
            await drive_client.start_resumable_session("report.pdf", "folder-1")

        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Failed to start upload session: Forbidden"

    @pytest.mark.asyncio
    async def test_session_without_location(self, drive_client, upload_endpoint):
        """Test a success response without Location is still a session failure."""
        upload_endpoint.location = None

        with pytest.raises(UploadSessionError):
            await drive_client.start_resumable_session("report.pdf", "folder-1")

    @pytest.mark.asyncio
    async def test_session_transport_error(self, test_settings, drive_service, authenticator):
        """Test network failures are reported as session failures."""
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = GoogleDriveClient(
            test_settings.google, UploadSettings(),
            authenticator=authenticator, service=drive_service,
            transport=httpx.MockTransport(refuse)
        )

        with pytest.raises(UploadSessionError, match="connection refused"):
            await client.start_resumable_session("report.pdf", "folder-1")


class TestTransfer:
    """Test the single-PUT content transfer."""

    @pytest.mark.asyncio
    async def test_transfer_sends_all_bytes(self, drive_client, upload_endpoint):
        """Test the PUT carries the whole buffer and the declared content type."""
        session = UploadSession(session_url=SESSION_URL, folder_id="folder-1", file_name="a.bin")
        content = b"\x00\x01" * 500

        result = await drive_client.transfer(session, content, "application/octet-stream")

        assert result["id"] == "file-123"
        request = upload_endpoint.puts[0]
        assert str(request.url) == SESSION_URL
        assert request.headers["Content-Type"] == "application/octet-stream"
        assert request.content == content

    @pytest.mark.asyncio
    async def test_transfer_non_success_status(self, drive_client, upload_endpoint):
        """Test a non-2xx PUT raises TransferError."""
        upload_endpoint.transfer_status = 500
        session = UploadSession(session_url=SESSION_URL, folder_id="folder-1", file_name="a.txt")

        with pytest.raises(TransferError) as exc_info:
            await drive_client.transfer(session, b"data", "text/plain")

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Failed to upload file: Internal Server Error"

    @pytest.mark.asyncio
    async def test_transfer_response_without_id(self, test_settings, drive_service, authenticator):
        """Test a success response that names no file is a transfer failure."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"kind": "drive#file"}))
        client = GoogleDriveClient(
            test_settings.google, UploadSettings(),
            authenticator=authenticator, service=drive_service, transport=transport
        )
        session = UploadSession(session_url=SESSION_URL, folder_id="folder-1", file_name="a.txt")

        with pytest.raises(TransferError, match="no file ID"):
            await client.transfer(session, b"data", "text/plain")


class TestFileDetails:
    """Test metadata retrieval."""

    @pytest.mark.asyncio
    async def test_get_file(self, drive_client, drive_service):
        """Test the view link is requested and returned."""
        uploaded = await drive_client.get_file("file-123")

        assert uploaded.id == "file-123"
        assert uploaded.web_view_link
        drive_service.files.return_value.get.assert_called_once_with(
            fileId="file-123", fields="id,name,webViewLink"
        )


class TestSignIn:
    """Test interactive sign-in."""

    @pytest.mark.asyncio
    async def test_sign_in_builds_service(self, test_settings, authenticator):
        """Test a successful sign-in builds the Drive v3 service with the API key."""
        credentials = Mock()
        authenticator.authenticate.return_value = credentials
        client = GoogleDriveClient(
            test_settings.google, UploadSettings(),
            client_config=ClientConfig(client_id="cid", api_key="key"),
            authenticator=authenticator
        )

        with patch("src.drive_integration.client.build") as build:
            await client.sign_in()

        build.assert_called_once_with(
            'drive', 'v3', credentials=credentials, developerKey="key", cache_discovery=False
        )
        assert client.is_signed_in

    @pytest.mark.asyncio
    async def test_sign_in_failure(self, test_settings, authenticator):
        """Test a cancelled consent flow surfaces as AuthenticationError."""
        authenticator.authenticate.side_effect = AuthenticationError("OAuth2 flow failed: access_denied")
        client = GoogleDriveClient(test_settings.google, UploadSettings(), authenticator=authenticator)

        with pytest.raises(AuthenticationError, match="access_denied"):
            await client.sign_in()
        assert client.service is None


class TestClientHandle:
    """Test the process-wide client handle."""

    def test_get_before_init(self):
        """Test the handle must be initialised explicitly."""
        with pytest.raises(DriveIntegrationError, match="not initialized"):
            get_drive_client()

    def test_init_and_reset(self, test_settings):
        """Test init stores the handle and reset tears it down."""
        config = ClientConfig(client_id="cid", api_key="key")

        client = init_drive_client(config, test_settings)

        assert get_drive_client() is client
        assert client.client_config.api_key == "key"
        assert client.authenticator.client_id == "cid"

        reset_drive_client()
        with pytest.raises(DriveIntegrationError):
            get_drive_client()

    def test_init_replaces_existing(self, test_settings):
        """Test a second init replaces the first handle."""
        first = init_drive_client(ClientConfig(client_id="one"), test_settings)
        second = init_drive_client(ClientConfig(client_id="two"), test_settings)

        assert first is not second
        assert get_drive_client() is second
        assert first.service is None

    def test_init_without_client_id(self, test_settings):
        """Test init refuses a configuration with no OAuth client at all."""
        with pytest.raises(ConfigurationError):
            init_drive_client(ClientConfig(), test_settings)


class TestLifecycle:
    """Test signing out and closing the client."""

    def test_sign_out(self, drive_client, drive_service, authenticator):
        """Test sign-out drops the service and credentials without closing connections."""
        drive_client.sign_out()

        assert drive_client.service is None
        authenticator.forget.assert_called_once()
        drive_service.close.assert_not_called()

    @pytest.mark.asyncio
    async def test_sign_out_requires_new_sign_in(self, drive_client):
        """Test Drive calls fail after sign-out until sign_in runs again."""
        drive_client.sign_out()

        assert drive_client.is_signed_in is False
        with pytest.raises(DriveIntegrationError, match="not authenticated"):
            await drive_client.find_folders("uploads")

    @pytest.mark.asyncio
    async def test_aclose(self, drive_client, drive_service, authenticator):
        """Test aclose closes the service connections and signs out."""
        await drive_client.aclose()

        drive_service.close.assert_called_once()
        assert drive_client.service is None
        authenticator.forget.assert_called_once()
