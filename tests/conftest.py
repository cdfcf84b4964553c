"""
Pytest configuration and fixtures for DriveUploader tests.
"""

from pathlib import Path
from typing import Dict, Generator, List, Optional
from unittest.mock import MagicMock, Mock
import tempfile

import httpx
import pytest

from src.drive_integration.auth import DriveAuthenticator
from src.drive_integration.client import GoogleDriveClient, reset_drive_client
from src.drive_integration.schemas import ClientConfig
from src.settings import AppSettings, GoogleSettings, LoggingSettings, UploadSettings


SESSION_URL = "https://www.googleapis.com/upload/drive/v3/files?uploadType=resumable&upload_id=session-1"
VIEW_LINK = "https://drive.google.com/file/d/file-123/view?usp=drivesdk"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_settings(temp_dir: Path) -> AppSettings:
    """Create test settings with minimal configuration."""
    return AppSettings(
        name="TestDriveUploader",
        version="0.1.0-test",
        debug=True,
        google=GoogleSettings(client_id="test-client-id", api_key="test-api-key"),
        logging=LoggingSettings(file=None)
    )


@pytest.fixture
def sample_env_file(temp_dir: Path) -> Path:
    """Create a sample .env file for testing."""
    env_file = temp_dir / ".env"
    env_content = """
GOOGLE_CLIENT_ID=env-client-id
GOOGLE_API_KEY=env-api-key
UPLOAD_FOLDER_NAME=uploads
LOG_LEVEL=DEBUG
"""
    env_file.write_text(env_content.strip())
    return env_file


@pytest.fixture
def sample_yaml_config(temp_dir: Path) -> Path:
    """Create a sample YAML config file for testing."""
    yaml_file = temp_dir / "settings.yaml"
    yaml_content = f"""
app:
  name: "TestDriveUploader"
  version: "0.1.0-test"
  debug: true

google:
  client_id: "yaml-client-id"
  api_key: "yaml-api-key"

upload:
  folder_name: "team-uploads"

server:
  port: 8081
  public_dir: "{temp_dir / 'public'}"

logging:
  level: "DEBUG"
  file: null
"""
    yaml_file.write_text(yaml_content.strip())
    return yaml_file


@pytest.fixture(autouse=True)
def clean_drive_client() -> Generator[None, None, None]:
    """Tear down the process-wide Drive client between tests."""
    reset_drive_client()
    yield
    reset_drive_client()


class FakeUploadEndpoint:
    """In-memory stand-in for the resumable upload endpoint."""

    def __init__(
        self,
        session_status: int = 200,
        transfer_status: int = 200,
        file_id: str = "file-123",
        location: Optional[str] = SESSION_URL
    ) -> None:
        self.session_status = session_status
        self.transfer_status = transfer_status
        self.file_id = file_id
        self.location = location
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)

        if request.method == "POST":
            if self.session_status >= 300:
                return httpx.Response(self.session_status, json={"error": {"message": "denied"}})
            headers: Dict[str, str] = {"Location": self.location} if self.location else {}
            return httpx.Response(self.session_status, headers=headers)

        if request.method == "PUT":
            if self.transfer_status >= 300:
                return httpx.Response(self.transfer_status, text="upload rejected")
            return httpx.Response(self.transfer_status, json={"id": self.file_id, "kind": "drive#file"})

        return httpx.Response(405)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def posts(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    @property
    def puts(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == "PUT"]


@pytest.fixture
def upload_endpoint() -> FakeUploadEndpoint:
    return FakeUploadEndpoint()


@pytest.fixture
def drive_service() -> MagicMock:
    """Drive v3 service mock: no existing folder, create and get succeed."""
    service = MagicMock()
    files = service.files.return_value
    files.list.return_value.execute.return_value = {"files": []}
    files.create.return_value.execute.return_value = {
        "id": "folder-1",
        "name": "uploads",
        "mimeType": "application/vnd.google-apps.folder"
    }
    files.get.return_value.execute.return_value = {
        "id": "file-123",
        "name": "report.pdf",
        "webViewLink": VIEW_LINK
    }
    return service


@pytest.fixture
def authenticator() -> Mock:
    """Authenticator that is already signed in."""
    auth = Mock(spec=DriveAuthenticator)
    auth.is_authenticated = True
    auth.access_token.return_value = "test-token"
    return auth


@pytest.fixture
def drive_client(
    test_settings: AppSettings,
    drive_service: MagicMock,
    authenticator: Mock,
    upload_endpoint: FakeUploadEndpoint
) -> GoogleDriveClient:
    return GoogleDriveClient(
        test_settings.google,
        UploadSettings(),
        client_config=ClientConfig(client_id="test-client-id", api_key="test-api-key"),
        authenticator=authenticator,
        service=drive_service,
        transport=upload_endpoint.transport
    )
