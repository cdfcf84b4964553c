"""
Pydantic schemas for Google Drive integration.

This module defines data models for Google Drive API responses
and internal data structures for file operations.
"""

from enum import Enum
from typing import List, Optional, Dict, Any

from pydantic import BaseModel, Field, ConfigDict


class DriveFileType(str, Enum):
    """Google Drive file types."""
    FOLDER = "application/vnd.google-apps.folder"
    OCTET_STREAM = "application/octet-stream"


class ClientConfig(BaseModel):
    """OAuth client configuration published by the /config endpoint."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    client_id: Optional[str] = Field(default=None, alias="GOOGLE_CLIENT_ID", description="OAuth client ID")
    api_key: Optional[str] = Field(default=None, alias="GOOGLE_API_KEY", description="Google API key")

    def to_payload(self) -> Dict[str, Optional[str]]:
        """Serialize with the environment variable names used on the wire."""
        return self.model_dump(by_alias=True)


class DriveFile(BaseModel):
    """Google Drive file information."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(description="File ID")
    name: Optional[str] = Field(default=None, description="File name")
    mime_type: Optional[str] = Field(default=None, description="MIME type")
    parents: List[str] = Field(default_factory=list, description="Parent folder IDs")
    web_view_link: Optional[str] = Field(default=None, description="Web view link")

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "DriveFile":
        """Build from a Drive v3 files resource."""
        return cls(
            id=item["id"],
            name=item.get("name"),
            mime_type=item.get("mimeType"),
            parents=item.get("parents", []),
            web_view_link=item.get("webViewLink")
        )

    @property
    def is_folder(self) -> bool:
        """Check if this is a folder."""
        return self.mime_type == DriveFileType.FOLDER


class SearchQuery(BaseModel):
    """Query parameters for listing Drive files."""

    file_name: Optional[str] = Field(default=None, description="Exact file name match")
    mime_type: Optional[str] = Field(default=None, description="MIME type filter")
    trashed: bool = Field(default=False, description="Include trashed files")
    fields: str = Field(default="files(id)", description="Partial response fields")

    def to_query_string(self) -> str:
        """Render as a Drive ``q`` expression."""
        query_parts = []

        if self.file_name:
            query_parts.append(f"name='{self.file_name}'")

        if self.mime_type:
            query_parts.append(f"mimeType='{self.mime_type}'")

        if not self.trashed:
            query_parts.append("trashed=false")

        return " and ".join(query_parts)


class UploadSession(BaseModel):
    """A resumable upload session opened for a single transfer."""

    session_url: str = Field(description="Location returned when the session was opened")
    folder_id: str = Field(description="Destination folder ID")
    file_name: str = Field(description="Name declared for the uploaded file")


class UploadedFile(BaseModel):
    """File created by a finished upload."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(description="File ID")
    name: str = Field(description="File name")
    web_view_link: Optional[str] = Field(default=None, description="Shareable view link")

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "UploadedFile":
        return cls(id=item["id"], name=item.get("name", ""), web_view_link=item.get("webViewLink"))
