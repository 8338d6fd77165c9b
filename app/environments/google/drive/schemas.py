"""
Google Drive Schemas - Data structures for folder and file operations.

Reference: https://developers.google.com/drive/api/v3/reference/files
"""

from typing import List, Optional
from pydantic import BaseModel, Field


FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

# Default names when the form leaves them empty
DEFAULT_CLIENT_FOLDER = "未命名客戶"
DEFAULT_PROJECT_FOLDER = "未命名專案"


class DriveFile(BaseModel):
    """A Drive file or folder (subset of the files resource)."""
    id: str = Field(..., description="Drive file ID")
    name: Optional[str] = Field(None)
    mime_type: Optional[str] = Field(None, alias="mimeType")
    web_view_link: Optional[str] = Field(None, alias="webViewLink")
    parents: Optional[List[str]] = Field(None)

    class Config:
        populate_by_name = True

    def is_folder(self) -> bool:
        return self.mime_type == FOLDER_MIME_TYPE

    def get_link(self) -> str:
        """webViewLink, or the standard URL built from the id."""
        if self.web_view_link:
            return self.web_view_link
        if self.is_folder():
            return f"https://drive.google.com/drive/folders/{self.id}"
        return f"https://drive.google.com/file/d/{self.id}/view"


class DriveFileList(BaseModel):
    """Response from files.list (only the first match is read)."""
    files: List[DriveFile] = Field(default_factory=list)


class UploadResult(BaseModel):
    """Outcome of an attachment upload."""
    success: bool = Field(..., description="True when the file is stored")
    url: Optional[str] = Field(None, description="Link to the uploaded file")
    file_id: Optional[str] = Field(None, description="Drive file ID (None in mock mode)")
    folder_id: Optional[str] = Field(None, description="Folder the file was placed in")
    mock: bool = Field(False, description="True when no real upload happened")
