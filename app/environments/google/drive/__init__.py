"""
Google Drive Module - Project folders and attachment uploads.
"""

from app.environments.google.drive.client import GoogleDriveClient, escape_query_value
from app.environments.google.drive.mock import MockFileStorage, MOCK_URL_PREFIX
from app.environments.google.drive.schemas import (
    DriveFile,
    DriveFileList,
    UploadResult,
    FOLDER_MIME_TYPE,
)

__all__ = [
    "GoogleDriveClient",
    "MockFileStorage",
    "DriveFile",
    "DriveFileList",
    "UploadResult",
    "escape_query_value",
    "FOLDER_MIME_TYPE",
    "MOCK_URL_PREFIX",
]
