"""
Google Drive API Client - Project folders and attachment uploads.

Key Features:
=============
1. create_folder(): new folder per client/project, returns its link
2. ensure_folder(): find a folder by exact name under the root, or create it
3. upload_file(): multipart/related upload into a named project folder

Multipart Upload:
=================
The upload body is multipart/related with two parts:
    --BOUNDARY
    Content-Type: application/json; charset=UTF-8      (file metadata)
    --BOUNDARY
    Content-Type: <file mime type>
    Content-Transfer-Encoding: base64                   (file content)
    --BOUNDARY--

API Reference:
==============
- files.create: https://developers.google.com/drive/api/v3/reference/files/create
- files.list (q syntax): https://developers.google.com/drive/api/guides/search-files
"""

import base64
import inspect
import json
import logging
import mimetypes
from typing import Any, Optional, Tuple

from app.core.config import settings
from app.environments.base import FileStorageClient
from app.environments.google.auth.schemas import DRIVE_SCOPES
from app.environments.google.bootstrap import GoogleClientBootstrap
from app.environments.google.drive.mock import MockFileStorage
from app.environments.google.drive.schemas import (
    DEFAULT_CLIENT_FOLDER,
    DEFAULT_PROJECT_FOLDER,
    FOLDER_MIME_TYPE,
    DriveFile,
    DriveFileList,
    UploadResult,
)


logger = logging.getLogger("studio.environments.google.drive")


MULTIPART_BOUNDARY = "-------314159265358979323846"


def escape_query_value(value: str) -> str:
    """Escape a literal for a Drive `q` string ('...')."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def is_binary_readable(file: Any) -> bool:
    """True for objects exposing read(), like UploadFile or an open file."""
    return callable(getattr(file, "read", None))


class GoogleDriveClient(FileStorageClient):
    """
    Google Drive client for project folders.

    Args:
        bootstrap: Shared, lazily initialized Google client
        root_folder_id: Parent of all project folders ("" = drive root)
        mock_storage: Receives uploads whose input is not binary-readable
    """

    service_name = "drive"
    required_scopes = DRIVE_SCOPES

    def __init__(
        self,
        bootstrap: GoogleClientBootstrap,
        root_folder_id: Optional[str] = None,
        mock_storage: Optional[MockFileStorage] = None,
    ):
        self.bootstrap = bootstrap
        self.root_folder_id = root_folder_id if root_folder_id is not None else settings.GOOGLE_DRIVE_ROOT_FOLDER_ID
        self.mock_storage = mock_storage or MockFileStorage()

    # -------------------------------------------------------------------------
    # FOLDERS
    # -------------------------------------------------------------------------

    async def create_folder(self, name: Optional[str] = None) -> str:
        """
        Create a folder under the root and return its webViewLink.

        Not idempotent: every call creates a new folder.
        """
        folder = await self._create_folder(name or DEFAULT_CLIENT_FOLDER)
        return folder.get_link()

    async def _create_folder(self, name: str) -> DriveFile:
        body = {
            "name": name,
            "mimeType": FOLDER_MIME_TYPE,
        }
        if self.root_folder_id:
            body["parents"] = [self.root_folder_id]

        data = await self.bootstrap.request(
            "drive",
            "POST",
            "files",
            params={"fields": "id,name,mimeType,webViewLink,parents"},
            json_body=body,
        )
        folder = DriveFile(**data)
        logger.info(f"Created Drive folder '{name}'", extra={"folder_id": folder.id})
        return folder

    async def find_folder(self, name: str) -> Optional[DriveFile]:
        """Exact-name, non-trashed folder directly under the root."""
        parent = self.root_folder_id or "root"
        query = (
            f"name = '{escape_query_value(name)}' and "
            f"mimeType = '{FOLDER_MIME_TYPE}' and "
            f"'{escape_query_value(parent)}' in parents and trashed = false"
        )
        data = await self.bootstrap.request(
            "drive",
            "GET",
            "files",
            params={
                "q": query,
                "fields": "files(id,name,mimeType,webViewLink)",
                "pageSize": 1,
                "spaces": "drive",
            },
        )
        result = DriveFileList(**data)
        return result.files[0] if result.files else None

    async def ensure_folder(self, name: Optional[str] = None) -> DriveFile:
        """Reuse the folder with this name, creating it if absent."""
        name = name or DEFAULT_PROJECT_FOLDER
        folder = await self.find_folder(name)
        if folder is not None:
            logger.debug(f"Reusing Drive folder '{name}'")
            return folder
        return await self._create_folder(name)

    # -------------------------------------------------------------------------
    # UPLOADS
    # -------------------------------------------------------------------------

    @staticmethod
    def build_multipart_body(
        metadata: dict,
        content: bytes,
        mime_type: str,
        boundary: str = MULTIPART_BOUNDARY,
    ) -> Tuple[bytes, str]:
        """
        Build a multipart/related body.

        Returns:
            (body bytes, Content-Type header value)
        """
        delimiter = f"\r\n--{boundary}\r\n"
        close_delimiter = f"\r\n--{boundary}--"

        body = (
            delimiter
            + "Content-Type: application/json; charset=UTF-8\r\n\r\n"
            + json.dumps(metadata, ensure_ascii=False)
            + delimiter
            + f"Content-Type: {mime_type}\r\n"
            + "Content-Transfer-Encoding: base64\r\n\r\n"
            + base64.b64encode(content).decode("ascii")
            + close_delimiter
        )
        return body.encode("utf-8"), f'multipart/related; boundary="{boundary}"'

    @staticmethod
    async def _read_file(file: Any) -> Tuple[bytes, str, str]:
        content = file.read()
        if inspect.isawaitable(content):
            content = await content
        if isinstance(content, str):
            content = content.encode("utf-8")

        name = getattr(file, "filename", None) or getattr(file, "name", None) or "untitled"
        name = str(name).replace("\\", "/").rsplit("/", 1)[-1]
        mime_type = (
            getattr(file, "content_type", None)
            or mimetypes.guess_type(name)[0]
            or "application/octet-stream"
        )
        return content, name, mime_type

    async def upload_file(self, file: Any, folder_name: Optional[str] = None) -> UploadResult:
        """
        Upload an attachment into the named project folder.

        Inputs without a read() method are handed to the mock storage and
        never reach the network.

        Raises:
            NotSignedInError / TokenExpiredError: No usable session
            APIError: Folder lookup or upload failed
        """
        if not is_binary_readable(file):
            return await self.mock_storage.upload_file(file, folder_name)

        content, name, mime_type = await self._read_file(file)

        metadata: dict = {"name": name, "mimeType": mime_type}
        folder_id = None
        if self.root_folder_id:
            folder = await self.ensure_folder(folder_name)
            folder_id = folder.id
            metadata["parents"] = [folder_id]

        body, content_type = self.build_multipart_body(metadata, content, mime_type)

        logger.info(
            f"Uploading '{name}' to Drive",
            extra={"size": len(content), "folder_id": folder_id}
        )

        data = await self.bootstrap.request(
            "drive",
            "POST",
            "files",
            params={"uploadType": "multipart", "fields": "id,name,mimeType,webViewLink"},
            content=body,
            headers={"Content-Type": content_type},
            upload=True,
        )
        uploaded = DriveFile(**data)

        return UploadResult(
            success=True,
            url=uploaded.get_link(),
            file_id=uploaded.id,
            folder_id=folder_id,
        )
