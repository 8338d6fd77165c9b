"""
In-memory stand-in for Drive uploads.

Used when the upload input cannot be read as binary (e.g. a plain string
from a form preview). No network call is made; the returned URL has the
shape of a Drive file link with a "mock-" id.
"""

import logging
import time
from typing import Any, List, Optional

from app.environments.google.drive.schemas import UploadResult


logger = logging.getLogger("studio.environments.google.drive")


MOCK_URL_PREFIX = "https://drive.google.com/file/d/mock-"


class MockFileStorage:
    """Records uploads and returns mock links."""

    def __init__(self):
        self.uploads: List[dict] = []

    async def upload_file(self, file: Any, folder_name: Optional[str] = None) -> UploadResult:
        url = f"{MOCK_URL_PREFIX}{int(time.time() * 1000)}"
        self.uploads.append({"file": file, "folder_name": folder_name, "url": url})
        logger.info(
            "Mock upload (input is not a readable file)",
            extra={"folder_name": folder_name}
        )
        return UploadResult(success=True, url=url, mock=True)
