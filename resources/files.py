"""File uploads and metadata"""

import logging
import mimetypes
from pathlib import Path
from typing import Any, Dict, Optional

import httpx

from settings import CONNECT_TIMEOUT
from .base_resource import BaseResource, parse_json, unwrap

logger = logging.getLogger(__name__)


class FilesManager(BaseResource):
    """File management"""

    async def upload_file(self, file_path: str) -> Optional[Dict[str, Any]]:
        """Upload a file (images, audio/ogg for voice comments)

        Uses the client's upload timeout rather than the request timeout.

        Args:
            file_path: Path to the local file

        Returns:
            {"id", "url", "filename", "mimeType", "size"}, or None on error
        """
        if not self._require_auth("Upload file"):
            return None

        path = Path(file_path)
        if not path.is_file():
            logger.error(f"File {file_path} not found")
            return None

        try:
            content = path.read_bytes()
        except OSError as e:
            logger.error(f"Failed to read {file_path}: {e}")
            return None

        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        response = await self._send(
            "POST",
            "/api/files/upload",
            "Upload file",
            ok=(200, 201),
            files={"file": (path.name, content, mime_type)},
            timeout=httpx.Timeout(self.client.upload_timeout, connect=CONNECT_TIMEOUT),
        )
        return parse_json(response) if response else None

    async def get_file(self, file_id: str) -> Optional[Dict[str, Any]]:
        if not self._require_auth("Get file"):
            return None
        response = await self._send("GET", f"/api/files/{file_id}", "Get file")
        return unwrap(parse_json(response)) if response else None

    async def delete_file(self, file_id: str) -> bool:
        if not self._require_auth("Delete file"):
            return False
        response = await self._send("DELETE", f"/api/files/{file_id}", "Delete file", ok=(200, 204))
        return response is not None
