"""Account verification requests"""

from typing import Any, Dict, Optional

from .base_resource import BaseResource, parse_json, unwrap


class VerificationManager(BaseResource):
    """Account verification"""

    async def get_status(self) -> Optional[Dict[str, Any]]:
        if not self._require_auth("Get verification status"):
            return None
        response = await self._send("GET", "/api/verification/status", "Get verification status")
        return unwrap(parse_json(response)) if response else None

    async def submit(self, video_url: str) -> Optional[Dict[str, Any]]:
        """Submit a verification request

        Args:
            video_url: URL of a video uploaded with files.upload_file

        Returns:
            {"success", "request": {...}}, or None on error
        """
        if not self._require_auth("Submit verification"):
            return None
        response = await self._send(
            "POST", "/api/verification/submit", "Submit verification", ok=(200, 201), json={"videoUrl": video_url}
        )
        return unwrap(parse_json(response)) if response else None
