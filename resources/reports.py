"""Reports on posts, comments and users"""

from typing import Any, Dict, Optional

from .base_resource import BaseResource, parse_json

# Accepted by the API: spam, violence, hate, adult, fraud, other
DEFAULT_REASON = "other"


class ReportsManager(BaseResource):
    """Report submission"""

    async def report(
        self,
        target_type: str,
        target_id: str,
        reason: str = DEFAULT_REASON,
        description: str = "",
    ) -> Optional[Dict[str, Any]]:
        """Submit a report

        Args:
            target_type: "post", "comment" or "user"
            target_id: ID of the reported object
            reason: "spam", "violence", "hate", "adult", "fraud" or "other"
            description: Optional free text

        Returns:
            {"id", "createdAt"}, or None on error
        """
        if not self._require_auth("Submit report"):
            return None

        payload = {"targetType": target_type, "targetId": target_id, "reason": reason}
        if description:
            payload["description"] = description

        response = await self._send("POST", "/api/reports", "Submit report", ok=(200, 201), json=payload)
        if not response:
            return None

        data = parse_json(response)
        if isinstance(data, dict) and data.get("data"):
            return data["data"]
        return data or {"success": True}

    async def report_post(self, post_id: str, reason: str = DEFAULT_REASON, description: str = ""):
        return await self.report("post", post_id, reason, description)

    async def report_comment(self, comment_id: str, reason: str = DEFAULT_REASON, description: str = ""):
        return await self.report("comment", comment_id, reason, description)

    async def report_user(self, user_id: str, reason: str = DEFAULT_REASON, description: str = ""):
        return await self.report("user", user_id, reason, description)
