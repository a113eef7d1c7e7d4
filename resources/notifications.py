"""Notifications: listing, read markers, unread counter"""

import logging
from typing import Any, Dict, List, Optional

from .base_resource import BaseResource, parse_json

logger = logging.getLogger(__name__)


class NotificationsManager(BaseResource):
    """Notification management"""

    async def get_notifications(
        self,
        limit: int = 20,
        offset: int = 0,
        type: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """List notifications

        Args:
            limit: Page size
            offset: Pagination offset
            type: Client-side filter: "reply", "like", "wall_post", "follow", "comment"

        Returns:
            {"notifications": [...], "hasMore": bool}, or None on error
        """
        if not self._require_auth("Get notifications"):
            return None

        response = await self._send(
            "GET", "/api/notifications", "Get notifications", params={"limit": limit, "offset": offset}
        )
        if not response:
            return None

        data = parse_json(response) or {}
        notifications = data.get("notifications")
        if not isinstance(notifications, list):
            notifications = []
        if type:
            notifications = [n for n in notifications if n.get("type") == type]
        return {"notifications": notifications, "hasMore": bool(data.get("hasMore"))}

    async def mark_as_read_batch(self, ids: List[str]) -> Optional[Dict[str, Any]]:
        """Mark several notifications as read: {"success": True, "count": int}"""
        if not self._require_auth("Mark notifications as read"):
            return None
        if not ids:
            return {"success": True, "count": 0}

        response = await self._send(
            "POST", "/api/notifications/read-batch", "Mark notifications as read", json={"ids": list(ids)}
        )
        return parse_json(response) if response else None

    async def mark_as_read(self, notification_id: str) -> Optional[Dict[str, Any]]:
        if not self._require_auth("Mark notification as read"):
            return None
        response = await self._send(
            "POST", f"/api/notifications/{notification_id}/read", "Mark notification as read", ok=(200, 204)
        )
        if not response:
            return None
        return parse_json(response) or {"success": True}

    async def get_unread_count(self) -> Optional[int]:
        if not self._require_auth("Get notification count"):
            return None
        response = await self._send("GET", "/api/notifications/count", "Get notification count")
        if not response:
            return None
        return (parse_json(response) or {}).get("count") or 0

    async def mark_all_as_read(self) -> bool:
        if not self._require_auth("Mark all notifications as read"):
            return False
        response = await self._send(
            "POST", "/api/notifications/read-all", "Mark all notifications as read", ok=(200, 204)
        )
        if not response:
            return False
        return (parse_json(response) or {}).get("success") is not False

    # Convenience helpers

    async def has_unread_notifications(self) -> bool:
        return (await self.get_unread_count() or 0) > 0

    async def get_unread_notifications(self, limit: int = 20, offset: int = 0) -> Optional[Dict[str, Any]]:
        """Same page as get_notifications, keeping only unread entries"""
        page = await self.get_notifications(limit, offset)
        if page is None:
            return None
        unread = [n for n in page["notifications"] if not n.get("read")]
        return {"notifications": unread, "hasMore": page["hasMore"]}
