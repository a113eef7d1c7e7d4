"""Hashtags: trending list and posts by tag"""

from typing import Any, Dict, Optional
from urllib.parse import quote

from .base_resource import BaseResource, parse_json


class HashtagsManager(BaseResource):
    """Hashtag lookups (public)"""

    async def get_trending(self, limit: int = 10) -> Optional[Dict[str, Any]]:
        """Trending hashtags: {"hashtags": [...]}, or None on error"""
        response = await self._send(
            "GET", "/api/hashtags/trending", "Get trending hashtags", params={"limit": limit}
        )
        if not response:
            return None

        data = parse_json(response) or {}
        if isinstance(data.get("data"), dict) and data["data"].get("hashtags") is not None:
            return {"hashtags": data["data"]["hashtags"]}
        return {"hashtags": data.get("hashtags") or []}

    async def get_posts_by_hashtag(
        self,
        hashtag_name: str,
        limit: int = 20,
        cursor: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """Posts tagged with a hashtag

        Args:
            hashtag_name: Tag, with or without the leading "#"
            limit: Page size
            cursor: Pagination cursor

        Returns:
            {"hashtag", "posts", "pagination"}, or None on error
        """
        tag = quote(hashtag_name.removeprefix("#"), safe="")
        params: Dict[str, Any] = {"limit": limit}
        if cursor:
            params["cursor"] = cursor

        response = await self._send("GET", f"/api/hashtags/{tag}/posts", "Get posts by hashtag", params=params)
        if not response:
            return None

        payload = parse_json(response) or {}
        data = payload.get("data")
        if isinstance(data, dict):
            return {
                "hashtag": data.get("hashtag"),
                "posts": data.get("posts") or [],
                "pagination": data.get("pagination") or {},
            }
        return {
            "hashtag": None,
            "posts": payload.get("posts") or [],
            "pagination": payload.get("pagination") or {},
        }
