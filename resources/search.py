"""Search over users and hashtags"""

from typing import Any, Dict, List, Optional

from .base_resource import BaseResource, parse_json


class SearchManager(BaseResource):
    """Search (public)"""

    async def search(self, query: str, user_limit: int = 5, hashtag_limit: int = 5) -> Optional[Dict[str, Any]]:
        """Search users and hashtags: {"users": [...], "hashtags": [...]}, or None on error"""
        params = {"q": query, "userLimit": user_limit, "hashtagLimit": hashtag_limit}
        response = await self._send("GET", "/api/search/", "Search", params=params)
        if not response:
            return None

        payload = parse_json(response) or {}
        data = payload.get("data") if isinstance(payload.get("data"), dict) else payload
        return {"users": data.get("users") or [], "hashtags": data.get("hashtags") or []}

    async def search_users(self, query: str, limit: int = 5) -> Optional[List[Dict[str, Any]]]:
        result = await self.search(query, limit, 0)
        return result["users"] if result else None

    async def search_hashtags(self, query: str, limit: int = 5) -> Optional[List[Dict[str, Any]]]:
        result = await self.search(query, 0, limit)
        return result["hashtags"] if result else None
