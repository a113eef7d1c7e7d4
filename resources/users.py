"""Users: profiles, privacy, follows, clans"""

import logging
from typing import Any, Dict, List, Optional

from .base_resource import BaseResource, parse_json, unwrap

logger = logging.getLogger(__name__)


def _parse_users_page(payload: Any) -> Dict[str, Any]:
    if isinstance(payload, dict):
        data = payload.get("data")
        if isinstance(data, dict) and data.get("users") is not None:
            return {"users": data["users"], "pagination": data.get("pagination") or {}}
        if payload.get("users") is not None:
            return {"users": payload["users"], "pagination": payload.get("pagination") or {}}
    return {"users": [], "pagination": {}}


class UsersManager(BaseResource):
    """User and profile management"""

    async def update_profile(
        self,
        bio: Optional[str] = None,
        display_name: Optional[str] = None,
        username: Optional[str] = None,
        banner_id: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """Update the current user's profile

        Only the given fields are sent; with no fields the current profile is
        returned unchanged.

        Returns:
            Updated profile, or None on error
        """
        if not self._require_auth("Update profile"):
            return None

        update_data = {
            key: value
            for key, value in (
                ("bio", bio),
                ("displayName", display_name),
                ("username", username),
                ("bannerId", banner_id),
            )
            if value is not None
        }
        if not update_data:
            return await self.get_my_profile()

        response = await self._send("PUT", "/api/users/me", "Update profile", json=update_data)
        return unwrap(parse_json(response)) if response else None

    async def get_my_profile(self) -> Optional[Dict[str, Any]]:
        if not self._require_auth("Get my profile"):
            return None
        response = await self._send("GET", "/api/users/me", "Get my profile")
        return parse_json(response) if response else None

    async def get_privacy(self) -> Optional[Dict[str, Any]]:
        """Privacy settings: {"isPrivate", "wallClosed"}"""
        if not self._require_auth("Get privacy"):
            return None
        response = await self._send("GET", "/api/users/me/privacy", "Get privacy")
        return unwrap(parse_json(response)) if response else None

    async def update_privacy(
        self,
        is_private: Optional[bool] = None,
        wall_closed: Optional[bool] = None,
    ) -> Optional[Dict[str, Any]]:
        if not self._require_auth("Update privacy"):
            return None

        payload: Dict[str, Any] = {}
        if is_private is not None:
            payload["isPrivate"] = is_private
        if wall_closed is not None:
            payload["wallClosed"] = wall_closed
        if not payload:
            return await self.get_privacy()

        response = await self._send("PUT", "/api/users/me/privacy", "Update privacy", json=payload)
        return unwrap(parse_json(response)) if response else None

    async def get_user_profile(self, username: str) -> Optional[Dict[str, Any]]:
        """Public profile by username (no session required)"""
        response = await self._send("GET", f"/api/users/{username}", "Get user profile")
        return unwrap(parse_json(response)) if response else None

    async def follow_user(self, username: str) -> Optional[Dict[str, Any]]:
        """Follow a user

        Returns:
            {"following": True, "followersCount": int}, or None on error
        """
        if not self._require_auth("Follow user"):
            return None
        response = await self._send("POST", f"/api/users/{username}/follow", "Follow user", ok=(200, 201))
        return parse_json(response) if response else None

    async def unfollow_user(self, username: str) -> Optional[Dict[str, Any]]:
        if not self._require_auth("Unfollow user"):
            return None
        response = await self._send(
            "DELETE", f"/api/users/{username}/follow", "Unfollow user", ok=(200, 204)
        )
        if not response:
            return None
        return parse_json(response) or {"following": False, "followersCount": 0}

    async def get_followers(self, username: str, page: int = 1, limit: int = 30) -> Optional[Dict[str, Any]]:
        """Followers of a user: {"users", "pagination"}; page numbers start at 1"""
        response = await self._send(
            "GET", f"/api/users/{username}/followers", "Get followers", params={"page": page, "limit": limit}
        )
        return _parse_users_page(parse_json(response)) if response else None

    async def get_following(self, username: str, page: int = 1, limit: int = 30) -> Optional[Dict[str, Any]]:
        """Users followed by a user: {"users", "pagination"}"""
        response = await self._send(
            "GET", f"/api/users/{username}/following", "Get following", params={"page": page, "limit": limit}
        )
        return _parse_users_page(parse_json(response)) if response else None

    async def get_user_clan(self, username: str) -> Optional[str]:
        """A user's clan is the emoji in the avatar field"""
        profile = await self.get_user_profile(username)
        return (profile or {}).get("avatar") or None

    async def get_top_clans(self) -> Optional[List[Dict[str, Any]]]:
        """Clans by member count: [{"avatar", "memberCount"}, ...]"""
        response = await self._send("GET", "/api/users/stats/top-clans", "Get top clans")
        if not response:
            return None
        data = unwrap(parse_json(response))
        return (data or {}).get("clans") or []

    async def get_who_to_follow(self) -> Optional[List[Dict[str, Any]]]:
        if not self._require_auth("Get who to follow"):
            return None
        response = await self._send("GET", "/api/users/suggestions/who-to-follow", "Get who to follow")
        if not response:
            return None
        return (parse_json(response) or {}).get("users") or []

    # Convenience helpers

    async def is_following(self, username: str) -> bool:
        if not self.client.check_auth():
            return False
        profile = await self.get_user_profile(username)
        return bool(profile) and profile.get("isFollowing") is True

    async def get_my_followers_count(self) -> int:
        profile = await self.get_my_profile()
        return (profile or {}).get("followersCount") or 0

    async def get_my_following_count(self) -> int:
        profile = await self.get_my_profile()
        return (profile or {}).get("followingCount") or 0

    async def get_my_clan(self) -> Optional[str]:
        profile = await self.get_my_profile()
        return (profile or {}).get("avatar") or None
