"""Posts: feeds, CRUD, likes, reposts"""

import logging
from typing import Any, Dict, Optional

from .base_resource import BaseResource, parse_json, unwrap

logger = logging.getLogger(__name__)


def _empty_page() -> Dict[str, Any]:
    return {"posts": [], "pagination": {}}


def _parse_posts_page(payload: Any) -> Dict[str, Any]:
    """Normalize the several response shapes of the posts listing

    Seen in the wild: {"data": {"posts", "pagination"}}, {"posts", "pagination"}
    and a bare list.
    """
    if isinstance(payload, dict):
        data = payload.get("data")
        if isinstance(data, dict) and data.get("posts") is not None:
            return {"posts": data["posts"], "pagination": data.get("pagination") or {}}
        if isinstance(payload.get("posts"), list):
            return {"posts": payload["posts"], "pagination": payload.get("pagination") or {}}
    if isinstance(payload, list):
        return {"posts": payload, "pagination": {}}
    return _empty_page()


class PostsManager(BaseResource):
    """Post management"""

    async def _upload_attachment(self, image_path: str) -> Optional[str]:
        uploaded = await self.client.files.upload_file(image_path)
        if not uploaded or not uploaded.get("id"):
            logger.error(f"Failed to upload attachment {image_path}")
            return None
        return uploaded["id"]

    async def create_post(self, text: str, image_path: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Create a new post

        Args:
            text: Post text
            image_path: Optional image to upload and attach

        Returns:
            Created post data, or None on error
        """
        if not self._require_auth("Create post"):
            return None

        post_data: Dict[str, Any] = {"content": text}
        if image_path:
            attachment_id = await self._upload_attachment(image_path)
            if not attachment_id:
                return None
            post_data["attachments"] = [attachment_id]

        response = await self._send("POST", "/api/posts", "Create post", ok=(200, 201), json=post_data)
        return parse_json(response) if response else None

    async def create_wall_post(
        self,
        username: str,
        text: str,
        image_path: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """Create a post on another user's wall

        Args:
            username: Owner of the wall
            text: Post text
            image_path: Optional image to upload and attach

        Returns:
            Created post data, or None on error
        """
        if not self._require_auth("Create wall post"):
            return None

        profile = await self.client.users.get_user_profile(username)
        if not profile or not profile.get("id"):
            logger.error(f"Could not resolve profile of {username}")
            return None

        post_data: Dict[str, Any] = {"content": text, "wallRecipientId": profile["id"]}
        if image_path:
            attachment_id = await self._upload_attachment(image_path)
            if not attachment_id:
                return None
            post_data["attachments"] = [attachment_id]

        response = await self._send("POST", "/api/posts", "Create wall post", ok=(200, 201), json=post_data)
        return parse_json(response) if response else None

    async def get_posts(
        self,
        username: Optional[str] = None,
        limit: int = 20,
        sort: str = "new",
        cursor: Optional[str] = None,
        tab: Optional[str] = None,
        type: Optional[str] = None,
        filter: Optional[str] = None,
    ) -> Dict[str, Any]:
        """List a user's posts or a feed

        For feeds (no username) the first of tab > type > filter > sort is sent.
        Feeds selected by tab/type/filter require a session; user listings are
        public.

        Args:
            username: Author whose posts to list; None selects a feed
            limit: Page size
            sort: "new", "old", "popular", "trending" or "recent"
            cursor: Pagination cursor (pagination.nextCursor)
            tab: "popular" or "following"
            type: Alternate feed selector ("trending")
            filter: Alternate feed selector ("trending")

        Returns:
            {"posts": [...], "pagination": {...}}; empty on error
        """
        feed_selector = tab or type or filter
        if not username and feed_selector and not self._require_auth("Get feed"):
            return _empty_page()

        params: Dict[str, Any] = {"limit": limit}
        if username:
            path = f"/api/posts/user/{username}"
            params["sort"] = sort
        else:
            path = "/api/posts"
            if tab:
                params["tab"] = tab
            elif type:
                params["type"] = type
            elif filter:
                params["filter"] = filter
            else:
                params["sort"] = sort

        if cursor:
            params["cursor"] = cursor

        response = await self._send("GET", path, "Get posts", params=params)
        if not response:
            return _empty_page()
        return _parse_posts_page(parse_json(response))

    async def get_feed_popular(self, limit: int = 20, cursor: Optional[str] = None) -> Dict[str, Any]:
        return await self.get_posts(None, limit, "new", cursor, tab="popular")

    async def get_feed_following(self, limit: int = 20, cursor: Optional[str] = None) -> Dict[str, Any]:
        if not self._require_auth("Get following feed"):
            return _empty_page()
        return await self.get_posts(None, limit, "new", cursor, tab="following")

    async def get_post(self, post_id: str) -> Optional[Dict[str, Any]]:
        """Get a single post (public, comments may be embedded)"""
        response = await self._send("GET", f"/api/posts/{post_id}", "Get post")
        return unwrap(parse_json(response)) if response else None

    async def edit_post(self, post_id: str, new_content: str) -> Optional[Dict[str, Any]]:
        if not self._require_auth("Edit post"):
            return None
        response = await self._send("PUT", f"/api/posts/{post_id}", "Edit post", json={"content": new_content})
        return parse_json(response) if response else None

    async def delete_post(self, post_id: str) -> bool:
        if not self._require_auth("Delete post"):
            return False
        response = await self._send("DELETE", f"/api/posts/{post_id}", "Delete post", ok=(200, 204))
        return response is not None

    async def pin_post(self, post_id: str) -> bool:
        if not self._require_auth("Pin post"):
            return False
        response = await self._send("POST", f"/api/posts/{post_id}/pin", "Pin post", ok=(200, 201))
        return response is not None

    async def repost(self, post_id: str, comment: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Repost, optionally with a comment"""
        if not self._require_auth("Repost"):
            return None
        repost_data = {"content": comment} if comment else {}
        response = await self._send(
            "POST", f"/api/posts/{post_id}/repost", "Repost", ok=(200, 201), json=repost_data
        )
        return parse_json(response) if response else None

    async def like_post(self, post_id: str) -> Optional[Dict[str, Any]]:
        """Like a post

        Returns:
            {"liked": True, "likesCount": int}, or None on error
        """
        if not self._require_auth("Like post"):
            return None
        response = await self._send("POST", f"/api/posts/{post_id}/like", "Like post", ok=(200, 201))
        return parse_json(response) if response else None

    async def unlike_post(self, post_id: str) -> Optional[Dict[str, Any]]:
        if not self._require_auth("Unlike post"):
            return None
        response = await self._send("DELETE", f"/api/posts/{post_id}/like", "Unlike post", ok=(200, 204))
        if not response:
            return None
        return parse_json(response) or {"liked": False, "likesCount": 0}

    # Convenience helpers

    async def get_trending_posts(self, limit: int = 20, cursor: Optional[str] = None) -> Dict[str, Any]:
        return await self.get_posts(None, limit, "trending", cursor)

    async def get_recent_posts(self, limit: int = 20, cursor: Optional[str] = None) -> Dict[str, Any]:
        return await self.get_posts(None, limit, "recent", cursor)

    async def get_my_posts(self, limit: int = 20, sort: str = "new", cursor: Optional[str] = None) -> Dict[str, Any]:
        if not self._require_auth("Get my posts"):
            return _empty_page()
        profile = await self.client.users.get_my_profile()
        if not profile or not profile.get("username"):
            logger.error("Could not determine own username")
            return _empty_page()
        return await self.get_posts(profile["username"], limit, sort, cursor)

    async def get_user_latest_post(self, username: str) -> Optional[Dict[str, Any]]:
        result = await self.get_posts(username, 1, "new")
        return result["posts"][0] if result["posts"] else None

    async def get_post_likes_count(self, post_id: str) -> int:
        post = await self.get_post(post_id)
        return (post or {}).get("likesCount") or 0

    async def get_post_views_count(self, post_id: str) -> int:
        post = await self.get_post(post_id)
        return (post or {}).get("viewsCount") or 0

    async def get_post_comments_count(self, post_id: str) -> int:
        post = await self.get_post(post_id)
        return (post or {}).get("commentsCount") or 0

    async def get_post_stats(self, post_id: str) -> Optional[Dict[str, int]]:
        """Likes, views, comments and reposts of a post in one call"""
        post = await self.get_post(post_id)
        if not post:
            return None
        return {
            "likes": post.get("likesCount") or 0,
            "views": post.get("viewsCount") or 0,
            "comments": post.get("commentsCount") or 0,
            "reposts": post.get("repostsCount") or 0,
        }
