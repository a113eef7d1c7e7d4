"""Comments: add, reply, list, like, delete"""

import logging
from typing import Any, Dict, List, Optional

from .base_resource import BaseResource, parse_json, unwrap

logger = logging.getLogger(__name__)

# The API expects newest | oldest | popular
SORT_MAP = {
    "new": "newest",
    "old": "oldest",
    "popular": "popular",
    "newest": "newest",
    "oldest": "oldest",
}


def _empty_page() -> Dict[str, Any]:
    return {"comments": [], "total": 0, "hasMore": False, "nextCursor": None}


def _parse_comments_page(payload: Any) -> Dict[str, Any]:
    data = unwrap(payload)
    if isinstance(data, dict) and data.get("comments") is not None:
        comments = data["comments"]
        return {
            "comments": comments,
            "total": data.get("total", len(comments)),
            "hasMore": data.get("hasMore", False),
            "nextCursor": data.get("nextCursor"),
        }
    if isinstance(data, list):
        return {"comments": data, "total": len(data), "hasMore": False, "nextCursor": None}
    return _empty_page()


class CommentsManager(BaseResource):
    """Comment management"""

    async def add_comment(
        self,
        post_id: str,
        text: str,
        reply_to_comment_id: Optional[str] = None,
        attachment_ids: Optional[List[str]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Add a comment to a post

        Supports text, voice (attachment ids of audio/ogg uploads) and replies.

        Args:
            post_id: Post ID
            text: Comment text (empty for voice comments)
            reply_to_comment_id: Comment being answered
            attachment_ids: Uploaded file IDs

        Returns:
            Created comment data, or None on error
        """
        if not self._require_auth("Add comment"):
            return None

        comment_data: Dict[str, Any] = {"content": text or ""}
        if reply_to_comment_id:
            comment_data["replyTo"] = reply_to_comment_id
        if attachment_ids:
            comment_data["attachmentIds"] = list(attachment_ids)

        response = await self._send(
            "POST", f"/api/posts/{post_id}/comments", "Add comment", ok=(200, 201), json=comment_data
        )
        return parse_json(response) if response else None

    async def add_voice_comment(
        self,
        post_id: str,
        audio_path: str,
        reply_to_comment_id: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """Upload an audio/ogg file and post it as a comment"""
        if not self._require_auth("Add voice comment"):
            return None
        uploaded = await self.client.files.upload_file(audio_path)
        if not uploaded:
            return None
        return await self.add_comment(post_id, "", reply_to_comment_id, [uploaded["id"]])

    async def reply_to_comment(
        self,
        comment_id: str,
        content: str,
        reply_to_user_id: str,
    ) -> Optional[Dict[str, Any]]:
        """Reply through /api/comments/{id}/replies (the API requires the author's user id)"""
        if not self._require_auth("Reply to comment"):
            return None
        if not reply_to_user_id:
            logger.error("reply_to_user_id is required to reply to a comment")
            return None

        response = await self._send(
            "POST",
            f"/api/comments/{comment_id}/replies",
            "Reply to comment",
            ok=(200, 201),
            json={"content": content, "replyToUserId": reply_to_user_id},
        )
        return parse_json(response) if response else None

    async def get_comments(self, post_id: str, limit: int = 20, sort: str = "popular") -> Dict[str, Any]:
        """List comments of a post

        Args:
            post_id: Post ID
            limit: Page size, clamped to 1..100
            sort: "popular", "new" or "old"

        Returns:
            {"comments", "total", "hasMore", "nextCursor"}; empty on error
        """
        path = f"/api/posts/{post_id}/comments"
        try:
            request_limit = min(max(1, int(limit)), 100)
        except (TypeError, ValueError):
            request_limit = 20
        request_sort = SORT_MAP.get(sort, "popular")

        response = await self._send(
            "GET", path, "Get comments", ok=(200, 422), params={"limit": request_limit, "sort": request_sort}
        )
        if not response:
            return _empty_page()

        if response.status_code == 422:
            logger.warning("Comments sort rejected with 422, retrying with sort=popular")
            response = await self._send(
                "GET", path, "Get comments", params={"limit": request_limit, "sort": "popular"}
            )
            if not response:
                return _empty_page()

        return _parse_comments_page(parse_json(response))

    async def like_comment(self, comment_id: str) -> Optional[Dict[str, Any]]:
        if not self._require_auth("Like comment"):
            return None
        response = await self._send("POST", f"/api/comments/{comment_id}/like", "Like comment", ok=(200, 201))
        return parse_json(response) if response else None

    async def unlike_comment(self, comment_id: str) -> Optional[Dict[str, Any]]:
        if not self._require_auth("Unlike comment"):
            return None
        response = await self._send(
            "DELETE", f"/api/comments/{comment_id}/like", "Unlike comment", ok=(200, 204)
        )
        if not response:
            return None
        return parse_json(response) or {"liked": False, "likesCount": 0}

    async def delete_comment(self, comment_id: str) -> bool:
        if not self._require_auth("Delete comment"):
            return False
        response = await self._send("DELETE", f"/api/comments/{comment_id}", "Delete comment", ok=(200, 204))
        return response is not None

    async def restore_comment(self, comment_id: str) -> bool:
        if not self._require_auth("Restore comment"):
            return False
        response = await self._send(
            "POST", f"/api/comments/{comment_id}/restore", "Restore comment", ok=(200, 201, 204)
        )
        return response is not None

    # Convenience helpers

    async def get_post_comments_count(self, post_id: str) -> int:
        result = await self.get_comments(post_id, 1)
        if result["comments"] or result["total"]:
            return result["total"]
        # Empty page can also mean an error: fall back to the post counter
        post = await self.client.posts.get_post(post_id)
        return (post or {}).get("commentsCount") or 0

    async def get_top_comment(self, post_id: str) -> Optional[Dict[str, Any]]:
        """Comment with the most likes among the first popular page"""
        result = await self.get_comments(post_id, 20, "popular")
        if not result["comments"]:
            return None
        return max(result["comments"], key=lambda c: c.get("likesCount") or 0)

    async def has_comments(self, post_id: str) -> bool:
        return await self.get_post_comments_count(post_id) > 0
