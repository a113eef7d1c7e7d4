"""
Resource managers for the itd.com API.
Each manager wraps one area of the API on top of the client's authenticated transport.
"""
from .base_resource import BaseResource, parse_json, unwrap
from .comments import CommentsManager
from .files import FilesManager
from .hashtags import HashtagsManager
from .notifications import NotificationsManager
from .posts import PostsManager
from .reports import ReportsManager
from .search import SearchManager
from .users import UsersManager
from .verification import VerificationManager

__all__ = [
    "BaseResource",
    "CommentsManager",
    "FilesManager",
    "HashtagsManager",
    "NotificationsManager",
    "PostsManager",
    "ReportsManager",
    "SearchManager",
    "UsersManager",
    "VerificationManager",
    "parse_json",
    "unwrap",
]
