"""Shared utilities package for itd-client"""

from .cookie_jar import CookieJar, format_cookie_header, is_important_cookie
from .storage import CredentialStore
from .debug_console import (
    DebugCapturingConsole,
    create_debug_console,
    setup_debug_logger,
)

__all__ = [
    "CookieJar",
    "CredentialStore",
    "DebugCapturingConsole",
    "create_debug_console",
    "format_cookie_header",
    "is_important_cookie",
    "setup_debug_logger",
]
