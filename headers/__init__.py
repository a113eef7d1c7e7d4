"""HTTP headers and constants package for itd-client"""

from .constants import (
    ACCEPT,
    ACCEPT_LANGUAGE,
    build_default_headers,
    build_origin_headers,
)

__all__ = [
    "ACCEPT",
    "ACCEPT_LANGUAGE",
    "build_default_headers",
    "build_origin_headers",
]
