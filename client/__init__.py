"""Client package for the itd.com API"""

from .itd_client import ITDClient

__all__ = [
    "ITDClient",
]
