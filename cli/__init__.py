"""CLI package for the itd.com client

Command-line tools for inspecting and maintaining the stored session.
"""

from cli.main import main

__all__ = [
    "main",
]
