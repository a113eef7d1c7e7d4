"""Default HTTP request headers

These values mimic a desktop browser talking to итд.com
"""

from typing import Dict

ACCEPT = "application/json, text/plain, */*"

ACCEPT_LANGUAGE = "ru-RU,ru;q=0.9,en-US;q=0.8,en;q=0.7"


def build_default_headers(user_agent: str) -> Dict[str, str]:
    """Headers sent with every request made by the shared client

    Content-Type is left to httpx so multipart uploads get their boundary.

    Args:
        user_agent: User-Agent string to advertise

    Returns:
        Header mapping for httpx.AsyncClient
    """
    return {
        "User-Agent": user_agent,
        "Accept": ACCEPT,
        "Accept-Language": ACCEPT_LANGUAGE,
    }


def build_origin_headers(base_url: str) -> Dict[str, str]:
    """Referer/Origin pair expected by the auth endpoints (anti-CSRF)"""
    return {
        "Referer": f"{base_url}/",
        "Origin": base_url,
    }
