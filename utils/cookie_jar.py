"""Domain-scoped cookie jar shared with the httpx client"""

import itertools
import logging
from http.cookiejar import Cookie
from http.cookies import CookieError, SimpleCookie
from typing import Dict, Iterable, List, Optional, Tuple
from urllib.parse import urlsplit

import httpx

from settings import IMPORTANT_COOKIE_NAMES, IMPORTANT_COOKIE_PREFIXES

logger = logging.getLogger(__name__)

CookieKey = Tuple[str, str, str]


def is_important_cookie(name: str) -> bool:
    """Check if a cookie belongs to the subset persisted after a refresh"""
    return name in IMPORTANT_COOKIE_NAMES or name.startswith(IMPORTANT_COOKIE_PREFIXES)


def format_cookie_header(cookies: Iterable[Cookie]) -> str:
    """Join cookies as a Cookie request header ("a=1; b=2")"""
    return "; ".join(f"{cookie.name}={cookie.value}" for cookie in cookies)


def _key(cookie: Cookie) -> CookieKey:
    return cookie.domain, cookie.path, cookie.name


class CookieJar:
    """Cookie storage bound to the API host

    Wraps the httpx.Cookies instance that the shared AsyncClient sends with
    every request, so anything written here goes out on the wire. A name is
    kept under a single domain spelling ("itd.com" vs ".itd.com") so a
    rotated cookie never travels next to the value it replaced.
    """

    def __init__(self, base_url: str, cookies: Optional[httpx.Cookies] = None):
        self.domain = urlsplit(base_url).hostname or ""
        self.cookies = cookies if cookies is not None else httpx.Cookies()
        # Write order of the entries this jar touched; higher is newer
        self._written: Dict[CookieKey, int] = {}
        self._clock = itertools.count(1)

    def _matches_domain(self, cookie: Cookie) -> bool:
        domain = cookie.domain.lstrip(".")
        return domain == self.domain or self.domain.endswith(f".{domain}")

    def _entries(self, name: str) -> List[Cookie]:
        return [
            cookie for cookie in list(self.cookies.jar)
            if cookie.name == name and self._matches_domain(cookie)
        ]

    def _drop(self, name: str, keep: Optional[Cookie] = None) -> None:
        """Remove every entry of a name visible to the host, except keep"""
        for cookie in self._entries(name):
            if cookie is keep:
                continue
            try:
                self.cookies.jar.clear(cookie.domain, cookie.path, cookie.name)
            except KeyError:
                pass
            self._written.pop(_key(cookie), None)

    def _store(self, name: str, value: str, path: str = "/") -> None:
        self._drop(name)
        self.cookies.set(name, value, domain=self.domain, path=path)
        self._written[(self.domain, path, name)] = next(self._clock)

    def get_cookies(self) -> List[Cookie]:
        """All cookies visible to the API host, one per name

        When a name is present under several domains or paths, the entry
        written most recently through this jar wins.
        """
        by_name: Dict[str, Cookie] = {}
        for cookie in list(self.cookies.jar):
            if not self._matches_domain(cookie):
                continue
            current = by_name.get(cookie.name)
            if current is None or self._written.get(_key(cookie), 0) >= self._written.get(_key(current), 0):
                by_name[cookie.name] = cookie
        return list(by_name.values())

    def has_cookie(self, name: str) -> bool:
        return any(cookie.name == name for cookie in self.get_cookies())

    def set_cookie(self, set_cookie_header: str) -> bool:
        """Store the cookie(s) carried by one Set-Cookie header value

        Any existing entry of the same name is replaced, whatever its
        domain spelling.

        Args:
            set_cookie_header: Raw header value, e.g. "refresh_token=x; Path=/; HttpOnly"

        Returns:
            False if the header could not be parsed
        """
        parsed = SimpleCookie()
        try:
            parsed.load(set_cookie_header)
        except CookieError as e:
            logger.debug(f"Skipping malformed Set-Cookie header: {e}")
            return False

        if not parsed:
            logger.debug("Skipping Set-Cookie header without a name=value pair")
            return False

        for name, morsel in parsed.items():
            self._store(name, morsel.value, morsel["path"] or "/")
        return True

    def sync_from_response(self, response: httpx.Response) -> int:
        """Collapse cookies just extracted by httpx to one entry per name

        httpx has already stored the response's Set-Cookie headers in this
        jar, possibly under a dotted domain next to older entries of the same
        name. For each header the entry carrying the new value is kept and
        marked newest; the others are dropped.

        Args:
            response: Response received through the client owning this jar

        Returns:
            Number of cookies updated
        """
        updated = 0
        for header in response.headers.get_list("set-cookie"):
            name, sep, value = header.split(";", 1)[0].partition("=")
            name, value = name.strip(), value.strip()
            if not name or not sep:
                continue

            fresh = [cookie for cookie in self._entries(name) if cookie.value == value]
            if not fresh:
                # Expired or refused by the cookie policy: nothing to keep
                logger.debug(f"Set-Cookie for {name} was not stored by the client")
                continue

            keep = fresh[-1]
            self._drop(name, keep=keep)
            self._written[_key(keep)] = next(self._clock)
            updated += 1
        return updated

    def load_header(self, cookie_header: str) -> int:
        """Load a Cookie request header ("a=1; b=2") into the jar

        Pairs are split on ";" and then on the first "="; pairs without a
        name or without "=" are skipped.

        Returns:
            Number of cookies stored
        """
        loaded = 0
        for part in cookie_header.split(";"):
            part = part.strip()
            name, sep, value = part.partition("=")
            name = name.strip()
            if not name or not sep:
                continue
            self._store(name, value.strip())
            loaded += 1
        return loaded

    def important_cookies(self) -> List[Cookie]:
        return [cookie for cookie in self.get_cookies() if is_important_cookie(cookie.name)]

    def clear(self) -> None:
        """Remove every cookie, for all domains"""
        self.cookies.clear()
        self._written.clear()
