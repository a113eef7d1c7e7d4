import logging
import os
import platform
import re
from pathlib import Path
from typing import Optional, Union

from dotenv import dotenv_values

from settings import ACCESS_TOKEN_KEY, COOKIES_FILE_NAME, ENV_FILE_NAME

logger = logging.getLogger(__name__)


class CredentialStore:
    """Flat-file persistence for the access token and the auth cookies

    The access token lives as a KEY=value line in a .env file, the cookies as a
    single Cookie-header line in a .cookies file. Writes are best effort: every
    failure is logged and reported through the return value, never raised.
    """

    def __init__(
        self,
        env_path: Optional[Union[str, Path]] = None,
        cookies_path: Optional[Union[str, Path]] = None,
        project_root: Optional[Union[str, Path]] = None,
    ):
        root = Path(project_root) if project_root else Path.cwd()
        self.env_path = Path(env_path) if env_path else root / ENV_FILE_NAME
        self.cookies_path = Path(cookies_path) if cookies_path else root / COOKIES_FILE_NAME
        self._token_line = re.compile(rf"^{re.escape(ACCESS_TOKEN_KEY)}=.*$", re.MULTILINE)

    def save_access_token(self, token: str) -> bool:
        """Upsert the ITD_ACCESS_TOKEN line in the .env file

        The file is never created: a missing file means the caller did not opt
        into persistence, so the save is skipped.

        Args:
            token: New access token

        Returns:
            True if the file was written
        """
        if not self.env_path.exists():
            logger.warning(f"{self.env_path} not found, access token not saved")
            return False

        try:
            content = self.env_path.read_text(encoding="utf-8")
            line = f"{ACCESS_TOKEN_KEY}={token}"

            if self._token_line.search(content):
                content = self._token_line.sub(lambda _: line, content, count=1)
            else:
                if content and not content.endswith("\n"):
                    content += "\n"
                content += f"{line}\n"

            self.env_path.write_text(content, encoding="utf-8")
            logger.info(f"Access token saved to {self.env_path}")
            return True
        except (OSError, UnicodeError) as e:
            logger.error(f"Failed to save access token to {self.env_path}: {e}")
            return False

    def load_access_token(self) -> Optional[str]:
        """Read ITD_ACCESS_TOKEN from the .env file, if present"""
        if not self.env_path.exists():
            return None

        try:
            values = dotenv_values(self.env_path)
        except (OSError, UnicodeError) as e:
            logger.error(f"Failed to read {self.env_path}: {e}")
            return None
        return values.get(ACCESS_TOKEN_KEY) or None

    def save_cookie_header(self, cookie_header: str) -> bool:
        """Overwrite the .cookies file with a single Cookie-header line

        Args:
            cookie_header: Value like "refresh_token=abc; is_auth=1"

        Returns:
            True if the file was written
        """
        try:
            self.cookies_path.write_text(cookie_header, encoding="utf-8")

            # Session cookies are credentials: owner read/write only
            if platform.system() != "Windows":
                os.chmod(self.cookies_path, 0o600)

            logger.info(f"Cookies saved to {self.cookies_path}")
            return True
        except OSError as e:
            logger.error(f"Failed to save cookies to {self.cookies_path}: {e}")
            return False

    def load_cookie_header(self) -> Optional[str]:
        """Read the Cookie-header line from the .cookies file"""
        if not self.cookies_path.exists():
            return None

        try:
            header = self.cookies_path.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeError) as e:
            logger.warning(f"Failed to read cookies from {self.cookies_path}: {e}")
            return None
        return header or None
