from config.loader import get_config_loader

# Get the config loader instance
config = get_config_loader()

# Remote API (IDN: итд.com = xn--d1ah4a.com)
BASE_URL = config.get("ITD_BASE_URL", "https://xn--d1ah4a.com")
USER_AGENT = config.get(
    "ITD_USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
)

# HTTP CONNECT proxy, e.g. ITD_PROXY=http://127.0.0.1:10808
PROXY_URL = config.get_first(["ITD_PROXY", "HTTPS_PROXY", "HTTP_PROXY"])

LOG_LEVEL = config.get("LOG_LEVEL", "info")

# Timeout configuration (seconds)
# Connection timeout: time to establish the TCP connection
CONNECT_TIMEOUT = config.get("ITD_CONNECT_TIMEOUT", 10.0)
# Request timeout: total timeout for ordinary API calls, including refresh
REQUEST_TIMEOUT = config.get("ITD_REQUEST_TIMEOUT", 30.0)
# Upload timeout: multipart uploads and post creation with attachments
UPLOAD_TIMEOUT = config.get("ITD_UPLOAD_TIMEOUT", 120.0)

# Credential storage (paths resolved relative to the project root)
ACCESS_TOKEN_KEY = "ITD_ACCESS_TOKEN"
ENV_FILE_NAME = ".env"
COOKIES_FILE_NAME = ".cookies"

# Auth endpoints (not user configurable)
REFRESH_PATH = "/api/v1/auth/refresh"
LOGOUT_PATH = "/api/v1/auth/logout"
CHANGE_PASSWORD_PATH = "/api/v1/auth/change-password"
PROFILE_PATH = "/api/users/me"

# Cookies
REFRESH_COOKIE_NAME = "refresh_token"
# Cookies worth persisting after a refresh: exact names and name prefixes
IMPORTANT_COOKIE_NAMES = ("refresh_token", "is_auth")
IMPORTANT_COOKIE_PREFIXES = ("__ddg",)
# Structured error code returned by the refresh endpoint
REFRESH_TOKEN_MISSING_CODE = "REFRESH_TOKEN_MISSING"

# CLI debug log
DEBUG_LOG_FILE = config.get("ITD_DEBUG_LOG", "itd_debug.log")
