"""Module holding constants used across ghbackup."""

API_BASE = "https://api.github.com"
GITHUB_API_ACCEPT = "application/vnd.github+json"
USER_AGENT = "ghbackup/0.1 (+https://github.com/auth-broker)"
DEFAULT_DEST = "."
HTTP_TIMEOUT_SEC = 30

PER_PAGE = 100
MAX_PER_PAGE = 100  # GitHub silently truncates larger pages
MAX_PAGES = 10  # safety bound against runaway pagination
CLONE_WORKERS = 5
RUN_TIMEOUT_SEC = 30 * 60

DIR_DATE_FORMAT = "%Y-%m-%d_%H:%M:%S"
RESPONSES_FILENAME = "responses.json"
CLONE_USERNAME = "x-access-token"
