"""GitHub API operations: paginated organisation repository listing."""

from __future__ import annotations

import http.client
import json
import urllib.error
import urllib.request
from typing import Any
from urllib.parse import quote, urlencode

from .constants import API_BASE, GITHUB_API_ACCEPT, HTTP_TIMEOUT_SEC, MAX_PAGES, PER_PAGE, USER_AGENT
from .deadline import Deadline
from .errors import DeadlineExceeded, DecodeError, NetworkError, ProtocolError
from .types import RepositoryDescriptor


class GitHubClient:
    def __init__(self, token: str, api_base: str = API_BASE, timeout: float = HTTP_TIMEOUT_SEC) -> None:
        self.token = token
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout

    # ---------- low-level HTTP ----------
    def _request_json(self, url: str, *, timeout: float, page: int, deadline: Deadline | None = None) -> Any:
        req = urllib.request.Request(url)
        req.add_header("Accept", GITHUB_API_ACCEPT)
        req.add_header("User-Agent", USER_AGENT)
        req.add_header("Authorization", f"Bearer {self.token}")
        try:
            with urllib.request.urlopen(req, timeout=timeout) as resp:
                status = getattr(resp, "status", 200)
                if status != 200:
                    raise ProtocolError(
                        f"received invalid response code for batch {page}: '{status}'", status=status, page=page
                    )
                body = resp.read()
        except urllib.error.HTTPError as e:
            raise ProtocolError(
                f"received invalid response code for batch {page}: '{e.code}'", status=e.code, page=page
            ) from e
        except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
            # once the run deadline has fired, any transport failure is reported as the deadline
            if deadline is not None and deadline.expired():
                raise DeadlineExceeded(f"deadline exceeded while fetching batch {page}") from e
            raise NetworkError(f"could not do the request for batch {page}: {e}") from e

        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise DecodeError(f"could not decode response for batch {page}: {e}") from e

    def repos_url(self, org: str, page: int, per_page: int) -> str:
        query = urlencode({"per_page": per_page, "page": page})
        return f"{self.api_base}/orgs/{quote(org, safe='')}/repos?{query}"

    # ---------- public API ----------
    def list_org_repos(
        self,
        org: str,
        *,
        deadline: Deadline | None = None,
        per_page: int = PER_PAGE,
        max_pages: int = MAX_PAGES,
    ) -> list[RepositoryDescriptor]:
        """Fetch every repository of ``org``, page by page, in API order.

        Stops at the first page shorter than ``per_page``. An org whose
        repository count is an exact multiple of ``per_page`` therefore costs
        one extra request that comes back empty. Any failure aborts the whole
        listing; pages are never retried.
        """
        deadline = deadline or Deadline(None)
        repos: list[RepositoryDescriptor] = []
        for page in range(1, max_pages + 1):
            deadline.check(f"fetching batch {page}")
            print(f"fetching {page}. batch")
            data = self._request_json(
                self.repos_url(org, page, per_page),
                timeout=deadline.clamp(self.timeout),
                page=page,
                deadline=deadline,
            )
            if not isinstance(data, list):
                raise DecodeError(f"expected a JSON array for batch {page}, got {type(data).__name__}")
            try:
                batch = [RepositoryDescriptor.from_api(obj) for obj in data]
            except TypeError as e:
                raise DecodeError(f"could not decode batch {page}: {e}") from e

            print(f"fetched {page}. batch with {len(batch)} repos")
            repos.extend(batch)
            if len(batch) < per_page:
                break
        return repos
