"""Service: list an organisation's repositories without cloning anything."""

from __future__ import annotations

import json

from ..core.deadline import Deadline
from ..core.github_client import GitHubClient
from ..core.types import BackupConfig, RepositoryDescriptor


def list_repositories(config: BackupConfig, *, github: GitHubClient | None = None) -> list[RepositoryDescriptor]:
    github = github or GitHubClient(config.token, api_base=config.api_base)
    return github.list_org_repos(
        config.org,
        deadline=Deadline(config.timeout_sec),
        per_page=config.per_page,
        max_pages=config.max_pages,
    )


def format_repositories(repos: list[RepositoryDescriptor], as_json: bool = False) -> str:
    if as_json:
        return json.dumps([r.to_json() for r in repos], indent=2, ensure_ascii=False)
    return "\n".join(f"{r.name}\t{r.clone_url}" for r in repos)
