"""Small types and Enums used by ghbackup."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from .constants import API_BASE, CLONE_WORKERS, DEFAULT_DEST, MAX_PAGES, PER_PAGE, RUN_TIMEOUT_SEC


class BackupStage(str, Enum):
    """Stages of a backup run, in the order they are entered."""

    listing = "listing"
    directory_created = "directory_created"
    running = "running"
    draining = "draining"
    packaged = "packaged"


@dataclass(frozen=True)
class RepositoryDescriptor:
    """One entry of the org listing. ``raw`` is the untouched API object."""

    name: str
    clone_url: str
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, obj: Any) -> RepositoryDescriptor:
        if not isinstance(obj, dict):
            raise TypeError(f"expected a JSON object, got {type(obj).__name__}")
        name, url = obj.get("name"), obj.get("clone_url")
        if not isinstance(name, str) or not isinstance(url, str):
            raise TypeError("repository object is missing 'name' or 'clone_url'")
        return cls(name=name, clone_url=url, raw=dict(obj))

    def to_json(self) -> dict[str, Any]:
        return dict(self.raw) if self.raw else {"name": self.name, "clone_url": self.clone_url}


@dataclass(frozen=True)
class BackupConfig:
    """Run configuration, built once at startup and passed down explicitly."""

    org: str
    token: str = field(repr=False)
    dest: str = DEFAULT_DEST
    workers: int = CLONE_WORKERS
    per_page: int = PER_PAGE
    max_pages: int = MAX_PAGES
    timeout_sec: float = RUN_TIMEOUT_SEC
    api_base: str = API_BASE
    only_globs: tuple[str, ...] = ()
    exclude_globs: tuple[str, ...] = ()
    keep_dir: bool = False


@dataclass
class CloneReport:
    requested: int = 0
    attempted: int = 0
    failed: list[tuple[str, str]] = field(default_factory=list)  # (url, error)
    deadline_hit: bool = False

    @property
    def succeeded(self) -> int:
        return self.attempted - len(self.failed)


@dataclass
class BackupResult:
    archive_path: str
    repositories: int
    clones: CloneReport
    duration_sec: float
