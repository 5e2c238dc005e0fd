"""Service: back up every repository of an organisation into one zip archive."""

from __future__ import annotations

import os
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta

from ..core.archive import package_directory
from ..core.clone_pool import ClonePool, CloneFn
from ..core.deadline import Deadline
from ..core.errors import DeadlineExceeded
from ..core.git_client import GitClient
from ..core.github_client import GitHubClient
from ..core.types import BackupConfig, BackupResult, BackupStage, RepositoryDescriptor
from ..core.utils import matches_any_glob
from ..core.workdir import create_working_dir, remove_working_dir, write_metadata


def select_clone_targets(
    repos: list[RepositoryDescriptor], only_globs: tuple[str, ...], exclude_globs: tuple[str, ...]
) -> list[RepositoryDescriptor]:
    out = []
    for r in repos:
        if only_globs and not matches_any_glob(r.name, only_globs):
            continue
        if exclude_globs and matches_any_glob(r.name, exclude_globs):
            continue
        out.append(r)
    return out


class BackupRunner:
    """Runs one backup: list, create dir, persist metadata and clone, package, clean up.

    ``stage`` records how far the run got; any exception leaves it at the
    stage that failed.
    """

    def __init__(
        self,
        config: BackupConfig,
        *,
        github: GitHubClient | None = None,
        clone: CloneFn | None = None,
        now: datetime | None = None,
    ) -> None:
        self.config = config
        self.github = github or GitHubClient(config.token, api_base=config.api_base)
        self.clone = clone or GitClient().clone
        self.now = now
        self.stage = BackupStage.listing
        self.workdir: str | None = None

    def run(self) -> BackupResult:
        cfg = self.config
        start = time.monotonic()
        deadline = Deadline(cfg.timeout_sec)

        self.stage = BackupStage.listing
        repos = self.github.list_org_repos(
            cfg.org, deadline=deadline, per_page=cfg.per_page, max_pages=cfg.max_pages
        )
        print(f"Data for {len(repos)} repositories fetched in total")

        self.workdir = workdir = create_working_dir(cfg.dest, cfg.org, self.now)
        self.stage = BackupStage.directory_created

        targets = select_clone_targets(repos, cfg.only_globs, cfg.exclude_globs)
        if len(targets) != len(repos):
            print(f"{len(repos) - len(targets)} repositories skipped by filters")

        pool = ClonePool(self.clone, workdir, token=cfg.token, deadline=deadline, workers=cfg.workers)
        self.stage = BackupStage.running
        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="metadata") as bg:
            metadata = bg.submit(write_metadata, repos, workdir)
            try:
                report = pool.run(targets)
            finally:
                self.stage = BackupStage.draining
                print("Waiting for workers to finish...")
            metadata.result()

        print("Preparing zip archive...")
        archive_path = workdir.rstrip(os.sep) + ".zip"
        package_directory(workdir, archive_path)
        if not cfg.keep_dir:
            remove_working_dir(workdir)
        self.stage = BackupStage.packaged

        if report.deadline_hit:
            raise DeadlineExceeded(
                f"deadline exceeded after {report.attempted}/{report.requested} clones; "
                f"partial archive written to {archive_path}",
                archive_path=archive_path,
            )

        elapsed = time.monotonic() - start
        print(f"ok={report.succeeded}, failed={len(report.failed)}.")
        print(f"Done in {timedelta(seconds=round(elapsed))}!")
        return BackupResult(
            archive_path=archive_path,
            repositories=len(repos),
            clones=report,
            duration_sec=elapsed,
        )


def backup_org(config: BackupConfig, **kwargs) -> BackupResult:
    """Back up ``config.org`` and return where the archive went."""
    return BackupRunner(config, **kwargs).run()
