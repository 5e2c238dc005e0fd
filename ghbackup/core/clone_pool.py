"""Fixed-size pool of clone workers draining a shared work queue."""

from __future__ import annotations

import os
import queue
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence

from .constants import CLONE_WORKERS
from .deadline import Deadline
from .types import CloneReport, RepositoryDescriptor
from .utils import repo_dir_name

CloneFn = Callable[..., tuple[bool, str | None]]

POLL_INTERVAL_SEC = 0.1
_DONE = object()


class ClonePool:
    """Clone repositories in parallel with ``workers`` threads.

    Items are handed out in listing order through a queue of size one, so the
    feeder blocks until a worker is free to take the next URL. Workers look at
    the shared deadline before every dequeue and leave as soon as it fires; a
    clone that fails is reported and the worker moves on to the next item.

    ``deadline_hit`` is set only when the deadline actually cost a
    repository: one left undispatched or unattempted, or a clone that failed
    after the deadline fired. A deadline firing once all work is done leaves
    it unset.
    """

    def __init__(
        self,
        clone: CloneFn,
        dest: str,
        *,
        token: str | None,
        deadline: Deadline,
        workers: int = CLONE_WORKERS,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self.clone = clone
        self.dest = dest
        self.token = token
        self.deadline = deadline
        self.workers = workers
        self._lock = threading.Lock()

    def _clone_one(self, url: str, report: CloneReport) -> None:
        target = os.path.join(self.dest, repo_dir_name(url))
        try:
            ok, err = self.clone(url, target, token=self.token, deadline=self.deadline)
        except Exception as e:
            ok, err = False, f"{e!r}"
        with self._lock:
            report.attempted += 1
            if not ok:
                report.failed.append((url, err or "unknown error"))
                if self.deadline.expired():
                    report.deadline_hit = True
        if not ok:
            print(f"error cloning {url}: {err}", file=sys.stderr)

    def _worker(self, idx: int, work: queue.Queue, report: CloneReport) -> None:
        print(f"starting worker {idx}")
        while True:
            if self.deadline.expired():
                print(f"deadline exceeded, stopping worker {idx}")
                return
            try:
                item = work.get(timeout=POLL_INTERVAL_SEC)
            except queue.Empty:
                continue
            if item is _DONE:
                print(f"work done for worker {idx}")
                return
            self._clone_one(item, report)

    def _put(self, work: queue.Queue, item: object) -> bool:
        while True:
            try:
                work.put(item, timeout=POLL_INTERVAL_SEC)
                return True
            except queue.Full:
                if self.deadline.expired():
                    return False

    def run(self, repos: Sequence[RepositoryDescriptor]) -> CloneReport:
        """Dispatch every repository and return once all workers have exited."""
        report = CloneReport(requested=len(repos))
        work: queue.Queue = queue.Queue(maxsize=1)
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="clone") as pool:
            futures = [pool.submit(self._worker, i, work, report) for i in range(self.workers)]
            try:
                for i, repo in enumerate(repos, 1):
                    if not self._put(work, repo.clone_url):
                        report.deadline_hit = True
                        print(f"deadline exceeded, {len(repos) - i + 1} repositories not dispatched")
                        break
                    print(f"cloning of '{repo.name}' requested, {i}/{len(repos)}")
                else:
                    for _ in futures:
                        if not self._put(work, _DONE):
                            break
            except BaseException:
                self.deadline.cancel()
                raise
            for f in futures:
                f.result()
        # workers that left on the deadline may have stranded a queued item
        if report.attempted < report.requested:
            report.deadline_hit = True
        return report
