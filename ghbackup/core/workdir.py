"""Working directory lifecycle and the listing metadata file."""

from __future__ import annotations

import json
import os
import shutil
from datetime import datetime
from typing import Sequence

from .constants import DIR_DATE_FORMAT, RESPONSES_FILENAME
from .errors import FilesystemError
from .types import RepositoryDescriptor


def working_dir_name(org: str, now: datetime | None = None) -> str:
    now = now or datetime.now()
    return f"{org}-archive-{now.strftime(DIR_DATE_FORMAT)}"


def create_working_dir(parent: str, org: str, now: datetime | None = None) -> str:
    """Create ``<parent>/<org>-archive-<timestamp>``; it must not exist yet."""
    path = os.path.join(parent, working_dir_name(org, now))
    try:
        os.mkdir(path)
    except OSError as e:
        raise FilesystemError(f"could not create directory {path}: {e}") from e
    return path


def remove_working_dir(path: str) -> None:
    try:
        shutil.rmtree(path)
    except OSError as e:
        raise FilesystemError(f"could not remove working directory {path}: {e}") from e


def write_metadata(repos: Sequence[RepositoryDescriptor], workdir: str) -> str:
    """Write the full listing to ``responses.json`` inside ``workdir``."""
    print("saving fetched repositories responses to file...")
    path = os.path.join(workdir, RESPONSES_FILENAME)
    try:
        payload = json.dumps([r.to_json() for r in repos], indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise FilesystemError(f"could not serialize repositories: {e}") from e
    try:
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(payload)
    except OSError as e:
        raise FilesystemError(f"could not write to file {path}: {e}") from e
    print("fetched repositories responses saved to file")
    return path
