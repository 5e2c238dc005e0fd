"""Lightweight helpers: naming, globs, archive paths, credential masking."""
from __future__ import annotations

import fnmatch
import os
import posixpath
from pathlib import PurePath
from typing import Sequence
from urllib.parse import urlparse


def matches_any_glob(name: str, patterns: Sequence[str]) -> bool:
    if not patterns:
        return True  # no filters = match all
    return any(fnmatch.fnmatchcase(name, pat) for pat in patterns)


def split_globs(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(p.strip() for p in value.split(",") if p.strip())


def repo_dir_name(clone_url: str) -> str:
    """https://host/org/myrepo.git -> myrepo"""
    path = urlparse(clone_url).path or clone_url
    base = posixpath.basename(path.rstrip("/"))
    if base.endswith(".git"):
        base = base[: -len(".git")]
    return base


def archive_name(root: str, path: str) -> str:
    """Archive-internal name for ``path``: relative to ``root``, forward slashes.

    Bytes that are not valid UTF-8 (legal in POSIX file names) come out as
    ``\\xNN`` escapes so the name can be stored in the zip.
    """
    rel = PurePath(os.path.relpath(path, root)).as_posix()
    return os.fsencode(rel).decode("utf-8", "backslashreplace")


def mask_secret(text: str, secret: str | None, replacement: str = "*****") -> str:
    if not secret:
        return text
    return text.replace(secret, replacement)
