"""Package a directory tree into a zip archive, keeping symlinks as links."""

from __future__ import annotations

import os
import shutil
import stat
import time
import zipfile
from typing import Iterator

from .errors import FilesystemError
from .utils import archive_name

UNIX_SYSTEM = 3
COPY_BUFSIZE = 1024 * 1024


def iter_tree(root: str) -> Iterator[os.DirEntry]:
    """Yield regular files and symlinks under ``root`` in lexical order.

    Symlinks are never followed, including symlinks to directories.
    Directories themselves and special files are not yielded.
    """
    with os.scandir(root) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        if entry.is_symlink():
            yield entry
        elif entry.is_dir(follow_symlinks=False):
            yield from iter_tree(entry.path)
        elif entry.is_file(follow_symlinks=False):
            yield entry


def _zip_date(mtime: float) -> tuple[int, int, int, int, int, int]:
    date = time.localtime(mtime)[:6]
    return max(date, (1980, 1, 1, 0, 0, 0))


def _write_symlink(zf: zipfile.ZipFile, root: str, entry: os.DirEntry) -> None:
    st = entry.stat(follow_symlinks=False)
    info = zipfile.ZipInfo(archive_name(root, entry.path), date_time=_zip_date(st.st_mtime))
    info.create_system = UNIX_SYSTEM
    info.external_attr = (stat.S_IFLNK | stat.S_IMODE(st.st_mode)) << 16
    info.compress_type = zipfile.ZIP_STORED
    # raw bytes: link targets need not be valid UTF-8
    zf.writestr(info, os.readlink(os.fsencode(entry.path)))


def _write_file(zf: zipfile.ZipFile, root: str, entry: os.DirEntry) -> None:
    info = zipfile.ZipInfo.from_file(entry.path, archive_name(root, entry.path), strict_timestamps=False)
    info.compress_type = zipfile.ZIP_DEFLATED
    with open(entry.path, "rb") as src, zf.open(info, "w") as dst:
        shutil.copyfileobj(src, dst, COPY_BUFSIZE)


def package_directory(root: str, archive_path: str) -> int:
    """Write every file and symlink under ``root`` into ``archive_path``.

    Returns the number of entries written. On any I/O or encoding error the
    partial archive is deleted and :class:`FilesystemError` is raised.
    """
    count = 0
    try:
        with zipfile.ZipFile(archive_path, "w", zipfile.ZIP_DEFLATED, strict_timestamps=False) as zf:
            for entry in iter_tree(root):
                if entry.is_symlink():
                    _write_symlink(zf, root, entry)
                else:
                    _write_file(zf, root, entry)
                count += 1
    except (OSError, ValueError) as e:
        try:
            os.remove(archive_path)
        except FileNotFoundError:
            pass
        raise FilesystemError(f"could not fill zip archive {archive_path}: {e}") from e
    return count

