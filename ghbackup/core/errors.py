"""Exceptions raised by ghbackup.

Everything fatal derives from :class:`BackupError`; the CLI turns it into a
non-zero exit. Individual clone failures are not exceptions, they are
collected into a ``CloneReport``.
"""

from __future__ import annotations


class BackupError(RuntimeError):
    pass


class ConfigError(BackupError):
    pass


class ListingError(BackupError):
    pass


class NetworkError(ListingError):
    pass


class ProtocolError(ListingError):
    def __init__(self, message: str, *, status: int | None = None, page: int | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.page = page


class DecodeError(ListingError):
    pass


class FilesystemError(BackupError):
    pass


class DeadlineExceeded(BackupError):
    def __init__(self, message: str = "deadline exceeded", *, archive_path: str | None = None) -> None:
        super().__init__(message)
        self.archive_path = archive_path
