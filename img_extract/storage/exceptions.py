"""Custom exceptions for disk image operations.

Every failure surfaced by this package is a ``DiskError`` so callers can
handle the whole surface with a single ``except`` clause.

Exception Hierarchy:
    DiskError (base)
        ├── CommandError
        ├── PartitionNotFoundError
        └── UnsupportedFilesystemError

Usage:
    from img_extract.storage.exceptions import DiskError

    try:
        extract_image_partitions(image, [(1, boot_dir)], temp_dir)
    except DiskError as error:
        log.error(f"Extraction failed: {error}")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from img_extract.domain.models import FsType


class DiskError(Exception):
    """Base exception for all disk image operations."""

    def __init__(self, message: str, cause: BaseException | None = None):
        self.message = message
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class CommandError(DiskError):
    """An external program could not be launched or exited non-zero."""

    def __init__(
        self,
        program: str,
        message: str,
        returncode: int | None = None,
        stderr: str | None = None,
        cause: BaseException | None = None,
    ):
        self.program = program
        self.returncode = returncode
        self.stderr = stderr
        msg = f"{message} ({program}"
        if returncode is not None:
            msg += f" exited with status {returncode}"
        msg += ")"
        super().__init__(msg, cause)


class PartitionNotFoundError(DiskError):
    """The requested partition number is not in the partition table."""

    def __init__(self, partition_number: int):
        self.partition_number = partition_number
        super().__init__(f"partition {partition_number} not found in image")


class UnsupportedFilesystemError(DiskError):
    """A partition holds a filesystem we cannot extract."""

    def __init__(self, partition_number: int, fs_type: FsType):
        self.partition_number = partition_number
        self.fs_type = fs_type
        super().__init__(
            f"partition {partition_number} has unsupported filesystem type: {fs_type}"
        )
