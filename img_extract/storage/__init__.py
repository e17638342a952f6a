"""Disk image storage operations."""

from .disk import get_disk_id, mkfs_ext4, mkfs_vfat
from .exceptions import (
    CommandError,
    DiskError,
    PartitionNotFoundError,
    UnsupportedFilesystemError,
)
from .extract import extract_image_partitions
from .filesystem import extract_filesystem, probe_fs_type
from .partition_image import extract_partition
from .partition_table import read_partition_table

__all__ = [
    "CommandError",
    "DiskError",
    "PartitionNotFoundError",
    "UnsupportedFilesystemError",
    "extract_filesystem",
    "extract_image_partitions",
    "extract_partition",
    "get_disk_id",
    "mkfs_ext4",
    "mkfs_vfat",
    "probe_fs_type",
    "read_partition_table",
]
