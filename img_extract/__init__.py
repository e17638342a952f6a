"""Extract partitions and their filesystem trees from raw disk images."""

from .__version__ import __version__
from .domain.models import ExtractionRequest, FsKind, FsType, Partition, PartitionTable
from .storage import (
    CommandError,
    DiskError,
    PartitionNotFoundError,
    UnsupportedFilesystemError,
    extract_filesystem,
    extract_image_partitions,
    extract_partition,
    get_disk_id,
    mkfs_ext4,
    mkfs_vfat,
    probe_fs_type,
    read_partition_table,
)

__all__ = [
    "CommandError",
    "DiskError",
    "ExtractionRequest",
    "FsKind",
    "FsType",
    "Partition",
    "PartitionNotFoundError",
    "PartitionTable",
    "UnsupportedFilesystemError",
    "__version__",
    "extract_filesystem",
    "extract_image_partitions",
    "extract_partition",
    "get_disk_id",
    "mkfs_ext4",
    "mkfs_vfat",
    "probe_fs_type",
    "read_partition_table",
]
