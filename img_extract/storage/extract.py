"""Extract partitions and their filesystem contents from disk images.

For each requested partition the pipeline is:

    1. copy the partition's raw bytes to ``<temp_dir>/partition-<N>.img``
    2. probe the filesystem type with blkid
    3. unpack the filesystem into the destination directory
    4. remove the temporary partition image

Partitions are processed strictly in request order. A failure stops the
run immediately; destinations already populated are left in place.

Example:
    >>> from img_extract.storage.extract import extract_image_partitions
    >>> table = extract_image_partitions(
    ...     "sdcard.img",
    ...     [(2, Path("out/root")), (1, Path("out/boot"))],
    ...     Path("/tmp/work"),
    ... )
"""

from __future__ import annotations

import contextlib
from pathlib import Path
from typing import Iterable, Tuple

from img_extract.domain.models import PartitionTable
from img_extract.logging import operation_context

from .commands import PathLike
from .exceptions import PartitionNotFoundError, UnsupportedFilesystemError
from .filesystem import extract_filesystem, probe_fs_type
from .partition_image import extract_partition
from .partition_table import read_partition_table


def partition_image_path(temp_dir: PathLike, partition_number: int) -> Path:
    """Path of the temporary raw image for ``partition_number``."""
    return Path(temp_dir) / f"partition-{partition_number}.img"


def _remove_quietly(path: Path) -> None:
    with contextlib.suppress(OSError):
        path.unlink()


def extract_image_partitions(
    image_path: PathLike,
    partitions_config: Iterable[Tuple[int, PathLike]],
    temp_dir: PathLike,
) -> PartitionTable:
    """Extract the requested partitions of ``image_path``.

    Args:
        image_path: Disk image containing a partition table
        partitions_config: ``(partition_number, destination_dir)`` pairs
        temp_dir: Existing directory for temporary partition images; must
            not be shared with a concurrent call

    Returns:
        The partition table read from the image

    Raises:
        DiskError: On the first failing partition
    """
    with operation_context("extract", image=str(image_path)) as log:
        table = read_partition_table(image_path)

        for part_num, dst_dir in partitions_config:
            partition = table.get(part_num)
            if partition is None:
                raise PartitionNotFoundError(part_num)

            part_image_path = partition_image_path(temp_dir, part_num)
            extract_partition(image_path, partition, table.block_size, part_image_path)

            fs_type = probe_fs_type(part_image_path)
            if not fs_type.is_supported():
                _remove_quietly(part_image_path)
                raise UnsupportedFilesystemError(part_num, fs_type)

            extract_filesystem(part_image_path, dst_dir, fs_type)

            log.info(f"extracted partition {part_num} ({fs_type}) to {dst_dir}")

            _remove_quietly(part_image_path)

        return table
