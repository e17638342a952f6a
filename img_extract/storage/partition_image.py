"""Raw partition extraction.

Copies the byte range of a single partition out of a disk image into a
standalone file that filesystem tools can work on directly.
"""

from __future__ import annotations

import os
from typing import Optional

from img_extract.config import settings
from img_extract.domain.models import Partition
from img_extract.logging import get_logger

from .commands import PathLike
from .exceptions import DiskError


log = get_logger(source="extract", tags=["extract", "storage"])


def extract_partition(
    image_path: PathLike,
    partition: Partition,
    block_size: int,
    dst_path: PathLike,
    *,
    chunk_size: Optional[int] = None,
) -> int:
    """Copy ``partition`` out of ``image_path`` into ``dst_path``.

    The destination is truncated first and ends up exactly as long as the
    number of bytes read. Hitting end-of-file before the declared size is
    accepted (the partition file is then shorter); a warning is logged
    unless ``warn_on_short_copy`` is disabled.

    Returns:
        Number of bytes written
    """
    start_bytes = partition.start_bytes(block_size)
    size_bytes = partition.size_bytes(block_size)
    if chunk_size is None:
        chunk_size = settings.get_int("copy_chunk_size", settings.DEFAULT_COPY_CHUNK_SIZE)
        if chunk_size <= 0:
            log.warning(
                f"Ignoring copy_chunk_size setting {chunk_size}, "
                f"using {settings.DEFAULT_COPY_CHUNK_SIZE}"
            )
            chunk_size = settings.DEFAULT_COPY_CHUNK_SIZE
    elif chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    try:
        src = open(image_path, "rb")
    except OSError as error:
        raise DiskError("unable to open disk image", cause=error) from error
    with src:
        try:
            dst = open(dst_path, "wb")
        except OSError as error:
            raise DiskError("unable to create partition file", cause=error) from error
        with dst:
            try:
                src.seek(start_bytes, os.SEEK_SET)
            except (OSError, ValueError) as error:
                raise DiskError("unable to seek in disk image", cause=error) from error

            buffer = bytearray(chunk_size)
            view = memoryview(buffer)
            remaining = size_bytes
            written = 0
            while remaining > 0:
                to_read = min(remaining, chunk_size)
                try:
                    bytes_read = src.readinto(view[:to_read])
                except OSError as error:
                    raise DiskError("unable to read from disk image", cause=error) from error
                if not bytes_read:
                    break
                try:
                    dst.write(view[:bytes_read])
                except OSError as error:
                    raise DiskError("unable to write to partition file", cause=error) from error
                remaining -= bytes_read
                written += bytes_read
                log.trace(f"Copied {written}/{size_bytes} bytes of partition {partition.number}")

    if written < size_bytes and settings.get_bool("warn_on_short_copy", True):
        log.warning(
            f"partition {partition.number}: image ended after {written} of "
            f"{size_bytes} bytes, partition file is truncated"
        )
    else:
        log.debug(f"Copied partition {partition.number} ({written} bytes) to {dst_path}")
    return written
