"""Filesystem probing and extraction for partition images.

Filesystems are never parsed in-process. ``blkid`` identifies the type
and the contents are unpacked by mature external tools:

    ext2/3/4:  debugfs -R "rdump / ." <image>   (run inside the destination)
    FAT:       mcopy -i <image> -snop :: <destination>
"""

from __future__ import annotations

from pathlib import Path

from img_extract.domain.models import FsKind, FsType
from img_extract.logging import get_logger

from .commands import PathLike, read_command, run_command
from .exceptions import DiskError


# No job_id binding: the orchestrator's operation context supplies it.
log = get_logger(source="extract", tags=["extract", "storage"])


def probe_fs_type(image_path: PathLike) -> FsType:
    """Probe the filesystem type of an image file using ``blkid``.

    This examines the filesystem signatures in the image rather than
    trusting partition type metadata. A non-zero blkid exit (for instance
    when no signature is found at all) is raised as an error, not mapped
    to an unknown type.
    """
    output = read_command(
        ["blkid", "-o", "value", "-s", "TYPE", image_path],
        context="unable to probe filesystem type with blkid",
    )
    fs_type = FsType.from_blkid_type(output.strip())
    log.debug(f"Probed {image_path}: {fs_type}")
    return fs_type


def extract_filesystem(partition_image: PathLike, dst_dir: PathLike, fs_type: FsType) -> None:
    """Extract filesystem contents from a partition image into ``dst_dir``.

    The destination is created if needed and never cleared beforehand.

    Raises:
        DiskError: If the type is unsupported or the extraction tool fails
    """
    dst_dir = Path(dst_dir)
    try:
        dst_dir.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise DiskError("unable to create destination directory", cause=error) from error

    # debugfs runs with cwd=dst_dir, so a relative image path would resolve there.
    try:
        image = Path(partition_image).resolve(strict=True)
    except OSError as error:
        raise DiskError("unable to canonicalize partition image path", cause=error) from error

    if fs_type.kind == FsKind.EXT:
        run_command(
            ["debugfs", "-R", "rdump / .", image],
            cwd=dst_dir,
            context="unable to extract ext filesystem with debugfs",
        )
    elif fs_type.kind == FsKind.FAT:
        run_command(
            ["mcopy", "-i", image, "-snop", "::", dst_dir],
            context="unable to extract FAT filesystem with mcopy",
        )
    else:
        raise DiskError(f"cannot extract filesystem: unsupported type {fs_type}")
